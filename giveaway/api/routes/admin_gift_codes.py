from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from giveaway.api.deps import get_session_factory, require_admin
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import (
    GiftCodeBody,
    GiftCodeListResponse,
    GiftCodeResponse,
    OkResponse,
    ProfileResponse,
    PublicCampaignResponse,
)
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.gift_codes import GiftCodeService, build_gift_url
from giveaway.campaigns.service import CampaignService
from giveaway.core.errors import DomainError
from giveaway.db.models.admin_gift_codes import AdminGiftCode
from giveaway.db.session import SessionFactory

router = APIRouter(
    prefix="/admin/campaigns/{campaign_id}/gift-codes",
    tags=["admin", "gift-codes"],
)


def _gift_code_response(gift_code: AdminGiftCode, *, slug: str) -> GiftCodeResponse:
    return GiftCodeResponse(
        id=gift_code.id,
        campaign_id=gift_code.campaign_id,
        code=gift_code.code,
        label=gift_code.label,
        custom_message=gift_code.custom_message,
        custom_display_name=gift_code.custom_display_name,
        show_name=gift_code.show_name,
        show_linkedin=gift_code.show_linkedin,
        show_bio=gift_code.show_bio,
        show_phone=gift_code.show_phone,
        show_email=gift_code.show_email,
        created_at=gift_code.created_at,
        gift_url=build_gift_url(slug=slug, code=gift_code.code),
    )


@router.get("", response_model=GiftCodeListResponse)
async def list_gift_codes(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> GiftCodeListResponse:
    try:
        async with session_factory() as session:
            listing = await GiftCodeService.list_codes(
                session,
                principal=principal,
                campaign_id=campaign_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc

    return GiftCodeListResponse(
        codes=[_gift_code_response(code, slug=listing.campaign.slug) for code in listing.codes],
        campaign=PublicCampaignResponse.model_validate(listing.campaign),
        profile=ProfileResponse.model_validate(listing.profile) if listing.profile else None,
    )


@router.post("", response_model=GiftCodeResponse, status_code=status.HTTP_201_CREATED)
async def create_gift_code(
    campaign_id: UUID,
    payload: GiftCodeBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> GiftCodeResponse:
    try:
        async with session_factory.begin() as session:
            gift_code = await GiftCodeService.create_code(
                session,
                principal=principal,
                campaign_id=campaign_id,
                options=payload.options(),
            )
            campaign = await CampaignService.get_or_raise(session, campaign_id)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return _gift_code_response(gift_code, slug=campaign.slug)


@router.patch("/{gift_code_id}", response_model=GiftCodeResponse)
async def update_gift_code(
    campaign_id: UUID,
    gift_code_id: UUID,
    payload: GiftCodeBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> GiftCodeResponse:
    try:
        async with session_factory.begin() as session:
            gift_code = await GiftCodeService.update_code(
                session,
                principal=principal,
                campaign_id=campaign_id,
                gift_code_id=gift_code_id,
                options=payload.options(),
            )
            campaign = await CampaignService.get_or_raise(session, campaign_id)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return _gift_code_response(gift_code, slug=campaign.slug)


@router.delete("/{gift_code_id}", response_model=OkResponse)
async def delete_gift_code(
    campaign_id: UUID,
    gift_code_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    try:
        async with session_factory.begin() as session:
            await GiftCodeService.delete_code(
                session,
                principal=principal,
                campaign_id=campaign_id,
                gift_code_id=gift_code_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return OkResponse()
