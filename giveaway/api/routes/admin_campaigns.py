from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from giveaway.api.deps import get_session_factory, require_admin
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import (
    CampaignCreateBody,
    CampaignDetailResponse,
    CampaignResponse,
    CampaignUpdateBody,
    OkResponse,
)
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.service import CampaignDetail, CampaignService
from giveaway.core.errors import DomainError
from giveaway.db.session import SessionFactory

router = APIRouter(prefix="/admin/campaigns", tags=["admin", "campaigns"])


def _detail_response(detail: CampaignDetail) -> CampaignDetailResponse:
    return CampaignDetailResponse(
        **CampaignResponse.model_validate(detail.campaign).model_dump(),
        confirmed_count=detail.confirmed_count,
        pending_count=detail.pending_count,
        shipped_count=detail.shipped_count,
    )


@router.get("", response_model=list[CampaignDetailResponse])
async def list_campaigns(
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> list[CampaignDetailResponse]:
    async with session_factory() as session:
        details = await CampaignService.list_campaigns(session)
    return [_detail_response(detail) for detail in details]


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    payload: CampaignCreateBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> CampaignResponse:
    try:
        async with session_factory.begin() as session:
            campaign = await CampaignService.create_campaign(
                session,
                principal=principal,
                slug=payload.slug,
                fields=payload.campaign_fields(),
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return CampaignResponse.model_validate(campaign)


@router.get("/{campaign_id}", response_model=CampaignDetailResponse)
async def get_campaign(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> CampaignDetailResponse:
    try:
        async with session_factory() as session:
            detail = await CampaignService.get_campaign(session, campaign_id)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return _detail_response(detail)


@router.patch("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: UUID,
    payload: CampaignUpdateBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> CampaignResponse:
    try:
        async with session_factory.begin() as session:
            campaign = await CampaignService.update_campaign(
                session,
                principal=principal,
                campaign_id=campaign_id,
                fields=payload.campaign_fields(),
                change_summary=payload.change_summary,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return CampaignResponse.model_validate(campaign)


@router.delete("/{campaign_id}", response_model=OkResponse)
async def delete_campaign(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    try:
        async with session_factory.begin() as session:
            await CampaignService.delete_campaign(
                session,
                principal=principal,
                campaign_id=campaign_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return OkResponse()
