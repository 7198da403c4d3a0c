from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from giveaway.api.deps import get_session_factory, require_admin
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import (
    CampaignResponse,
    CampaignUpdateBody,
    CampaignVersionResponse,
    OkResponse,
    RevertBody,
    VersionHistoryResponse,
)
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.versions import CampaignVersionService
from giveaway.core.errors import DomainError
from giveaway.db.session import SessionFactory

router = APIRouter(prefix="/admin/campaigns/{campaign_id}", tags=["admin", "versions"])


@router.get("/versions", response_model=VersionHistoryResponse)
async def list_versions(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> VersionHistoryResponse:
    try:
        async with session_factory() as session:
            history = await CampaignVersionService.list_versions(session, campaign_id)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return VersionHistoryResponse.model_validate(history)


@router.post("/draft", response_model=CampaignVersionResponse)
async def save_draft(
    campaign_id: UUID,
    payload: CampaignUpdateBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> CampaignVersionResponse:
    try:
        async with session_factory.begin() as session:
            draft = await CampaignVersionService.save_draft(
                session,
                principal=principal,
                campaign_id=campaign_id,
                fields=payload.campaign_fields(),
                change_summary=payload.change_summary,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return CampaignVersionResponse.model_validate(draft)


@router.post("/publish-draft", response_model=CampaignResponse)
async def publish_draft(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> CampaignResponse:
    try:
        async with session_factory.begin() as session:
            campaign = await CampaignVersionService.publish_draft(
                session,
                principal=principal,
                campaign_id=campaign_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return CampaignResponse.model_validate(campaign)


@router.post("/discard-draft", response_model=OkResponse)
async def discard_draft(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    try:
        async with session_factory.begin() as session:
            await CampaignVersionService.discard_draft(
                session,
                principal=principal,
                campaign_id=campaign_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return OkResponse()


@router.post("/revert", response_model=CampaignResponse)
async def revert_campaign(
    campaign_id: UUID,
    payload: RevertBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> CampaignResponse:
    try:
        async with session_factory.begin() as session:
            campaign = await CampaignVersionService.revert(
                session,
                principal=principal,
                campaign_id=campaign_id,
                version_number=payload.version_number,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return CampaignResponse.model_validate(campaign)
