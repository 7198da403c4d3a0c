from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from giveaway.api.deps import get_session_factory, require_admin
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import (
    InviteCodeBody,
    InviteCodeResponse,
    InviteCodeToggleBody,
    OkResponse,
)
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.invite_codes import InviteCodeService
from giveaway.core.errors import DomainError
from giveaway.db.session import SessionFactory

router = APIRouter(
    prefix="/admin/campaigns/{campaign_id}/invite-codes",
    tags=["admin", "invite-codes"],
)


@router.get("", response_model=list[InviteCodeResponse])
async def list_invite_codes(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> list[InviteCodeResponse]:
    try:
        async with session_factory() as session:
            codes = await InviteCodeService.list_codes(
                session,
                principal=principal,
                campaign_id=campaign_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return [InviteCodeResponse.model_validate(code) for code in codes]


@router.post("", response_model=InviteCodeResponse, status_code=status.HTTP_201_CREATED)
async def create_invite_code(
    campaign_id: UUID,
    payload: InviteCodeBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> InviteCodeResponse:
    try:
        async with session_factory.begin() as session:
            invite_code = await InviteCodeService.create_code(
                session,
                principal=principal,
                campaign_id=campaign_id,
                code=payload.code,
                max_uses=payload.max_uses,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return InviteCodeResponse.model_validate(invite_code)


@router.patch("/{invite_code_id}", response_model=InviteCodeResponse)
async def toggle_invite_code(
    campaign_id: UUID,
    invite_code_id: UUID,
    payload: InviteCodeToggleBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> InviteCodeResponse:
    try:
        async with session_factory.begin() as session:
            invite_code = await InviteCodeService.set_active(
                session,
                principal=principal,
                campaign_id=campaign_id,
                invite_code_id=invite_code_id,
                is_active=payload.is_active,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return InviteCodeResponse.model_validate(invite_code)


@router.delete("/{invite_code_id}", response_model=OkResponse)
async def delete_invite_code(
    campaign_id: UUID,
    invite_code_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    try:
        async with session_factory.begin() as session:
            await InviteCodeService.delete_code(
                session,
                principal=principal,
                campaign_id=campaign_id,
                invite_code_id=invite_code_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return OkResponse()
