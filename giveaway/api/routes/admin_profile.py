from __future__ import annotations

from fastapi import APIRouter, Depends

from giveaway.admin_users.service import AdminUserService
from giveaway.api.deps import get_session_factory, require_admin
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import ProfileBody, ProfileResponse
from giveaway.auth.types import AdminPrincipal
from giveaway.core.errors import DomainError
from giveaway.db.session import SessionFactory

router = APIRouter(prefix="/admin/profile", tags=["admin", "profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> ProfileResponse:
    try:
        async with session_factory() as session:
            user = await AdminUserService.get_profile(session, principal=principal)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return ProfileResponse.model_validate(user)


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> ProfileResponse:
    try:
        async with session_factory.begin() as session:
            user = await AdminUserService.update_profile(
                session,
                principal=principal,
                fields=payload.profile_fields(),
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return ProfileResponse.model_validate(user)
