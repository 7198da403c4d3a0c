from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from giveaway.admin_users.service import AdminUserService
from giveaway.api.deps import get_mailer, get_session_factory, require_admin
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import (
    AdminUserCreateBody,
    AdminUserResponse,
    AdminUserUpdateBody,
    OkResponse,
)
from giveaway.auth.types import AdminPrincipal
from giveaway.core.errors import DomainError
from giveaway.db.session import SessionFactory
from giveaway.services.mailer import Mailer

router = APIRouter(prefix="/admin/users", tags=["admin", "users"])


@router.get("", response_model=list[AdminUserResponse])
async def list_users(
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> list[AdminUserResponse]:
    try:
        async with session_factory() as session:
            users = await AdminUserService.list_users(session, principal=principal)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return [AdminUserResponse.model_validate(user) for user in users]


@router.post("", response_model=AdminUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: AdminUserCreateBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
    mailer: Mailer = Depends(get_mailer),
) -> AdminUserResponse:
    try:
        async with session_factory.begin() as session:
            user = await AdminUserService.create_user(
                session,
                principal=principal,
                email=payload.email,
                name=payload.name,
                role=payload.role,
                mailer=mailer,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return AdminUserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=AdminUserResponse)
async def update_user(
    user_id: UUID,
    payload: AdminUserUpdateBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> AdminUserResponse:
    try:
        async with session_factory.begin() as session:
            user = await AdminUserService.update_user(
                session,
                principal=principal,
                user_id=user_id,
                role=payload.role,
                is_active=payload.is_active,
                name=payload.name,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return AdminUserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=OkResponse)
async def delete_user(
    user_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    try:
        async with session_factory.begin() as session:
            await AdminUserService.delete_user(session, principal=principal, user_id=user_id)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return OkResponse()
