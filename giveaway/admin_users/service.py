from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.admin_users.errors import (
    AdminUserExistsError,
    AdminUserHasCampaignsError,
    AdminUserInvalidError,
    AdminUserNotFoundError,
    AdminUserSelfChangeError,
    ProfileInvalidError,
)
from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.permissions import can_manage_users
from giveaway.auth.types import ROLES, AdminPrincipal
from giveaway.db.models.admin_users import AdminUser
from giveaway.db.repo.admin_users_repo import AdminUsersRepo
from giveaway.services.addresses import normalize_email
from giveaway.services.mailer import MailDeliveryError, Mailer

logger = structlog.get_logger(__name__)

PROFILE_FIELDS = ("display_name", "linkedin_url", "bio", "phone")
LINKEDIN_PREFIXES = ("https://www.linkedin.com/", "https://linkedin.com/")


def _ensure_can_manage(principal: AdminPrincipal) -> None:
    if not can_manage_users(principal.role):
        raise PermissionDeniedError("You do not have permission to manage users")


def _validate_role(role: str) -> str:
    if role not in ROLES:
        raise AdminUserInvalidError("Invalid role")
    return role


def clean_profile_fields(fields: Mapping[str, Any]) -> dict[str, str | None]:
    cleaned: dict[str, str | None] = {}
    for name in PROFILE_FIELDS:
        if name not in fields:
            continue
        value = fields[name]
        if isinstance(value, str):
            value = value.strip()
        cleaned[name] = value or None

    linkedin_url = cleaned.get("linkedin_url")
    if linkedin_url and not linkedin_url.startswith(LINKEDIN_PREFIXES):
        raise ProfileInvalidError(
            "LinkedIn URL must start with https://www.linkedin.com/ or https://linkedin.com/"
        )
    return cleaned


class AdminUserService:
    @staticmethod
    async def list_users(session: AsyncSession, *, principal: AdminPrincipal) -> list[AdminUser]:
        _ensure_can_manage(principal)
        return await AdminUsersRepo.list_all(session)

    @staticmethod
    async def create_user(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        email: str,
        name: str,
        role: str,
        mailer: Mailer,
        now_utc: datetime | None = None,
    ) -> AdminUser:
        _ensure_can_manage(principal)
        now_utc = now_utc or datetime.now(timezone.utc)

        normalized_email = normalize_email(email)
        clean_name = name.strip()
        if not normalized_email or not clean_name:
            raise AdminUserInvalidError("Email, name, and role are required")
        _validate_role(role)
        if await AdminUsersRepo.get_by_email(session, normalized_email) is not None:
            raise AdminUserExistsError

        user = await AdminUsersRepo.create(
            session,
            user=AdminUser(
                id=uuid4(),
                email=normalized_email,
                name=clean_name,
                role=role,
                is_active=True,
                created_by=principal.admin_id,
                updated_by=principal.admin_id,
                created_at=now_utc,
                updated_at=now_utc,
            ),
        )

        try:
            await mailer.send_invite(user.email, user.name, role)
        except MailDeliveryError:
            logger.warning("admin_invite_email_failed", admin_user_id=str(user.id))

        logger.info(
            "admin_user_created",
            admin_user_id=str(user.id),
            role=role,
            created_by=str(principal.admin_id),
        )
        return user

    @staticmethod
    async def update_user(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        user_id: UUID,
        role: str | None = None,
        is_active: bool | None = None,
        name: str | None = None,
        now_utc: datetime | None = None,
    ) -> AdminUser:
        _ensure_can_manage(principal)
        if user_id == principal.admin_id:
            raise AdminUserSelfChangeError("Cannot modify your own account")

        now_utc = now_utc or datetime.now(timezone.utc)
        user = await AdminUsersRepo.get_by_id(session, user_id)
        if user is None:
            raise AdminUserNotFoundError

        if role is not None:
            user.role = _validate_role(role)
        if is_active is not None:
            user.is_active = is_active
        if name is not None:
            if not name.strip():
                raise AdminUserInvalidError("Name must not be empty")
            user.name = name.strip()
        user.updated_by = principal.admin_id
        user.updated_at = now_utc
        await session.flush()

        logger.info(
            "admin_user_updated",
            admin_user_id=str(user.id),
            updated_by=str(principal.admin_id),
        )
        return user

    @staticmethod
    async def delete_user(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        user_id: UUID,
    ) -> None:
        _ensure_can_manage(principal)
        if user_id == principal.admin_id:
            raise AdminUserSelfChangeError("Cannot delete your own account")
        if await AdminUsersRepo.has_created_campaigns(session, user_id):
            raise AdminUserHasCampaignsError

        deleted = await AdminUsersRepo.delete(session, user_id)
        if deleted == 0:
            raise AdminUserNotFoundError
        logger.info(
            "admin_user_deleted",
            admin_user_id=str(user_id),
            deleted_by=str(principal.admin_id),
        )

    @staticmethod
    async def get_profile(session: AsyncSession, *, principal: AdminPrincipal) -> AdminUser:
        user = await AdminUsersRepo.get_by_id(session, principal.admin_id)
        if user is None:
            raise AdminUserNotFoundError("Profile not found")
        return user

    @staticmethod
    async def update_profile(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        fields: Mapping[str, Any],
        now_utc: datetime | None = None,
    ) -> AdminUser:
        now_utc = now_utc or datetime.now(timezone.utc)
        cleaned = clean_profile_fields(fields)
        user = await AdminUserService.get_profile(session, principal=principal)

        for name, value in cleaned.items():
            setattr(user, name, value)
        user.updated_by = principal.admin_id
        user.updated_at = now_utc
        await session.flush()
        return user
