from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.types import AdminAuthFailure, AdminAuthResult, AdminPrincipal
from giveaway.core.config import get_settings
from giveaway.db.models.admin_sessions import AdminSession
from giveaway.db.models.admin_users import AdminUser
from giveaway.db.repo.admin_sessions_repo import AdminSessionsRepo
from giveaway.db.repo.admin_users_repo import AdminUsersRepo
from giveaway.services.hashing import generate_session_token, hash_value

logger = structlog.get_logger(__name__)

SESSION_COOKIE_NAME = "admin_session"


def session_ttl() -> timedelta:
    return timedelta(days=get_settings().admin_session_ttl_days)


class SessionService:
    @staticmethod
    async def create_session(
        session: AsyncSession,
        *,
        admin: AdminUser,
        ip_hash: str | None,
        user_agent: str | None,
        now_utc: datetime | None = None,
    ) -> str:
        """Persist a new session and return the raw token; only its hash is stored."""
        now_utc = now_utc or datetime.now(timezone.utc)
        token = generate_session_token()
        await AdminSessionsRepo.create(
            session,
            admin_session=AdminSession(
                id=uuid4(),
                admin_user_id=admin.id,
                email=admin.email,
                session_token_hash=hash_value(token),
                ip_hash=ip_hash,
                user_agent=user_agent,
                created_at=now_utc,
                expires_at=now_utc + session_ttl(),
            ),
        )
        return token

    @staticmethod
    async def verify_session(
        session: AsyncSession,
        token: str,
        *,
        now_utc: datetime | None = None,
    ) -> AdminSession | None:
        now_utc = now_utc or datetime.now(timezone.utc)
        admin_session = await AdminSessionsRepo.get_by_token_hash(session, hash_value(token))
        if admin_session is None or admin_session.revoked_at is not None:
            return None
        if now_utc >= admin_session.expires_at:
            return None
        return admin_session

    @staticmethod
    async def revoke_session(
        session: AsyncSession,
        token: str,
        *,
        now_utc: datetime | None = None,
    ) -> None:
        now_utc = now_utc or datetime.now(timezone.utc)
        revoked = await AdminSessionsRepo.revoke_by_token_hash(
            session,
            token_hash=hash_value(token),
            now_utc=now_utc,
        )
        if revoked:
            logger.info("admin_session_revoked")

    @staticmethod
    async def authenticate(
        session: AsyncSession,
        token: str | None,
        *,
        now_utc: datetime | None = None,
    ) -> AdminAuthResult:
        if not token:
            return AdminAuthFailure(kind="no_session")

        admin_session = await SessionService.verify_session(session, token, now_utc=now_utc)
        if admin_session is None:
            return AdminAuthFailure(kind="invalid_session")

        admin = await AdminUsersRepo.get_by_id(session, admin_session.admin_user_id)
        if admin is None:
            return AdminAuthFailure(kind="invalid_session")
        if not admin.is_active:
            logger.warning("admin_session_inactive_account", admin_user_id=str(admin.id))
            return AdminAuthFailure(kind="inactive_account")

        return AdminPrincipal(
            admin_id=admin.id,
            email=admin.email,
            name=admin.name,
            role=admin.role,
            session_id=admin_session.id,
        )
