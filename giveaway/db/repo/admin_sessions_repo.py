from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.admin_sessions import AdminSession


class AdminSessionsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, admin_session: AdminSession) -> AdminSession:
        session.add(admin_session)
        await session.flush()
        return admin_session

    @staticmethod
    async def get_by_token_hash(session: AsyncSession, token_hash: str) -> AdminSession | None:
        stmt = select(AdminSession).where(AdminSession.session_token_hash == token_hash)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def revoke_by_token_hash(
        session: AsyncSession,
        *,
        token_hash: str,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(AdminSession)
            .where(
                AdminSession.session_token_hash == token_hash,
                AdminSession.revoked_at.is_(None),
            )
            .values(revoked_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
