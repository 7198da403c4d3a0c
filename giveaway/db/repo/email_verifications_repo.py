from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.email_verifications import EmailVerification


class EmailVerificationsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        verification: EmailVerification,
    ) -> EmailVerification:
        session.add(verification)
        await session.flush()
        return verification

    @staticmethod
    async def get_unused_by_token_hash_for_update(
        session: AsyncSession,
        token_hash: str,
    ) -> EmailVerification | None:
        stmt = (
            select(EmailVerification)
            .where(
                EmailVerification.token_hash == token_hash,
                EmailVerification.used_at.is_(None),
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def mark_used(
        session: AsyncSession,
        *,
        verification_id: UUID,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(EmailVerification)
            .where(
                EmailVerification.id == verification_id,
                EmailVerification.used_at.is_(None),
            )
            .values(used_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
