from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.admin_otp_requests import AdminOtpRequest


class AdminOtpRepo:
    @staticmethod
    async def create(session: AsyncSession, *, otp_request: AdminOtpRequest) -> AdminOtpRequest:
        session.add(otp_request)
        await session.flush()
        return otp_request

    @staticmethod
    async def count_for_email_since(
        session: AsyncSession,
        *,
        email: str,
        since_utc: datetime,
    ) -> int:
        stmt = select(func.count(AdminOtpRequest.id)).where(
            AdminOtpRequest.email == email,
            AdminOtpRequest.created_at >= since_utc,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_for_ip_since(
        session: AsyncSession,
        *,
        ip_hash: str,
        since_utc: datetime,
    ) -> int:
        stmt = select(func.count(AdminOtpRequest.id)).where(
            AdminOtpRequest.ip_hash == ip_hash,
            AdminOtpRequest.created_at >= since_utc,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def get_latest_unused_for_update(
        session: AsyncSession,
        email: str,
    ) -> AdminOtpRequest | None:
        stmt = (
            select(AdminOtpRequest)
            .where(
                AdminOtpRequest.email == email,
                AdminOtpRequest.used_at.is_(None),
            )
            .order_by(AdminOtpRequest.created_at.desc())
            .limit(1)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def increment_attempts(session: AsyncSession, otp_request_id: UUID) -> None:
        stmt = (
            update(AdminOtpRequest)
            .where(AdminOtpRequest.id == otp_request_id)
            .values(attempts=AdminOtpRequest.attempts + 1)
        )
        await session.execute(stmt)

    @staticmethod
    async def mark_used(
        session: AsyncSession,
        *,
        otp_request_id: UUID,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(AdminOtpRequest)
            .where(
                AdminOtpRequest.id == otp_request_id,
                AdminOtpRequest.used_at.is_(None),
            )
            .values(used_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
