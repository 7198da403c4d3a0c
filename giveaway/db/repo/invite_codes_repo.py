from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.invite_codes import InviteCode


class InviteCodesRepo:
    @staticmethod
    async def list_for_campaign(session: AsyncSession, campaign_id: UUID) -> list[InviteCode]:
        stmt = (
            select(InviteCode)
            .where(InviteCode.campaign_id == campaign_id)
            .order_by(InviteCode.created_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        invite_code_id: UUID,
    ) -> InviteCode | None:
        stmt = select(InviteCode).where(
            InviteCode.id == invite_code_id,
            InviteCode.campaign_id == campaign_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_code(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        code: str,
    ) -> InviteCode | None:
        stmt = select(InviteCode).where(
            InviteCode.campaign_id == campaign_id,
            InviteCode.code == code,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, invite_code: InviteCode) -> InviteCode:
        session.add(invite_code)
        await session.flush()
        return invite_code

    @staticmethod
    async def consume(session: AsyncSession, invite_code_id: UUID) -> bool:
        stmt = (
            update(InviteCode)
            .where(
                InviteCode.id == invite_code_id,
                InviteCode.is_active.is_(True),
                or_(InviteCode.max_uses.is_(None), InviteCode.uses < InviteCode.max_uses),
            )
            .values(uses=InviteCode.uses + 1)
            .returning(InviteCode.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def set_active(
        session: AsyncSession,
        *,
        invite_code_id: UUID,
        is_active: bool,
    ) -> int:
        stmt = update(InviteCode).where(InviteCode.id == invite_code_id).values(is_active=is_active)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def delete(session: AsyncSession, *, campaign_id: UUID, invite_code_id: UUID) -> int:
        stmt = delete(InviteCode).where(
            InviteCode.id == invite_code_id,
            InviteCode.campaign_id == campaign_id,
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def delete_for_campaign(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = delete(InviteCode).where(InviteCode.campaign_id == campaign_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
