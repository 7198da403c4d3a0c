from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.admin_gift_codes import AdminGiftCode


class GiftCodesRepo:
    @staticmethod
    async def list_for_admin(
        session: AsyncSession,
        *,
        admin_id: UUID,
        campaign_id: UUID,
    ) -> list[AdminGiftCode]:
        stmt = (
            select(AdminGiftCode)
            .where(
                AdminGiftCode.admin_id == admin_id,
                AdminGiftCode.campaign_id == campaign_id,
            )
            .order_by(AdminGiftCode.created_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_code(session: AsyncSession, code: str) -> AdminGiftCode | None:
        stmt = select(AdminGiftCode).where(AdminGiftCode.code == code)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_campaign(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        code: str,
    ) -> AdminGiftCode | None:
        stmt = select(AdminGiftCode).where(
            AdminGiftCode.campaign_id == campaign_id,
            AdminGiftCode.code == code,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_owned(
        session: AsyncSession,
        *,
        gift_code_id: UUID,
        admin_id: UUID,
        campaign_id: UUID,
    ) -> AdminGiftCode | None:
        stmt = select(AdminGiftCode).where(
            AdminGiftCode.id == gift_code_id,
            AdminGiftCode.admin_id == admin_id,
            AdminGiftCode.campaign_id == campaign_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, gift_code: AdminGiftCode) -> AdminGiftCode:
        session.add(gift_code)
        await session.flush()
        return gift_code

    @staticmethod
    async def delete(session: AsyncSession, gift_code_id: UUID) -> int:
        stmt = delete(AdminGiftCode).where(AdminGiftCode.id == gift_code_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def delete_for_campaign(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = delete(AdminGiftCode).where(AdminGiftCode.campaign_id == campaign_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
