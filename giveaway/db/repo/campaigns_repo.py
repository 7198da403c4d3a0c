from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.campaigns import Campaign


class CampaignsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, campaign_id: UUID) -> Campaign | None:
        return await session.get(Campaign, campaign_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, campaign_id: UUID) -> Campaign | None:
        stmt = select(Campaign).where(Campaign.id == campaign_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_slug(session: AsyncSession, slug: str) -> Campaign | None:
        stmt = select(Campaign).where(Campaign.slug == slug)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_active_by_slug(session: AsyncSession, slug: str) -> Campaign | None:
        stmt = select(Campaign).where(Campaign.slug == slug, Campaign.is_active.is_(True))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def slug_exists(session: AsyncSession, slug: str) -> bool:
        stmt = select(Campaign.id).where(Campaign.slug == slug).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_all(session: AsyncSession) -> list[Campaign]:
        stmt = select(Campaign).order_by(Campaign.created_at.desc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(session: AsyncSession, *, campaign: Campaign) -> Campaign:
        session.add(campaign)
        await session.flush()
        return campaign

    @staticmethod
    async def delete(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = delete(Campaign).where(Campaign.id == campaign_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
