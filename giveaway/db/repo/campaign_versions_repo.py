from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.campaign_versions import CampaignVersion


class CampaignVersionsRepo:
    @staticmethod
    async def list_for_campaign(session: AsyncSession, campaign_id: UUID) -> list[CampaignVersion]:
        stmt = (
            select(CampaignVersion)
            .where(CampaignVersion.campaign_id == campaign_id)
            .order_by(CampaignVersion.version_number.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_draft(session: AsyncSession, campaign_id: UUID) -> CampaignVersion | None:
        stmt = select(CampaignVersion).where(
            CampaignVersion.campaign_id == campaign_id,
            CampaignVersion.status == "draft",
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_number(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        version_number: int,
    ) -> CampaignVersion | None:
        stmt = select(CampaignVersion).where(
            CampaignVersion.campaign_id == campaign_id,
            CampaignVersion.version_number == version_number,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, version: CampaignVersion) -> CampaignVersion:
        session.add(version)
        await session.flush()
        return version

    @staticmethod
    async def delete_drafts(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = delete(CampaignVersion).where(
            CampaignVersion.campaign_id == campaign_id,
            CampaignVersion.status == "draft",
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def delete_for_campaign(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = delete(CampaignVersion).where(CampaignVersion.campaign_id == campaign_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
