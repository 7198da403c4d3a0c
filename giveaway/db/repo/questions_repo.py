from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.campaign_questions import CampaignQuestion
from giveaway.db.models.claim_answers import ClaimAnswer


class QuestionsRepo:
    @staticmethod
    async def list_for_campaign(session: AsyncSession, campaign_id: UUID) -> list[CampaignQuestion]:
        stmt = (
            select(CampaignQuestion)
            .where(CampaignQuestion.campaign_id == campaign_id)
            .order_by(CampaignQuestion.display_order.asc(), CampaignQuestion.created_at.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        question_id: UUID,
    ) -> CampaignQuestion | None:
        stmt = select(CampaignQuestion).where(
            CampaignQuestion.id == question_id,
            CampaignQuestion.campaign_id == campaign_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def next_display_order(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = select(func.max(CampaignQuestion.display_order)).where(
            CampaignQuestion.campaign_id == campaign_id
        )
        current = (await session.execute(stmt)).scalar_one_or_none()
        return 0 if current is None else int(current) + 1

    @staticmethod
    async def create(session: AsyncSession, *, question: CampaignQuestion) -> CampaignQuestion:
        session.add(question)
        await session.flush()
        return question

    @staticmethod
    async def delete(session: AsyncSession, *, campaign_id: UUID, question_id: UUID) -> int:
        stmt = delete(CampaignQuestion).where(
            CampaignQuestion.id == question_id,
            CampaignQuestion.campaign_id == campaign_id,
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def delete_for_campaign(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = delete(CampaignQuestion).where(CampaignQuestion.campaign_id == campaign_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)


class ClaimAnswersRepo:
    @staticmethod
    async def add_many(session: AsyncSession, answers: Sequence[ClaimAnswer]) -> None:
        session.add_all(answers)
        await session.flush()
