from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.errors import CampaignInvalidError, CampaignNotFoundError, QuestionNotFoundError
from giveaway.campaigns.service import CampaignService
from giveaway.db.models.campaign_questions import CampaignQuestion
from giveaway.db.repo.campaigns_repo import CampaignsRepo
from giveaway.db.repo.questions_repo import QuestionsRepo

logger = structlog.get_logger(__name__)

QUESTION_TYPES: tuple[str, ...] = ("text", "multiple_choice", "checkboxes")
CHOICE_QUESTION_TYPES = frozenset({"multiple_choice", "checkboxes"})
MIN_CHOICE_OPTIONS = 2


def clean_question_text(raw_text: str | None) -> str:
    question_text = (raw_text or "").strip()
    if not question_text:
        raise CampaignInvalidError("Question text is required")
    return question_text


def clean_options(question_type: str, options: Sequence[str] | None) -> list[str] | None:
    if question_type not in CHOICE_QUESTION_TYPES:
        return None
    cleaned = [option.strip() for option in options or () if option.strip()]
    if len(cleaned) < MIN_CHOICE_OPTIONS:
        raise CampaignInvalidError("Choice questions need at least two options")
    return cleaned


class QuestionService:
    @staticmethod
    async def list_questions(session: AsyncSession, campaign_id: UUID) -> list[CampaignQuestion]:
        campaign = await CampaignService.get_or_raise(session, campaign_id)
        return await QuestionsRepo.list_for_campaign(session, campaign.id)

    @staticmethod
    async def list_public_questions(session: AsyncSession, slug: str) -> list[CampaignQuestion]:
        campaign = await CampaignsRepo.get_active_by_slug(session, slug)
        if campaign is None:
            raise CampaignNotFoundError
        if not campaign.enable_questions:
            return []
        return await QuestionsRepo.list_for_campaign(session, campaign.id)

    @staticmethod
    async def create_question(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        question_text: str,
        question_type: str,
        is_required: bool = False,
        options: Sequence[str] | None = None,
        now_utc: datetime | None = None,
    ) -> CampaignQuestion:
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )
        if question_type not in QUESTION_TYPES:
            raise CampaignInvalidError(f"Unknown question type: {question_type}")

        question = await QuestionsRepo.create(
            session,
            question=CampaignQuestion(
                id=uuid4(),
                campaign_id=campaign.id,
                question_text=clean_question_text(question_text),
                question_type=question_type,
                is_required=is_required,
                display_order=await QuestionsRepo.next_display_order(session, campaign.id),
                options=clean_options(question_type, options),
                created_at=now_utc,
            ),
        )
        logger.info(
            "campaign_question_created",
            campaign_id=str(campaign.id),
            question_id=str(question.id),
            question_type=question_type,
        )
        return question

    @staticmethod
    async def update_question(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        question_id: UUID,
        changes: Mapping[str, Any],
    ) -> CampaignQuestion:
        """Apply text, required flag, order and options changes; the type is fixed at creation."""
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )
        question = await QuestionsRepo.get_by_id(
            session,
            campaign_id=campaign.id,
            question_id=question_id,
        )
        if question is None:
            raise QuestionNotFoundError

        if changes.get("question_text") is not None:
            question.question_text = clean_question_text(changes["question_text"])
        if changes.get("is_required") is not None:
            question.is_required = bool(changes["is_required"])
        if changes.get("display_order") is not None:
            question.display_order = int(changes["display_order"])
        if "options" in changes:
            question.options = clean_options(question.question_type, changes["options"])
        await session.flush()
        return question

    @staticmethod
    async def delete_question(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        question_id: UUID,
    ) -> None:
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )
        deleted = await QuestionsRepo.delete(session, campaign_id=campaign.id, question_id=question_id)
        if deleted == 0:
            raise QuestionNotFoundError
        logger.info("campaign_question_deleted", question_id=str(question_id))
