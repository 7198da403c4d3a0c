from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import datetime
from uuid import UUID, uuid4

from giveaway.claims.errors import ClaimAnswersInvalidError
from giveaway.db.models.campaign_questions import CampaignQuestion
from giveaway.db.models.claim_answers import ClaimAnswer

AnswerValue = str | list[str]


def _invalid(question: CampaignQuestion) -> ClaimAnswersInvalidError:
    return ClaimAnswersInvalidError(f"Invalid answer for question: {question.question_text}")


def _clean_value(question: CampaignQuestion, value: AnswerValue) -> AnswerValue | None:
    options = question.options or []
    if question.question_type == "checkboxes":
        items = [value] if isinstance(value, str) else value
        picked = [item.strip() for item in items if item.strip()]
        if any(item not in options for item in picked):
            raise _invalid(question)
        return picked or None

    if not isinstance(value, str):
        raise _invalid(question)
    answer = value.strip()
    if not answer:
        return None
    if question.question_type == "multiple_choice" and answer not in options:
        raise _invalid(question)
    return answer


def clean_answers(
    questions: Sequence[CampaignQuestion],
    answers: Mapping[UUID, AnswerValue],
) -> dict[UUID, AnswerValue]:
    """Keep non-empty answers to the campaign's questions and check required ones are present."""
    by_id = {question.id: question for question in questions}
    cleaned: dict[UUID, AnswerValue] = {}
    for question_id, value in answers.items():
        question = by_id.get(question_id)
        if question is None:
            continue
        answer = _clean_value(question, value)
        if answer is not None:
            cleaned[question_id] = answer

    if any(question.is_required and question.id not in cleaned for question in questions):
        raise ClaimAnswersInvalidError
    return cleaned


def build_answer_rows(
    claim_id: UUID,
    answers: Mapping[UUID, AnswerValue],
    *,
    now_utc: datetime,
) -> list[ClaimAnswer]:
    # Checkbox selections are stored as a JSON array in answer_text.
    return [
        ClaimAnswer(
            id=uuid4(),
            claim_id=claim_id,
            question_id=question_id,
            answer_text=json.dumps(answer) if isinstance(answer, list) else answer,
            answer_option=answer if isinstance(answer, str) else None,
            created_at=now_utc,
        )
        for question_id, answer in answers.items()
    ]
