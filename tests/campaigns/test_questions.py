from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns import questions
from giveaway.campaigns.errors import CampaignInvalidError, CampaignNotFoundError, QuestionNotFoundError
from giveaway.campaigns.questions import QuestionService, clean_options

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _FakeSession:
    def __init__(self) -> None:
        self.flushes = 0

    async def flush(self) -> None:
        self.flushes += 1


def _principal(role: str = "super_admin") -> AdminPrincipal:
    return AdminPrincipal(
        admin_id=uuid4(),
        email="ops@example.com",
        name="Ops",
        role=role,
        session_id=uuid4(),
    )


def _patch_campaign(monkeypatch, campaign, *, next_order: int = 0) -> list:
    created: list = []

    async def _fake_for_update(session, campaign_id):  # noqa: ARG001
        return campaign

    async def _fake_next_order(session, campaign_id):  # noqa: ARG001
        return next_order

    async def _fake_create(session, *, question):  # noqa: ARG001
        created.append(question)
        return question

    monkeypatch.setattr(questions.CampaignsRepo, "get_by_id_for_update", _fake_for_update)
    monkeypatch.setattr(questions.QuestionsRepo, "next_display_order", _fake_next_order)
    monkeypatch.setattr(questions.QuestionsRepo, "create", _fake_create)
    return created


def test_clean_options_ignored_for_text_questions() -> None:
    assert clean_options("text", ["a", "b"]) is None


def test_clean_options_needs_two_non_blank_choices() -> None:
    assert clean_options("checkboxes", [" Red ", "", "Blue"]) == ["Red", "Blue"]
    with pytest.raises(CampaignInvalidError):
        clean_options("multiple_choice", ["Only", "  "])


@pytest.mark.asyncio
async def test_create_question_appends_to_end(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4(), created_by=None)
    created = _patch_campaign(monkeypatch, campaign, next_order=3)

    question = await QuestionService.create_question(
        _FakeSession(),  # type: ignore[arg-type]
        principal=_principal(),
        campaign_id=campaign.id,
        question_text="  T-shirt size?  ",
        question_type="multiple_choice",
        is_required=True,
        options=["S", "M", "L"],
        now_utc=NOW,
    )

    assert created == [question]
    assert question.campaign_id == campaign.id
    assert question.question_text == "T-shirt size?"
    assert question.display_order == 3
    assert question.options == ["S", "M", "L"]
    assert question.is_required is True
    assert question.created_at == NOW


@pytest.mark.asyncio
async def test_create_question_rejects_unknown_type(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4(), created_by=None)
    created = _patch_campaign(monkeypatch, campaign)

    with pytest.raises(CampaignInvalidError, match="Unknown question type"):
        await QuestionService.create_question(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=campaign.id,
            question_text="Rate us",
            question_type="rating",
        )
    assert created == []


@pytest.mark.asyncio
async def test_viewer_cannot_create_question(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4(), created_by=uuid4())
    _patch_campaign(monkeypatch, campaign)

    with pytest.raises(PermissionDeniedError):
        await QuestionService.create_question(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal("viewer"),
            campaign_id=campaign.id,
            question_text="Why?",
            question_type="text",
        )


@pytest.mark.asyncio
async def test_update_question_keeps_type_and_cleans_options(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4(), created_by=None)
    _patch_campaign(monkeypatch, campaign)
    question = SimpleNamespace(
        id=uuid4(),
        question_text="Colour?",
        question_type="checkboxes",
        is_required=False,
        display_order=0,
        options=["Red", "Blue"],
    )

    async def _fake_get(session, *, campaign_id, question_id):  # noqa: ARG001
        return question

    monkeypatch.setattr(questions.QuestionsRepo, "get_by_id", _fake_get)
    session = _FakeSession()

    updated = await QuestionService.update_question(
        session,  # type: ignore[arg-type]
        principal=_principal(),
        campaign_id=campaign.id,
        question_id=question.id,
        changes={"is_required": True, "display_order": 2, "options": ["Red", " Green "]},
    )

    assert updated is question
    assert question.question_type == "checkboxes"
    assert question.question_text == "Colour?"
    assert question.is_required is True
    assert question.display_order == 2
    assert question.options == ["Red", "Green"]
    assert session.flushes == 1


@pytest.mark.asyncio
async def test_update_unknown_question(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4(), created_by=None)
    _patch_campaign(monkeypatch, campaign)

    async def _fake_get(session, *, campaign_id, question_id):  # noqa: ARG001
        return None

    monkeypatch.setattr(questions.QuestionsRepo, "get_by_id", _fake_get)

    with pytest.raises(QuestionNotFoundError):
        await QuestionService.update_question(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=campaign.id,
            question_id=uuid4(),
            changes={"question_text": "New"},
        )


@pytest.mark.asyncio
async def test_delete_missing_question(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4(), created_by=None)
    _patch_campaign(monkeypatch, campaign)

    async def _fake_delete(session, *, campaign_id, question_id):  # noqa: ARG001
        return 0

    monkeypatch.setattr(questions.QuestionsRepo, "delete", _fake_delete)

    with pytest.raises(QuestionNotFoundError):
        await QuestionService.delete_question(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=campaign.id,
            question_id=uuid4(),
        )


@pytest.mark.asyncio
async def test_public_questions_hidden_when_disabled(monkeypatch) -> None:
    async def _fake_by_slug(session, slug):  # noqa: ARG001
        return SimpleNamespace(id=uuid4(), enable_questions=False)

    async def _fail_list(session, campaign_id):  # noqa: ARG001
        raise AssertionError("questions should not be loaded")

    monkeypatch.setattr(questions.CampaignsRepo, "get_active_by_slug", _fake_by_slug)
    monkeypatch.setattr(questions.QuestionsRepo, "list_for_campaign", _fail_list)

    assert await QuestionService.list_public_questions(object(), "launch-kit") == []  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_public_questions_unknown_campaign(monkeypatch) -> None:
    async def _fake_by_slug(session, slug):  # noqa: ARG001
        return None

    monkeypatch.setattr(questions.CampaignsRepo, "get_active_by_slug", _fake_by_slug)

    with pytest.raises(CampaignNotFoundError):
        await QuestionService.list_public_questions(object(), "missing")  # type: ignore[arg-type]
