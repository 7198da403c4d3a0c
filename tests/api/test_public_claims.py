from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from giveaway.api.routes import public_claims, verify
from giveaway.campaigns.errors import CampaignNotFoundError, GiftCodeNotFoundError
from giveaway.claims.errors import (
    CampaignEndedError,
    ClaimAnswersInvalidError,
    ClaimRateLimitedError,
    DuplicateClaimError,
    VerificationExpiredError,
    VerificationInvalidError,
)
from giveaway.claims.types import ClaimSubmissionResult

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

CLAIM_BODY = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "address1": "12 Analytical Way",
    "city": "London",
    "region": "LDN",
    "postalCode": "SW1A 1AA",
    "country": "GB",
    "inviteCode": "vip",
    "consent": True,
}


def test_submit_claim_returns_result(client: TestClient, monkeypatch) -> None:
    claim_id = uuid4()
    captured: dict = {}

    async def _fake_submit(session, **kwargs):  # noqa: ARG001
        captured.update(kwargs)
        return ClaimSubmissionResult(claim_id=claim_id, requires_verification=True)

    monkeypatch.setattr(public_claims.ClaimService, "submit_claim", _fake_submit)

    response = client.post(
        "/campaigns/launch/claim",
        json=CLAIM_BODY,
        headers={"User-Agent": "pytest-agent"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "requiresVerification": True,
        "claimId": str(claim_id),
    }
    assert captured["slug"] == "launch"
    assert captured["payload"].postal_code == "SW1A 1AA"
    assert captured["payload"].invite_code == "vip"
    assert captured["user_agent"] == "pytest-agent"


@pytest.mark.parametrize(
    ("error", "expected_status", "expected_code"),
    [
        (CampaignNotFoundError(), 404, "E_CAMPAIGN_NOT_FOUND"),
        (CampaignEndedError(), 400, "E_CAMPAIGN_ENDED"),
        (DuplicateClaimError(), 409, "E_CLAIM_DUPLICATE"),
        (ClaimRateLimitedError(), 429, "E_CLAIM_RATE_LIMITED"),
    ],
)
def test_submit_claim_maps_domain_errors(
    client: TestClient,
    monkeypatch,
    error: Exception,
    expected_status: int,
    expected_code: str,
) -> None:
    async def _fake_submit(session, **kwargs):  # noqa: ARG001
        raise error

    monkeypatch.setattr(public_claims.ClaimService, "submit_claim", _fake_submit)

    response = client.post("/campaigns/launch/claim", json=CLAIM_BODY)

    assert response.status_code == expected_status
    assert response.json()["detail"]["code"] == expected_code


def test_gift_landing_unknown_code(client: TestClient, monkeypatch) -> None:
    async def _fake_landing(session, **kwargs):  # noqa: ARG001
        raise GiftCodeNotFoundError

    monkeypatch.setattr(public_claims.GiftCodeService, "get_landing", _fake_landing)

    response = client.get("/campaigns/launch/gift/abc")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "E_GIFT_CODE_NOT_FOUND"


def test_verify_page_confirms_claim(client: TestClient, monkeypatch) -> None:
    async def _fake_confirm(session, token, **kwargs):  # noqa: ARG001
        return uuid4()

    monkeypatch.setattr(verify.VerificationService, "confirm_email_verification", _fake_confirm)

    response = client.get("/verify", params={"token": "tok"})

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Email Verified" in response.text


@pytest.mark.parametrize(
    ("error", "expected_status", "expected_title"),
    [
        (VerificationExpiredError(), 410, "Link Expired"),
        (VerificationInvalidError(), 400, "Invalid Link"),
    ],
)
def test_verify_page_failures(
    client: TestClient,
    monkeypatch,
    error: Exception,
    expected_status: int,
    expected_title: str,
) -> None:
    async def _fake_confirm(session, token, **kwargs):  # noqa: ARG001
        raise error

    monkeypatch.setattr(verify.VerificationService, "confirm_email_verification", _fake_confirm)

    response = client.get("/verify", params={"token": "tok"})

    assert response.status_code == expected_status
    assert expected_title in response.text


def test_submit_claim_forwards_question_answers(client: TestClient, monkeypatch) -> None:
    question_id = uuid4()
    captured: dict = {}

    async def _fake_submit(session, **kwargs):  # noqa: ARG001
        captured.update(kwargs)
        return ClaimSubmissionResult(claim_id=uuid4(), requires_verification=False)

    monkeypatch.setattr(public_claims.ClaimService, "submit_claim", _fake_submit)

    response = client.post(
        "/campaigns/launch/claim",
        json={**CLAIM_BODY, "answers": {str(question_id): ["Red", "Blue"]}},
    )

    assert response.status_code == 200
    assert captured["payload"].answers == {question_id: ["Red", "Blue"]}


def test_submit_claim_missing_required_answer(client: TestClient, monkeypatch) -> None:
    async def _fake_submit(session, **kwargs):  # noqa: ARG001
        raise ClaimAnswersInvalidError

    monkeypatch.setattr(public_claims.ClaimService, "submit_claim", _fake_submit)

    response = client.post("/campaigns/launch/claim", json=CLAIM_BODY)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "E_CLAIM_ANSWERS_INVALID"


def test_public_questions_listing(client: TestClient, monkeypatch) -> None:
    question = SimpleNamespace(
        id=uuid4(),
        campaign_id=uuid4(),
        question_text="Shirt size?",
        question_type="multiple_choice",
        is_required=True,
        display_order=0,
        options=["S", "M"],
        created_at=NOW,
    )

    async def _fake_list(session, slug):  # noqa: ARG001
        return [question]

    monkeypatch.setattr(public_claims.QuestionService, "list_public_questions", _fake_list)

    response = client.get("/campaigns/launch/questions")

    assert response.status_code == 200
    body = response.json()
    assert [item["questionText"] for item in body] == ["Shirt size?"]
    assert body[0]["isRequired"] is True
    assert body[0]["options"] == ["S", "M"]


def test_public_questions_unknown_campaign(client: TestClient, monkeypatch) -> None:
    async def _fake_list(session, slug):  # noqa: ARG001
        raise CampaignNotFoundError

    monkeypatch.setattr(public_claims.QuestionService, "list_public_questions", _fake_list)

    response = client.get("/campaigns/missing/questions")

    assert response.status_code == 404
