from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from giveaway.auth.types import AdminPrincipal
from giveaway.claims import admin as admin_claims
from giveaway.claims.admin import (
    AdminClaimService,
    build_claim_url,
    placeholder_fingerprint,
)
from giveaway.claims.errors import (
    CampaignAtCapacityError,
    ClaimAlreadySubmittedError,
    ClaimMissingFieldsError,
    ClaimTokenInvalidError,
    DuplicateClaimError,
)
from giveaway.claims.types import ClaimPayload

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _FakeSession:
    def __init__(self) -> None:
        self.added: list[object] = []

    def add(self, instance: object) -> None:
        self.added.append(instance)

    async def flush(self) -> None:
        return None


def _principal() -> AdminPrincipal:
    return AdminPrincipal(
        admin_id=uuid4(),
        email="ops@example.com",
        name="Ops",
        role="admin",
        session_id=uuid4(),
    )


def _campaign(**overrides: object) -> SimpleNamespace:
    values: dict[str, object] = {
        "id": uuid4(),
        "slug": "launch",
        "test_mode": False,
        "has_capacity_limit": False,
        "capacity_total": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _payload(**overrides: object) -> ClaimPayload:
    values: dict[str, object] = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "address1": "12 Analytical Way",
        "city": "London",
        "region": "LDN",
        "postal_code": "SW1A 1AA",
        "country": "GB",
    }
    values.update(overrides)
    return ClaimPayload(**values)  # type: ignore[arg-type]


def _patch_register(
    monkeypatch,
    campaign,
    *,
    fingerprint_taken: bool = False,
    active: int = 0,
) -> None:
    async def _fake_editable(session, *, principal, campaign_id):  # noqa: ARG001
        return campaign

    async def _fake_exists(session, **kwargs):  # noqa: ARG001
        return fingerprint_taken

    async def _fake_active(session, campaign_id):  # noqa: ARG001
        return active

    async def _fake_confirmed(session, campaign_id):  # noqa: ARG001
        return active + 1

    monkeypatch.setattr(admin_claims.CampaignService, "get_editable", _fake_editable)
    monkeypatch.setattr(admin_claims.ClaimsRepo, "fingerprint_exists", _fake_exists)
    monkeypatch.setattr(admin_claims.ClaimsRepo, "count_active", _fake_active)
    monkeypatch.setattr(admin_claims.ClaimsRepo, "count_confirmed", _fake_confirmed)


def test_claim_url_and_placeholder_fingerprint() -> None:
    assert (
        build_claim_url(slug="launch", claim_token="tok")
        == "https://giveaway.example.com/c/launch/claim/tok"
    )
    assert placeholder_fingerprint("a") != placeholder_fingerprint("b")
    assert len(placeholder_fingerprint("a")) == 64


@pytest.mark.asyncio
async def test_register_requires_full_address() -> None:
    with pytest.raises(ClaimMissingFieldsError):
        await AdminClaimService.register_claim(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=uuid4(),
            payload=_payload(address1=""),
        )


@pytest.mark.asyncio
async def test_register_duplicate(monkeypatch) -> None:
    campaign = _campaign()
    _patch_register(monkeypatch, campaign, fingerprint_taken=True)

    with pytest.raises(DuplicateClaimError):
        await AdminClaimService.register_claim(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=campaign.id,
            payload=_payload(),
        )


@pytest.mark.asyncio
async def test_register_at_capacity(monkeypatch) -> None:
    campaign = _campaign(has_capacity_limit=True, capacity_total=3)
    _patch_register(monkeypatch, campaign, active=3)

    with pytest.raises(CampaignAtCapacityError):
        await AdminClaimService.register_claim(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=campaign.id,
            payload=_payload(),
        )


@pytest.mark.asyncio
async def test_register_creates_confirmed_claim(monkeypatch) -> None:
    campaign = _campaign(has_capacity_limit=True, capacity_total=10)
    principal = _principal()
    session = _FakeSession()
    _patch_register(monkeypatch, campaign, active=2)

    registered = await AdminClaimService.register_claim(
        session,  # type: ignore[arg-type]
        principal=principal,
        campaign_id=campaign.id,
        payload=_payload(email=" Ada@Example.com "),
        admin_notes=" met at booth ",
        now_utc=NOW,
    )

    claim = registered.claim
    assert session.added == [claim]
    assert claim.status == "confirmed"
    assert claim.confirmed_at == NOW
    assert claim.email_normalized == "ada@example.com"
    assert claim.pre_created_by == principal.admin_id
    assert claim.admin_notes == "met at booth"
    assert registered.confirmed_count == 3
    assert registered.capacity_total == 10


@pytest.mark.asyncio
async def test_pre_create_claim_returns_link(monkeypatch) -> None:
    campaign = _campaign()
    principal = _principal()

    async def _fake_editable(session, *, principal, campaign_id):  # noqa: ARG001
        return campaign

    async def _fake_create(session, *, claim):  # noqa: ARG001
        return claim

    monkeypatch.setattr(admin_claims.CampaignService, "get_editable", _fake_editable)
    monkeypatch.setattr(admin_claims.ClaimsRepo, "create", _fake_create)

    created = await AdminClaimService.pre_create_claim(
        _FakeSession(),  # type: ignore[arg-type]
        principal=principal,
        campaign_id=campaign.id,
        payload=ClaimPayload(first_name="Ada", last_name="Lovelace", email="ada@example.com"),
        now_utc=NOW,
    )

    claim = created.claim
    assert claim.status == "pending"
    assert claim.address1 == ""
    assert claim.claim_token
    assert claim.address_fingerprint == placeholder_fingerprint(claim.claim_token)
    assert claim.pre_created_by == principal.admin_id
    assert created.claim_url.endswith(f"/c/launch/claim/{claim.claim_token}")


def _patch_lookup(monkeypatch, *, campaign, claim) -> None:
    async def _fake_by_slug(session, slug):  # noqa: ARG001
        return campaign

    async def _fake_by_token(session, *, campaign_id, claim_token):  # noqa: ARG001
        return claim

    monkeypatch.setattr(admin_claims.CampaignsRepo, "get_by_slug", _fake_by_slug)
    monkeypatch.setattr(admin_claims.ClaimsRepo, "get_by_token", _fake_by_token)


@pytest.mark.asyncio
async def test_lookup_unknown_token(monkeypatch) -> None:
    _patch_lookup(monkeypatch, campaign=_campaign(), claim=None)

    with pytest.raises(ClaimTokenInvalidError):
        await AdminClaimService.get_pre_created_claim(
            object(),  # type: ignore[arg-type]
            slug="launch",
            claim_token="nope",
        )


@pytest.mark.asyncio
async def test_lookup_completed_claim(monkeypatch) -> None:
    _patch_lookup(
        monkeypatch,
        campaign=_campaign(),
        claim=SimpleNamespace(address1="12 Analytical Way"),
    )

    with pytest.raises(ClaimAlreadySubmittedError):
        await AdminClaimService.get_pre_created_claim(
            object(),  # type: ignore[arg-type]
            slug="launch",
            claim_token="tok",
        )
