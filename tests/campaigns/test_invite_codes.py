from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns import invite_codes
from giveaway.campaigns.errors import (
    CampaignInvalidError,
    InviteCodeNotFoundError,
    InviteCodeTakenError,
)
from giveaway.campaigns.invite_codes import InviteCodeService, normalize_invite_code

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _principal(role: str = "admin") -> AdminPrincipal:
    return AdminPrincipal(
        admin_id=uuid4(),
        email="ops@example.com",
        name="Ops",
        role=role,
        session_id=uuid4(),
    )


def _patch_campaign(monkeypatch, campaign, *, existing=None) -> list:
    created: list = []

    async def _fake_get(session, campaign_id):  # noqa: ARG001
        return campaign

    async def _fake_by_code(session, *, campaign_id, code):  # noqa: ARG001
        return existing

    async def _fake_create(session, *, invite_code):  # noqa: ARG001
        created.append(invite_code)
        return invite_code

    monkeypatch.setattr(invite_codes.CampaignService, "get_or_raise", _fake_get)
    monkeypatch.setattr(invite_codes.InviteCodesRepo, "get_by_code", _fake_by_code)
    monkeypatch.setattr(invite_codes.InviteCodesRepo, "create", _fake_create)
    return created


def test_normalize_invite_code() -> None:
    assert normalize_invite_code("  vip-2026 ") == "VIP-2026"


@pytest.mark.asyncio
async def test_viewer_cannot_list_codes() -> None:
    with pytest.raises(PermissionDeniedError):
        await InviteCodeService.list_codes(
            object(),  # type: ignore[arg-type]
            principal=_principal("viewer"),
            campaign_id=uuid4(),
        )


@pytest.mark.asyncio
async def test_create_code_normalizes_and_drops_non_positive_limit(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4())
    created = _patch_campaign(monkeypatch, campaign)

    invite_code = await InviteCodeService.create_code(
        object(),  # type: ignore[arg-type]
        principal=_principal(),
        campaign_id=campaign.id,
        code=" vip ",
        max_uses=0,
        now_utc=NOW,
    )

    assert created == [invite_code]
    assert invite_code.code == "VIP"
    assert invite_code.max_uses is None
    assert invite_code.uses == 0
    assert invite_code.is_active is True


@pytest.mark.asyncio
async def test_create_code_requires_value(monkeypatch) -> None:
    _patch_campaign(monkeypatch, SimpleNamespace(id=uuid4()))

    with pytest.raises(CampaignInvalidError):
        await InviteCodeService.create_code(
            object(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=uuid4(),
            code="   ",
        )


@pytest.mark.asyncio
async def test_create_code_rejects_duplicate(monkeypatch) -> None:
    _patch_campaign(monkeypatch, SimpleNamespace(id=uuid4()), existing=SimpleNamespace())

    with pytest.raises(InviteCodeTakenError):
        await InviteCodeService.create_code(
            object(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=uuid4(),
            code="vip",
        )


@pytest.mark.asyncio
async def test_delete_missing_code(monkeypatch) -> None:
    async def _fake_delete(session, *, campaign_id, invite_code_id):  # noqa: ARG001
        return 0

    monkeypatch.setattr(invite_codes.InviteCodesRepo, "delete", _fake_delete)

    with pytest.raises(InviteCodeNotFoundError):
        await InviteCodeService.delete_code(
            object(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_id=uuid4(),
            invite_code_id=uuid4(),
        )
