from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns import service as campaign_service
from giveaway.campaigns.errors import (
    CampaignHasClaimsError,
    CampaignInvalidError,
    CampaignNotFoundError,
    CampaignSlugTakenError,
)
from giveaway.campaigns.service import CampaignService

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _FakeSession:
    async def flush(self) -> None:
        return None


def _principal(role: str = "admin", admin_id=None) -> AdminPrincipal:
    return AdminPrincipal(
        admin_id=admin_id or uuid4(),
        email="ops@example.com",
        name="Ops",
        role=role,
        session_id=uuid4(),
    )


def _patch_create(monkeypatch, *, slug_taken: bool = False) -> dict[str, list]:
    calls: dict[str, list] = {"campaigns": [], "versions": []}

    async def _fake_slug_exists(session, slug):  # noqa: ARG001
        return slug_taken

    async def _fake_create(session, *, campaign):  # noqa: ARG001
        calls["campaigns"].append(campaign)
        return campaign

    async def _fake_create_version(session, *, version):  # noqa: ARG001
        calls["versions"].append(version)
        return version

    monkeypatch.setattr(campaign_service.CampaignsRepo, "slug_exists", _fake_slug_exists)
    monkeypatch.setattr(campaign_service.CampaignsRepo, "create", _fake_create)
    monkeypatch.setattr(campaign_service.CampaignVersionsRepo, "create", _fake_create_version)
    return calls


@pytest.mark.asyncio
async def test_viewer_cannot_create_campaign() -> None:
    with pytest.raises(PermissionDeniedError):
        await CampaignService.create_campaign(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal("viewer"),
            slug="launch",
            fields={"title": "Launch"},
        )


@pytest.mark.asyncio
async def test_create_campaign_requires_title(monkeypatch) -> None:
    _patch_create(monkeypatch)

    with pytest.raises(CampaignInvalidError):
        await CampaignService.create_campaign(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            slug="launch",
            fields={},
        )


@pytest.mark.asyncio
async def test_create_campaign_rejects_taken_slug(monkeypatch) -> None:
    _patch_create(monkeypatch, slug_taken=True)

    with pytest.raises(CampaignSlugTakenError):
        await CampaignService.create_campaign(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            slug="launch",
            fields={"title": "Launch"},
        )


@pytest.mark.asyncio
async def test_create_campaign_records_initial_version(monkeypatch) -> None:
    calls = _patch_create(monkeypatch)
    principal = _principal()

    campaign = await CampaignService.create_campaign(
        _FakeSession(),  # type: ignore[arg-type]
        principal=principal,
        slug=" Launch-Kit ",
        fields={"title": "Launch Kit", "capacity_total": 50},
        now_utc=NOW,
    )

    assert campaign.slug == "launch-kit"
    assert campaign.current_version == 1
    assert campaign.has_draft is False
    assert campaign.capacity_total == 50
    assert campaign.require_email is True
    assert campaign.created_by == principal.admin_id
    version = calls["versions"][0]
    assert version.version_number == 1
    assert version.status == "published"
    assert version.change_summary == "Initial version"
    assert version.data["title"] == "Launch Kit"
    assert version.data["capacity_total"] == 50


def _editable_campaign(created_by) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        created_by=created_by,
        title="Launch",
        description=None,
        starts_at=None,
        ends_at=None,
        current_version=3,
        has_draft=False,
        updated_at=None,
        updated_by=None,
    )


@pytest.mark.asyncio
async def test_admin_cannot_edit_foreign_campaign(monkeypatch) -> None:
    campaign = _editable_campaign(created_by=uuid4())

    async def _fake_get(session, campaign_id):  # noqa: ARG001
        return campaign

    monkeypatch.setattr(campaign_service.CampaignsRepo, "get_by_id_for_update", _fake_get)

    with pytest.raises(PermissionDeniedError):
        await CampaignService.update_campaign(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal("admin"),
            campaign_id=campaign.id,
            fields={"title": "New"},
        )


@pytest.mark.asyncio
async def test_update_campaign_bumps_version(monkeypatch) -> None:
    principal = _principal("admin")
    campaign = _editable_campaign(created_by=principal.admin_id)
    recorded: list = []

    async def _fake_get(session, campaign_id):  # noqa: ARG001
        return campaign

    async def _fake_record(session, **kwargs):  # noqa: ARG001
        recorded.append(kwargs)

    monkeypatch.setattr(campaign_service.CampaignsRepo, "get_by_id_for_update", _fake_get)
    monkeypatch.setattr(campaign_service, "record_published_version", _fake_record)

    updated = await CampaignService.update_campaign(
        _FakeSession(),  # type: ignore[arg-type]
        principal=principal,
        campaign_id=campaign.id,
        fields={"title": "  New title "},
        change_summary="Renamed",
        now_utc=NOW,
    )

    assert updated.title == "New title"
    assert updated.current_version == 4
    assert updated.updated_at == NOW
    assert updated.updated_by == principal.admin_id
    assert recorded[0]["version_number"] == 4
    assert recorded[0]["change_summary"] == "Renamed"


@pytest.mark.asyncio
async def test_update_missing_campaign(monkeypatch) -> None:
    async def _fake_get(session, campaign_id):  # noqa: ARG001
        return None

    monkeypatch.setattr(campaign_service.CampaignsRepo, "get_by_id_for_update", _fake_get)

    with pytest.raises(CampaignNotFoundError):
        await CampaignService.update_campaign(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal("super_admin"),
            campaign_id=uuid4(),
            fields={},
        )


@pytest.mark.asyncio
async def test_only_super_admin_deletes_campaigns() -> None:
    with pytest.raises(PermissionDeniedError):
        await CampaignService.delete_campaign(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal("admin"),
            campaign_id=uuid4(),
        )


@pytest.mark.asyncio
async def test_delete_campaign_with_claims_is_blocked(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4())

    async def _fake_get(session, campaign_id):  # noqa: ARG001
        return campaign

    async def _fake_count(session, campaign_id):  # noqa: ARG001
        return 4

    monkeypatch.setattr(campaign_service.CampaignsRepo, "get_by_id", _fake_get)
    monkeypatch.setattr(campaign_service.ClaimsRepo, "count_for_campaign", _fake_count)

    with pytest.raises(CampaignHasClaimsError) as exc_info:
        await CampaignService.delete_campaign(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal("super_admin"),
            campaign_id=campaign.id,
        )
    assert "4 claims" in exc_info.value.message


@pytest.mark.asyncio
async def test_delete_campaign_removes_dependents(monkeypatch) -> None:
    campaign = SimpleNamespace(id=uuid4())
    deleted: list[str] = []

    async def _fake_get(session, campaign_id):  # noqa: ARG001
        return campaign

    async def _fake_count(session, campaign_id):  # noqa: ARG001
        return 0

    def _recorder(name: str):
        async def _fake_delete(session, campaign_id):  # noqa: ARG001
            deleted.append(name)
            return 1

        return _fake_delete

    monkeypatch.setattr(campaign_service.CampaignsRepo, "get_by_id", _fake_get)
    monkeypatch.setattr(campaign_service.ClaimsRepo, "count_for_campaign", _fake_count)
    monkeypatch.setattr(
        campaign_service.InviteCodesRepo,
        "delete_for_campaign",
        _recorder("invite_codes"),
    )
    monkeypatch.setattr(
        campaign_service.CampaignVersionsRepo,
        "delete_for_campaign",
        _recorder("versions"),
    )
    monkeypatch.setattr(
        campaign_service.GiftCodesRepo,
        "delete_for_campaign",
        _recorder("gift_codes"),
    )
    monkeypatch.setattr(
        campaign_service.QuestionsRepo,
        "delete_for_campaign",
        _recorder("questions"),
    )
    monkeypatch.setattr(campaign_service.CampaignsRepo, "delete", _recorder("campaign"))

    await CampaignService.delete_campaign(
        _FakeSession(),  # type: ignore[arg-type]
        principal=_principal("super_admin"),
        campaign_id=campaign.id,
    )

    assert deleted == ["invite_codes", "versions", "gift_codes", "questions", "campaign"]
