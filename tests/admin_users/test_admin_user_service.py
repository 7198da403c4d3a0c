from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from giveaway.admin_users import service as admin_user_service
from giveaway.admin_users.errors import (
    AdminUserExistsError,
    AdminUserHasCampaignsError,
    AdminUserInvalidError,
    AdminUserNotFoundError,
    AdminUserSelfChangeError,
    ProfileInvalidError,
)
from giveaway.admin_users.service import AdminUserService, clean_profile_fields
from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.types import AdminPrincipal
from giveaway.services.mailer import MailDeliveryError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _FakeSession:
    async def flush(self) -> None:
        return None


class _InviteMailer:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.invites: list[tuple[str, str, str]] = []

    async def send_invite(self, email: str, name: str, role: str) -> None:
        if self.fail:
            raise MailDeliveryError("down")
        self.invites.append((email, name, role))


def _principal(role: str = "super_admin") -> AdminPrincipal:
    return AdminPrincipal(
        admin_id=uuid4(),
        email="root@example.com",
        name="Root",
        role=role,
        session_id=uuid4(),
    )


def test_clean_profile_fields_blanks_become_none() -> None:
    cleaned = clean_profile_fields({"display_name": "  ", "bio": " Hi ", "unknown": "x"})

    assert cleaned == {"display_name": None, "bio": "Hi"}


@pytest.mark.parametrize(
    "url",
    ["https://www.linkedin.com/in/ada", "https://linkedin.com/in/ada"],
)
def test_clean_profile_fields_accepts_linkedin(url: str) -> None:
    assert clean_profile_fields({"linkedin_url": url}) == {"linkedin_url": url}


@pytest.mark.parametrize("url", ["http://linkedin.com/in/ada", "https://evil.example.com/"])
def test_clean_profile_fields_rejects_other_urls(url: str) -> None:
    with pytest.raises(ProfileInvalidError):
        clean_profile_fields({"linkedin_url": url})


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["admin", "viewer"])
async def test_user_management_requires_super_admin(role: str) -> None:
    with pytest.raises(PermissionDeniedError):
        await AdminUserService.list_users(object(), principal=_principal(role))  # type: ignore[arg-type]


def _patch_create(monkeypatch, *, existing=None) -> list:
    created: list = []

    async def _fake_get_by_email(session, email):  # noqa: ARG001
        return existing

    async def _fake_create(session, *, user):  # noqa: ARG001
        created.append(user)
        return user

    monkeypatch.setattr(admin_user_service.AdminUsersRepo, "get_by_email", _fake_get_by_email)
    monkeypatch.setattr(admin_user_service.AdminUsersRepo, "create", _fake_create)
    return created


@pytest.mark.asyncio
async def test_create_user_sends_invite(monkeypatch) -> None:
    created = _patch_create(monkeypatch)
    mailer = _InviteMailer()
    principal = _principal()

    user = await AdminUserService.create_user(
        _FakeSession(),  # type: ignore[arg-type]
        principal=principal,
        email=" Grace@Example.com ",
        name=" Grace ",
        role="admin",
        mailer=mailer,  # type: ignore[arg-type]
        now_utc=NOW,
    )

    assert created == [user]
    assert user.email == "grace@example.com"
    assert user.name == "Grace"
    assert user.is_active is True
    assert user.created_by == principal.admin_id
    assert mailer.invites == [("grace@example.com", "Grace", "admin")]


@pytest.mark.asyncio
async def test_create_user_survives_invite_failure(monkeypatch) -> None:
    created = _patch_create(monkeypatch)

    await AdminUserService.create_user(
        _FakeSession(),  # type: ignore[arg-type]
        principal=_principal(),
        email="grace@example.com",
        name="Grace",
        role="viewer",
        mailer=_InviteMailer(fail=True),  # type: ignore[arg-type]
        now_utc=NOW,
    )

    assert len(created) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("email", "name", "role"),
    [("", "Grace", "admin"), ("grace@example.com", " ", "admin"), ("g@example.com", "G", "owner")],
)
async def test_create_user_validates_input(monkeypatch, email: str, name: str, role: str) -> None:
    _patch_create(monkeypatch)

    with pytest.raises(AdminUserInvalidError):
        await AdminUserService.create_user(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            email=email,
            name=name,
            role=role,
            mailer=_InviteMailer(),  # type: ignore[arg-type]
        )


@pytest.mark.asyncio
async def test_create_user_rejects_existing_email(monkeypatch) -> None:
    _patch_create(monkeypatch, existing=SimpleNamespace())

    with pytest.raises(AdminUserExistsError):
        await AdminUserService.create_user(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            email="grace@example.com",
            name="Grace",
            role="admin",
            mailer=_InviteMailer(),  # type: ignore[arg-type]
        )


@pytest.mark.asyncio
async def test_cannot_update_own_account() -> None:
    principal = _principal()

    with pytest.raises(AdminUserSelfChangeError):
        await AdminUserService.update_user(
            _FakeSession(),  # type: ignore[arg-type]
            principal=principal,
            user_id=principal.admin_id,
            is_active=False,
        )


@pytest.mark.asyncio
async def test_update_user_changes_role_and_status(monkeypatch) -> None:
    principal = _principal()
    user = SimpleNamespace(id=uuid4(), role="viewer", is_active=True, name="Grace")

    async def _fake_get(session, admin_user_id):  # noqa: ARG001
        return user

    monkeypatch.setattr(admin_user_service.AdminUsersRepo, "get_by_id", _fake_get)

    updated = await AdminUserService.update_user(
        _FakeSession(),  # type: ignore[arg-type]
        principal=principal,
        user_id=user.id,
        role="admin",
        is_active=False,
        now_utc=NOW,
    )

    assert updated.role == "admin"
    assert updated.is_active is False
    assert updated.updated_by == principal.admin_id
    assert updated.updated_at == NOW


@pytest.mark.asyncio
async def test_update_missing_user(monkeypatch) -> None:
    async def _fake_get(session, admin_user_id):  # noqa: ARG001
        return None

    monkeypatch.setattr(admin_user_service.AdminUsersRepo, "get_by_id", _fake_get)

    with pytest.raises(AdminUserNotFoundError):
        await AdminUserService.update_user(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            user_id=uuid4(),
            role="admin",
        )


@pytest.mark.asyncio
async def test_delete_user_with_campaigns_is_blocked(monkeypatch) -> None:
    async def _fake_has_campaigns(session, admin_user_id):  # noqa: ARG001
        return True

    monkeypatch.setattr(
        admin_user_service.AdminUsersRepo,
        "has_created_campaigns",
        _fake_has_campaigns,
    )

    with pytest.raises(AdminUserHasCampaignsError):
        await AdminUserService.delete_user(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            user_id=uuid4(),
        )


@pytest.mark.asyncio
async def test_delete_missing_user(monkeypatch) -> None:
    async def _fake_has_campaigns(session, admin_user_id):  # noqa: ARG001
        return False

    async def _fake_delete(session, admin_user_id):  # noqa: ARG001
        return 0

    monkeypatch.setattr(
        admin_user_service.AdminUsersRepo,
        "has_created_campaigns",
        _fake_has_campaigns,
    )
    monkeypatch.setattr(admin_user_service.AdminUsersRepo, "delete", _fake_delete)

    with pytest.raises(AdminUserNotFoundError):
        await AdminUserService.delete_user(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            user_id=uuid4(),
        )


@pytest.mark.asyncio
async def test_any_role_updates_own_profile(monkeypatch) -> None:
    principal = _principal("viewer")
    user = SimpleNamespace(id=principal.admin_id, display_name=None, linkedin_url=None)

    async def _fake_get(session, admin_user_id):  # noqa: ARG001
        return user

    monkeypatch.setattr(admin_user_service.AdminUsersRepo, "get_by_id", _fake_get)

    updated = await AdminUserService.update_profile(
        _FakeSession(),  # type: ignore[arg-type]
        principal=principal,
        fields={"display_name": " Ada ", "linkedin_url": "https://linkedin.com/in/ada"},
        now_utc=NOW,
    )

    assert updated.display_name == "Ada"
    assert updated.linkedin_url == "https://linkedin.com/in/ada"
    assert updated.updated_at == NOW
