from __future__ import annotations

from uuid import UUID

ROLE_SUPER_ADMIN = "super_admin"
ROLE_ADMIN = "admin"
ROLE_VIEWER = "viewer"

_CONTENT_ROLES = frozenset({ROLE_SUPER_ADMIN, ROLE_ADMIN})


def can_manage_users(role: str) -> bool:
    return role == ROLE_SUPER_ADMIN


def can_create_campaign(role: str) -> bool:
    return role in _CONTENT_ROLES


def can_edit_campaign(role: str, created_by: UUID | None, user_id: UUID) -> bool:
    if role == ROLE_SUPER_ADMIN:
        return True
    return role == ROLE_ADMIN and created_by is not None and created_by == user_id


def can_delete_campaign(role: str) -> bool:
    return role == ROLE_SUPER_ADMIN


def can_export_campaign(role: str) -> bool:
    return role in _CONTENT_ROLES


def can_manage_invite_codes(role: str) -> bool:
    return role in _CONTENT_ROLES


def can_import_addresses(role: str) -> bool:
    return role in _CONTENT_ROLES


def can_manage_claims(role: str) -> bool:
    return role in _CONTENT_ROLES


def can_bulk_delete_claims(role: str) -> bool:
    return role == ROLE_SUPER_ADMIN


def can_delete_claim(
    *,
    role: str,
    user_id: UUID,
    campaign_created_by: UUID | None,
    is_awaiting_address: bool,
) -> bool:
    if role == ROLE_SUPER_ADMIN or is_awaiting_address:
        return True
    return can_edit_campaign(role, campaign_created_by, user_id)

