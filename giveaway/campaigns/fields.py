from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from giveaway.campaigns.errors import CampaignInvalidError
from giveaway.db.models.campaigns import Campaign

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

DATETIME_FIELDS = frozenset({"starts_at", "ends_at"})
NON_NEGATIVE_INT_FIELDS = frozenset(
    {"max_claims_per_email", "max_claims_per_ip_per_day"}
)
OPTIONAL_INT_FIELDS = frozenset({"capacity_total", "max_claims_per_address"})

CAMPAIGN_DEFAULTS: dict[str, Any] = {
    "description": None,
    "capacity_total": None,
    "is_active": True,
    "starts_at": None,
    "ends_at": None,
    "require_email": True,
    "require_email_verification": False,
    "require_invite_code": False,
    "show_scarcity": True,
    "test_mode": False,
    "kiosk_mode": False,
    "show_banner": False,
    "show_logo": True,
    "enable_questions": False,
    "collect_company": False,
    "collect_phone": False,
    "collect_title": False,
    "max_claims_per_email": 1,
    "max_claims_per_ip_per_day": 5,
    "max_claims_per_address": None,
    "privacy_blurb": None,
    "contact_email": None,
    "notes": None,
}

EDITABLE_FIELDS: tuple[str, ...] = ("title", *CAMPAIGN_DEFAULTS.keys())


def normalize_slug(raw_slug: str) -> str:
    slug = raw_slug.strip().lower()
    if not SLUG_PATTERN.match(slug):
        raise CampaignInvalidError("Slug may contain only lowercase letters, digits and dashes")
    return slug


def clean_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Keep editable keys only and validate their values."""
    cleaned: dict[str, Any] = {}
    for name in EDITABLE_FIELDS:
        if name not in fields:
            continue
        value = fields[name]
        if isinstance(value, str):
            value = value.strip() or None

        if name == "title" and not value:
            raise CampaignInvalidError("Title is required")
        if name in OPTIONAL_INT_FIELDS and value is not None and int(value) < 0:
            raise CampaignInvalidError(f"{name} must not be negative")
        if name in NON_NEGATIVE_INT_FIELDS:
            if value is None:
                value = CAMPAIGN_DEFAULTS[name]
            if int(value) < 0:
                raise CampaignInvalidError(f"{name} must not be negative")
        cleaned[name] = value
    return cleaned


def ensure_window(campaign: Campaign) -> None:
    if campaign.starts_at is not None and campaign.ends_at is not None:
        if campaign.starts_at >= campaign.ends_at:
            raise CampaignInvalidError("starts_at must be before ends_at")


def apply_fields(campaign: Campaign, fields: Mapping[str, Any]) -> None:
    for name, value in fields.items():
        setattr(campaign, name, value)
    ensure_window(campaign)


def serialize_values(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {
        name: value.isoformat() if isinstance(value, datetime) else value
        for name, value in fields.items()
    }


def snapshot(campaign: Campaign) -> dict[str, Any]:
    return serialize_values({name: getattr(campaign, name) for name in EDITABLE_FIELDS})


def restore(data: Mapping[str, Any]) -> dict[str, Any]:
    """Turn a stored snapshot back into campaign attribute values."""
    restored: dict[str, Any] = {}
    for name in EDITABLE_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if name in DATETIME_FIELDS and isinstance(value, str):
            value = datetime.fromisoformat(value)
        restored[name] = value
    return restored
