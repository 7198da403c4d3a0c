from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.permissions import can_export_campaign
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.service import CampaignService
from giveaway.db.models.claims import Claim
from giveaway.db.repo.claims_repo import ClaimsRepo

logger = structlog.get_logger(__name__)

FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")

CLAIM_COLUMNS = (
    "Status",
    "First Name",
    "Last Name",
    "Email",
    "Company",
    "Title",
    "Phone",
    "Address Line 1",
    "Address Line 2",
    "City",
    "State/Region",
    "Postal Code",
    "Country",
    "Invite Code",
    "Created At",
    "Confirmed At",
    "Shipped At",
)
CAMPAIGN_EXPORT_HEADERS = ("Campaign Slug", "Test Claim", *CLAIM_COLUMNS)
ALL_ADDRESSES_HEADERS = ("Campaign Slug", "Campaign Title", *CLAIM_COLUMNS)


@dataclass(frozen=True, slots=True)
class CsvExport:
    filename: str
    content: str


def neutralize_cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    text = str(value)
    if text.startswith(FORMULA_PREFIXES):
        return f"'{text}"
    return text


def _claim_cells(claim: Claim) -> list[object]:
    return [
        claim.status,
        claim.first_name,
        claim.last_name,
        claim.email,
        claim.company,
        claim.title,
        claim.phone,
        claim.address1,
        claim.address2,
        claim.city,
        claim.region,
        claim.postal_code,
        claim.country,
        claim.invite_code,
        claim.created_at,
        claim.confirmed_at,
        claim.shipped_at,
    ]


def render_csv(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([neutralize_cell(value) for value in row])
    return buffer.getvalue()


def campaign_export_filename(slug: str, *, now_utc: datetime) -> str:
    return f"{slug}-claims-{now_utc.date().isoformat()}.csv"


def all_addresses_filename(*, now_utc: datetime) -> str:
    return f"all-addresses-{now_utc.date().isoformat()}.csv"


def _ensure_allowed(principal: AdminPrincipal) -> None:
    if not can_export_campaign(principal.role):
        raise PermissionDeniedError("You do not have permission to export campaigns")


class ClaimExportService:
    @staticmethod
    async def export_campaign(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        now_utc: datetime | None = None,
    ) -> CsvExport:
        _ensure_allowed(principal)
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_or_raise(session, campaign_id)

        records = await ClaimsRepo.list_for_export(session, campaign_id=campaign.id)
        content = render_csv(
            CAMPAIGN_EXPORT_HEADERS,
            (
                [slug, "Yes" if claim.is_test_claim else "No", *_claim_cells(claim)]
                for claim, slug, _title in records
            ),
        )
        logger.info(
            "campaign_claims_exported",
            campaign_id=str(campaign.id),
            rows=len(records),
            admin_user_id=str(principal.admin_id),
        )
        return CsvExport(
            filename=campaign_export_filename(campaign.slug, now_utc=now_utc),
            content=content,
        )

    @staticmethod
    async def export_all(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        now_utc: datetime | None = None,
    ) -> CsvExport:
        _ensure_allowed(principal)
        now_utc = now_utc or datetime.now(timezone.utc)

        records = await ClaimsRepo.list_for_export(session)
        content = render_csv(
            ALL_ADDRESSES_HEADERS,
            ([slug, title, *_claim_cells(claim)] for claim, slug, title in records),
        )
        logger.info(
            "all_addresses_exported",
            rows=len(records),
            admin_user_id=str(principal.admin_id),
        )
        return CsvExport(filename=all_addresses_filename(now_utc=now_utc), content=content)
