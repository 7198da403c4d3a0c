from __future__ import annotations

import csv
import io
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.permissions import can_import_addresses
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.errors import CampaignNotFoundError
from giveaway.claims.errors import ImportFileInvalidError
from giveaway.claims.types import ImportRowError, ImportSummary
from giveaway.db.models.claims import Claim
from giveaway.db.repo.campaigns_repo import CampaignsRepo
from giveaway.db.repo.claims_repo import ClaimsRepo
from giveaway.services.addresses import address_fingerprint, location_fingerprint, normalize_email

logger = structlog.get_logger(__name__)

IMPORT_STATUSES = frozenset({"confirmed", "pending", "shipped"})
DEFAULT_IMPORT_COUNTRY = "US"
HEADER_SCAN_ROWS = 10
HEADER_MIN_MATCHES = 3
HEADER_HINTS = (
    "full name",
    "firstname",
    "lastname",
    "name",
    "email",
    "address",
    "street",
    "city",
    "state",
    "region",
    "zip",
    "postal",
    "country",
)
MONTH_PREFIXES = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

_MONTH_DAY_PATTERN = re.compile(r"^([A-Za-z]+)\s+(\d{1,2})$")
_SLASH_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?$")

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "first_name": ("firstName", "FirstName", "first_name", "First Name"),
    "last_name": ("lastName", "LastName", "last_name", "Last Name"),
    "email": ("email", "Email"),
    "company": ("company", "Company"),
    "title": ("title", "Role", "Title"),
    "phone": ("phone", "Phone"),
    "address1": ("address1", "Street Address 1", "Address"),
    "address2": ("address2", "Street Address 2"),
    "city": ("city", "City"),
    "region": ("region", "State", "state"),
    "postal_code": ("postalCode", "Zip", "zip", "PostalCode", "postal_code"),
    "country": ("country", "Country"),
    "shipped_date": ("Shipped Date", "shipped_date"),
}


@dataclass(slots=True)
class ImportRow:
    line_number: int
    first_name: str
    last_name: str
    email: str | None
    company: str | None
    title: str | None
    phone: str | None
    address1: str
    address2: str | None
    city: str
    region: str
    postal_code: str
    country: str
    shipped_date: str | None


@dataclass(slots=True)
class ParsedImport:
    rows: list[ImportRow]
    rejected_lines: list[int]


def _pick(raw_row: Mapping[str, str], field: str) -> str:
    for alias in FIELD_ALIASES[field]:
        value = raw_row.get(alias, "")
        if value and value.strip():
            return value.strip()
    return ""


def detect_header_row(records: list[list[str]]) -> int:
    for index, record in enumerate(records[:HEADER_SCAN_ROWS]):
        line = ",".join(record).lower()
        matches = sum(1 for hint in HEADER_HINTS if hint in line)
        if matches >= HEADER_MIN_MATCHES:
            return index
    return 0


def normalize_row(raw_row: Mapping[str, str], *, line_number: int) -> ImportRow | None:
    first_name = _pick(raw_row, "first_name")
    last_name = _pick(raw_row, "last_name")
    full_name = (raw_row.get("Full Name") or "").strip()
    if not first_name and not last_name and full_name:
        name_parts = full_name.split()
        first_name = name_parts[0]
        last_name = " ".join(name_parts[1:]) or name_parts[0]
    if not first_name or not last_name:
        return None

    address1 = _pick(raw_row, "address1")
    if "," in address1 and not (raw_row.get("Street Address 1") or "").strip():
        address_parts = [part.strip() for part in address1.split(",")]
        if len(address_parts) >= 3:
            address1 = address_parts[0]

    city = _pick(raw_row, "city")
    region = _pick(raw_row, "region")
    postal_code = _pick(raw_row, "postal_code")
    if not address1 or not city or not region or not postal_code:
        return None

    return ImportRow(
        line_number=line_number,
        first_name=first_name,
        last_name=last_name,
        email=_pick(raw_row, "email") or None,
        company=_pick(raw_row, "company") or None,
        title=_pick(raw_row, "title") or None,
        phone=_pick(raw_row, "phone") or None,
        address1=address1,
        address2=_pick(raw_row, "address2") or None,
        city=city,
        region=region,
        postal_code=postal_code,
        country=_pick(raw_row, "country") or DEFAULT_IMPORT_COUNTRY,
        shipped_date=_pick(raw_row, "shipped_date") or None,
    )


def parse_csv(csv_text: str, *, skip_rows: int | None = None) -> ParsedImport:
    """Parse an address sheet; ``skip_rows`` pins the header row index instead of detecting it."""
    records: list[list[str]] = []
    for record in csv.reader(io.StringIO(csv_text.lstrip("\ufeff"))):
        if any(cell.strip() for cell in record):
            records.append(record)

    if len(records) < 2:
        raise ImportFileInvalidError("CSV file must have at least a header row and one data row")

    header_index = detect_header_row(records) if skip_rows is None else skip_rows
    if header_index < 0 or header_index >= len(records) - 1:
        raise ImportFileInvalidError("Header row is outside the file")

    headers = [header.strip() for header in records[header_index]]
    rows: list[ImportRow] = []
    rejected_lines: list[int] = []
    for offset, record in enumerate(records[header_index + 1 :], start=header_index + 2):
        raw_row = {
            header: record[position].strip() if position < len(record) else ""
            for position, header in enumerate(headers)
        }
        row = normalize_row(raw_row, line_number=offset)
        if row is None:
            rejected_lines.append(offset)
        else:
            rows.append(row)

    return ParsedImport(rows=rows, rejected_lines=rejected_lines)


def parse_shipped_date(value: str | None, *, default_year: int) -> datetime | None:
    if not value:
        return None
    candidate = value.strip()

    if "-" in candidate:
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    month_day = _MONTH_DAY_PATTERN.match(candidate)
    if month_day is not None:
        month_name = month_day.group(1).lower()
        for month_index, prefix in enumerate(MONTH_PREFIXES, start=1):
            if month_name.startswith(prefix):
                try:
                    return datetime(
                        default_year,
                        month_index,
                        int(month_day.group(2)),
                        tzinfo=timezone.utc,
                    )
                except ValueError:
                    return None
        return None

    slash_date = _SLASH_DATE_PATTERN.match(candidate)
    if slash_date is not None:
        year_text = slash_date.group(3)
        if year_text is None:
            year = default_year
        elif len(year_text) == 2:
            year = 2000 + int(year_text)
        else:
            year = int(year_text)
        try:
            return datetime(
                year,
                int(slash_date.group(1)),
                int(slash_date.group(2)),
                tzinfo=timezone.utc,
            )
        except ValueError:
            return None

    return None


class AddressImportService:
    @staticmethod
    async def import_addresses(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_slug: str,
        csv_text: str,
        status: str = "confirmed",
        skip_rows: int | None = None,
        default_shipped_date: str | None = None,
        now_utc: datetime | None = None,
    ) -> ImportSummary:
        if not can_import_addresses(principal.role):
            raise PermissionDeniedError("You do not have permission to import addresses")
        if status not in IMPORT_STATUSES:
            raise ImportFileInvalidError(f"Unsupported status: {status}")

        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignsRepo.get_by_slug(session, campaign_slug.strip())
        if campaign is None:
            raise CampaignNotFoundError("Campaign not found")

        parsed = parse_csv(csv_text, skip_rows=skip_rows)
        errors = [
            ImportRowError(row=line_number, error="Missing name or address fields")
            for line_number in parsed.rejected_lines
        ]
        imported = 0
        skipped = 0

        for row in parsed.rows:
            address_fp = address_fingerprint(
                first_name=row.first_name,
                last_name=row.last_name,
                address1=row.address1,
                city=row.city,
                region=row.region,
                postal_code=row.postal_code,
                country=row.country,
            )
            if await ClaimsRepo.fingerprint_exists_anywhere(session, address_fp):
                skipped += 1
                continue

            shipped_at = None
            if status == "shipped":
                shipped_at = (
                    parse_shipped_date(row.shipped_date, default_year=now_utc.year)
                    or parse_shipped_date(default_shipped_date, default_year=now_utc.year)
                    or now_utc
                )

            claim = Claim(
                id=uuid4(),
                campaign_id=campaign.id,
                status=status,
                is_test_claim=False,
                first_name=row.first_name,
                last_name=row.last_name,
                email=row.email,
                email_normalized=normalize_email(row.email) if row.email else None,
                company=row.company,
                title=row.title,
                phone=row.phone,
                address1=row.address1,
                address2=row.address2,
                city=row.city,
                region=row.region,
                postal_code=row.postal_code,
                country=row.country,
                address_fingerprint=address_fp,
                location_fingerprint=location_fingerprint(
                    address1=row.address1,
                    city=row.city,
                    region=row.region,
                    postal_code=row.postal_code,
                    country=row.country,
                ),
                consent_given=False,
                created_at=now_utc,
                confirmed_at=now_utc if status in {"confirmed", "shipped"} else None,
                shipped_at=shipped_at,
            )
            try:
                async with session.begin_nested():
                    session.add(claim)
            except IntegrityError as exc:
                errors.append(
                    ImportRowError(row=row.line_number, error=f"Database error - {exc.orig}")
                )
                continue
            imported += 1

        logger.info(
            "addresses_imported",
            campaign_id=str(campaign.id),
            imported=imported,
            skipped=skipped,
            failed=len(errors),
            admin_user_id=str(principal.admin_id),
        )
        return ImportSummary(
            imported=imported,
            skipped=skipped,
            total=len(parsed.rows) + len(parsed.rejected_lines),
            errors=errors,
        )
