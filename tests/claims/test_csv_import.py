from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.types import AdminPrincipal
from giveaway.claims import csv_import
from giveaway.claims.csv_import import (
    AddressImportService,
    detect_header_row,
    normalize_row,
    parse_csv,
    parse_shipped_date,
)
from giveaway.claims.errors import ImportFileInvalidError

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

SHEET = (
    "Quarterly send list,,,,,\n"
    "Full Name,Email,Street Address 1,City,State,Zip\n"
    "Ada Lovelace,ada@example.com,12 Analytical Way,London,LDN,SW1A 1AA\n"
    "Cher,cher@example.com,1 Sunset Blvd,Los Angeles,CA,90001\n"
    ",,,,,\n"
    "Missing Address,missing@example.com,,Nowhere,NV,89001\n"
)


def _principal(role: str = "admin") -> AdminPrincipal:
    return AdminPrincipal(
        admin_id=uuid4(),
        email="ops@example.com",
        name="Ops",
        role=role,
        session_id=uuid4(),
    )


def test_detect_header_row_skips_preamble() -> None:
    records = [
        ["Quarterly send list"],
        ["Full Name", "Email", "Street Address 1", "City", "State", "Zip"],
    ]

    assert detect_header_row(records) == 1


def test_detect_header_row_defaults_to_first_row() -> None:
    assert detect_header_row([["a", "b"], ["c", "d"]]) == 0


def test_parse_csv_detects_header_and_rejects_incomplete_rows() -> None:
    parsed = parse_csv(SHEET)

    assert [row.first_name for row in parsed.rows] == ["Ada", "Cher"]
    assert parsed.rows[0].last_name == "Lovelace"
    assert parsed.rows[1].last_name == "Cher"
    assert parsed.rows[0].country == "US"
    assert parsed.rows[0].line_number == 3
    assert parsed.rejected_lines == [5]


def test_parse_csv_honors_explicit_header_index() -> None:
    csv_text = "firstName,lastName,address1,city,region,postalCode,country\nA,B,1 St,C,R,11111,CA\n"

    parsed = parse_csv(csv_text, skip_rows=0)

    assert parsed.rows[0].country == "CA"
    assert parsed.rejected_lines == []


@pytest.mark.parametrize("csv_text", ["", "only,a,header\n", "\n\n"])
def test_parse_csv_requires_header_and_data(csv_text: str) -> None:
    with pytest.raises(ImportFileInvalidError):
        parse_csv(csv_text)


def test_parse_csv_rejects_header_index_past_data() -> None:
    with pytest.raises(ImportFileInvalidError):
        parse_csv("a,b\nc,d\n", skip_rows=1)


def test_normalize_row_splits_combined_address() -> None:
    row = normalize_row(
        {
            "First Name": "Grace",
            "Last Name": "Hopper",
            "Address": "1 Navy Yard, Arlington, VA",
            "City": "Arlington",
            "State": "VA",
            "Zip": "22201",
        },
        line_number=2,
    )

    assert row is not None
    assert row.address1 == "1 Navy Yard"


def test_normalize_row_requires_name() -> None:
    row = normalize_row(
        {"Address": "1 Main", "City": "X", "State": "Y", "Zip": "1"},
        line_number=2,
    )

    assert row is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-12-24", datetime(2025, 12, 24, tzinfo=timezone.utc)),
        ("Dec 3", datetime(2026, 12, 3, tzinfo=timezone.utc)),
        ("September 30", datetime(2026, 9, 30, tzinfo=timezone.utc)),
        ("1/15", datetime(2026, 1, 15, tzinfo=timezone.utc)),
        ("1/15/25", datetime(2025, 1, 15, tzinfo=timezone.utc)),
        ("1/15/2024", datetime(2024, 1, 15, tzinfo=timezone.utc)),
    ],
)
def test_parse_shipped_date_formats(value: str, expected: datetime) -> None:
    assert parse_shipped_date(value, default_year=2026) == expected


@pytest.mark.parametrize("value", [None, "", "soon", "Feb 30", "13/40", "2025-99-01"])
def test_parse_shipped_date_unparseable(value: str | None) -> None:
    assert parse_shipped_date(value, default_year=2026) is None


class _NestedTransaction:
    async def __aenter__(self) -> None:
        return None

    async def __aexit__(self, *exc_info: object) -> bool:
        return False


class _FakeSession:
    def __init__(self) -> None:
        self.added: list[object] = []

    def begin_nested(self) -> _NestedTransaction:
        return _NestedTransaction()

    def add(self, instance: object) -> None:
        self.added.append(instance)


def _patch_repos(monkeypatch, *, campaign, known_fingerprints=()) -> None:
    async def _fake_by_slug(session, slug):  # noqa: ARG001
        return campaign

    async def _fake_exists_anywhere(session, address_fingerprint):  # noqa: ARG001
        return address_fingerprint in known_fingerprints

    monkeypatch.setattr(csv_import.CampaignsRepo, "get_by_slug", _fake_by_slug)
    monkeypatch.setattr(
        csv_import.ClaimsRepo,
        "fingerprint_exists_anywhere",
        _fake_exists_anywhere,
    )


@pytest.mark.asyncio
async def test_import_requires_permission() -> None:
    with pytest.raises(PermissionDeniedError):
        await AddressImportService.import_addresses(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal("viewer"),
            campaign_slug="launch",
            csv_text=SHEET,
        )


@pytest.mark.asyncio
async def test_import_rejects_unknown_status(monkeypatch) -> None:
    _patch_repos(monkeypatch, campaign=SimpleNamespace(id=uuid4()))

    with pytest.raises(ImportFileInvalidError):
        await AddressImportService.import_addresses(
            _FakeSession(),  # type: ignore[arg-type]
            principal=_principal(),
            campaign_slug="launch",
            csv_text=SHEET,
            status="lost",
        )


@pytest.mark.asyncio
async def test_import_inserts_rows_and_reports_errors(monkeypatch) -> None:
    session = _FakeSession()
    _patch_repos(monkeypatch, campaign=SimpleNamespace(id=uuid4()))

    summary = await AddressImportService.import_addresses(
        session,  # type: ignore[arg-type]
        principal=_principal(),
        campaign_slug=" launch ",
        csv_text=SHEET,
        status="shipped",
        default_shipped_date="Jan 5",
        now_utc=NOW,
    )

    assert summary.imported == 2
    assert summary.skipped == 0
    assert summary.total == 3
    assert [error.row for error in summary.errors] == [5]
    claim = session.added[0]
    assert claim.status == "shipped"
    assert claim.shipped_at == datetime(2026, 1, 5, tzinfo=timezone.utc)
    assert claim.confirmed_at == NOW
    assert claim.email_normalized == "ada@example.com"
    assert claim.consent_given is False


@pytest.mark.asyncio
async def test_import_skips_known_addresses(monkeypatch) -> None:
    session = _FakeSession()
    first_row = parse_csv(SHEET).rows[0]
    known = csv_import.address_fingerprint(
        first_name=first_row.first_name,
        last_name=first_row.last_name,
        address1=first_row.address1,
        city=first_row.city,
        region=first_row.region,
        postal_code=first_row.postal_code,
        country=first_row.country,
    )
    _patch_repos(monkeypatch, campaign=SimpleNamespace(id=uuid4()), known_fingerprints={known})

    summary = await AddressImportService.import_addresses(
        session,  # type: ignore[arg-type]
        principal=_principal(),
        campaign_slug="launch",
        csv_text=SHEET,
        now_utc=NOW,
    )

    assert summary.imported == 1
    assert summary.skipped == 1
    assert session.added[0].first_name == "Cher"
    assert session.added[0].shipped_at is None
