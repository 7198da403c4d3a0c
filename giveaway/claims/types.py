from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from giveaway.db.models.claims import Claim


@dataclass(slots=True)
class ClaimPayload:
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    company: str | None = None
    title: str | None = None
    phone: str | None = None
    address1: str = ""
    address2: str | None = None
    city: str = ""
    region: str = ""
    postal_code: str = ""
    country: str = ""
    invite_code: str | None = None
    claim_token: str | None = None
    gift_code: str | None = None
    consent: bool = False
    answers: dict[UUID, str | list[str]] = field(default_factory=dict)

    def has_required_address(self) -> bool:
        return all(
            value.strip()
            for value in (
                self.first_name,
                self.last_name,
                self.address1,
                self.city,
                self.region,
                self.postal_code,
                self.country,
            )
        )


@dataclass(slots=True)
class ClaimSubmissionResult:
    claim_id: UUID
    requires_verification: bool


@dataclass(slots=True)
class RegisteredClaim:
    claim: Claim
    confirmed_count: int
    capacity_total: int | None


@dataclass(slots=True)
class PreCreatedClaim:
    claim: Claim
    claim_url: str


@dataclass(slots=True)
class ImportRowError:
    row: int
    error: str


@dataclass(slots=True)
class ImportSummary:
    imported: int
    skipped: int
    total: int
    errors: list[ImportRowError]
