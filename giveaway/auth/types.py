from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

Role = Literal["super_admin", "admin", "viewer"]
AdminAuthFailureKind = Literal["no_session", "invalid_session", "inactive_account"]
OtpRejectReason = Literal[
    "no_pending_otp",
    "expired",
    "attempts_exhausted",
    "code_mismatch",
    "unknown_admin",
    "inactive_account",
]

ROLES: tuple[str, ...] = ("super_admin", "admin", "viewer")


@dataclass(frozen=True, slots=True)
class AdminPrincipal:
    """Proof that the caller holds a live session of an active admin."""

    admin_id: UUID
    email: str
    name: str
    role: str
    session_id: UUID


@dataclass(frozen=True, slots=True)
class AdminAuthFailure:
    kind: AdminAuthFailureKind


AdminAuthResult = AdminPrincipal | AdminAuthFailure


@dataclass(frozen=True, slots=True)
class OtpVerified:
    session_token: str
    admin_id: UUID
    email: str
    role: str


@dataclass(frozen=True, slots=True)
class OtpRejected:
    reason: OtpRejectReason


OtpVerifyResult = OtpVerified | OtpRejected
