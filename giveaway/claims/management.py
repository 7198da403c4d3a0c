from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.permissions import can_bulk_delete_claims, can_delete_claim, can_manage_claims
from giveaway.auth.types import AdminPrincipal
from giveaway.claims.errors import ClaimInvalidUpdateError, ClaimNotFoundError
from giveaway.claims.service import clean_optional
from giveaway.db.models.claims import Claim
from giveaway.db.repo.campaigns_repo import CampaignsRepo
from giveaway.db.repo.claims_repo import ClaimsRepo
from giveaway.services.addresses import normalize_email

logger = structlog.get_logger(__name__)

CLAIM_STATUSES = frozenset({"pending", "confirmed", "shipped"})
CONTACT_FIELDS = ("first_name", "last_name", "company", "title", "phone")
MAX_LIST_LIMIT = 500


def _ensure_can_manage(principal: AdminPrincipal) -> None:
    if not can_manage_claims(principal.role):
        raise PermissionDeniedError("You do not have permission to modify claims")


def apply_claim_changes(claim: Claim, changes: Mapping[str, Any], *, now_utc: datetime) -> None:
    if "admin_notes" in changes:
        claim.admin_notes = clean_optional(changes["admin_notes"])

    if "status" in changes and changes["status"] is not None:
        status = str(changes["status"])
        if status not in CLAIM_STATUSES:
            raise ClaimInvalidUpdateError(f"Unsupported status: {status}")
        claim.status = status
        if status in {"confirmed", "shipped"} and claim.confirmed_at is None:
            claim.confirmed_at = now_utc

    if "shipped" in changes and changes["shipped"] is not None:
        claim.shipped_at = now_utc if changes["shipped"] else None

    for name in CONTACT_FIELDS:
        if name in changes:
            value = clean_optional(changes[name])
            if name in {"first_name", "last_name"}:
                value = value or ""
            setattr(claim, name, value)

    if "email" in changes:
        email = clean_optional(changes["email"])
        claim.email = email
        claim.email_normalized = normalize_email(email) if email else None


class ClaimManagementService:
    @staticmethod
    async def list_claims(
        session: AsyncSession,
        *,
        campaign_id: UUID | None = None,
        status: str | None = None,
        search: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Claim]:
        if status is not None and status not in CLAIM_STATUSES:
            raise ClaimInvalidUpdateError(f"Unsupported status: {status}")
        return await ClaimsRepo.list_claims(
            session,
            campaign_id=campaign_id,
            status=status,
            search=clean_optional(search),
            limit=max(1, min(limit, MAX_LIST_LIMIT)),
            offset=max(0, offset),
        )

    @staticmethod
    async def update_claim(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        claim_id: UUID,
        changes: Mapping[str, Any],
        now_utc: datetime | None = None,
    ) -> Claim:
        _ensure_can_manage(principal)
        now_utc = now_utc or datetime.now(timezone.utc)
        claim = await ClaimsRepo.get_by_id_for_update(session, claim_id)
        if claim is None:
            raise ClaimNotFoundError

        apply_claim_changes(claim, changes, now_utc=now_utc)
        await session.flush()
        logger.info(
            "claim_updated",
            claim_id=str(claim.id),
            fields=sorted(changes.keys()),
            admin_user_id=str(principal.admin_id),
        )
        return claim

    @staticmethod
    async def delete_claim(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        claim_id: UUID,
    ) -> None:
        claim = await ClaimsRepo.get_by_id(session, claim_id)
        if claim is None:
            raise ClaimNotFoundError

        campaign = await CampaignsRepo.get_by_id(session, claim.campaign_id)
        allowed = can_delete_claim(
            role=principal.role,
            user_id=principal.admin_id,
            campaign_created_by=campaign.created_by if campaign is not None else None,
            is_awaiting_address=claim.is_awaiting_address,
        )
        if not allowed:
            raise PermissionDeniedError(
                "You do not have permission to delete claims in this campaign"
            )

        await ClaimsRepo.delete(session, claim.id)
        logger.info(
            "claim_deleted",
            claim_id=str(claim_id),
            pre_created=claim.is_awaiting_address,
            admin_user_id=str(principal.admin_id),
        )

    @staticmethod
    async def bulk_delete_claims(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        claim_ids: Sequence[UUID],
    ) -> int:
        if not can_bulk_delete_claims(principal.role):
            raise PermissionDeniedError("Only super admins can bulk delete claims")
        if not claim_ids:
            raise ClaimInvalidUpdateError("No claim IDs provided")

        deleted = await ClaimsRepo.delete_many(session, claim_ids)
        logger.info(
            "claims_bulk_deleted",
            requested=len(claim_ids),
            deleted=deleted,
            admin_user_id=str(principal.admin_id),
        )
        return deleted

    @staticmethod
    async def bulk_update_shipped(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        claim_ids: Sequence[UUID],
        shipped_at: datetime | None,
    ) -> int:
        _ensure_can_manage(principal)
        if not claim_ids:
            raise ClaimInvalidUpdateError("No claim IDs provided")

        updated = await ClaimsRepo.set_shipped_many(
            session,
            claim_ids=claim_ids,
            shipped_at=shipped_at,
        )
        logger.info(
            "claims_bulk_shipped_updated",
            updated=updated,
            shipped=shipped_at is not None,
            admin_user_id=str(principal.admin_id),
        )
        return updated
