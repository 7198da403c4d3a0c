from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.db.models.campaigns import Campaign
from giveaway.db.models.claims import Claim

ACTIVE_CLAIM_STATUSES = ("pending", "confirmed")


class ClaimsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, claim_id: UUID) -> Claim | None:
        return await session.get(Claim, claim_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, claim_id: UUID) -> Claim | None:
        stmt = select(Claim).where(Claim.id == claim_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_token_for_update(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        claim_token: str,
    ) -> Claim | None:
        stmt = (
            select(Claim)
            .where(Claim.campaign_id == campaign_id, Claim.claim_token == claim_token)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_token(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        claim_token: str,
    ) -> Claim | None:
        stmt = select(Claim).where(
            Claim.campaign_id == campaign_id,
            Claim.claim_token == claim_token,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, claim: Claim) -> Claim:
        session.add(claim)
        await session.flush()
        return claim

    @staticmethod
    async def fingerprint_exists(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        address_fingerprint: str,
        exclude_claim_id: UUID | None = None,
    ) -> bool:
        stmt = select(Claim.id).where(
            Claim.campaign_id == campaign_id,
            Claim.address_fingerprint == address_fingerprint,
        )
        if exclude_claim_id is not None:
            stmt = stmt.where(Claim.id != exclude_claim_id)
        result = await session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def fingerprint_exists_anywhere(session: AsyncSession, address_fingerprint: str) -> bool:
        stmt = select(Claim.id).where(Claim.address_fingerprint == address_fingerprint).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def count_confirmed(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = select(func.count(Claim.id)).where(
            Claim.campaign_id == campaign_id,
            Claim.status == "confirmed",
            Claim.is_test_claim.is_(False),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_active(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = select(func.count(Claim.id)).where(
            Claim.campaign_id == campaign_id,
            Claim.status.in_(ACTIVE_CLAIM_STATUSES),
            Claim.is_test_claim.is_(False),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_by_status(session: AsyncSession, campaign_id: UUID) -> dict[str, int]:
        stmt = (
            select(Claim.status, func.count(Claim.id))
            .where(Claim.campaign_id == campaign_id)
            .group_by(Claim.status)
        )
        result = await session.execute(stmt)
        return {str(status): int(count) for status, count in result.all()}

    @staticmethod
    async def count_for_campaign(session: AsyncSession, campaign_id: UUID) -> int:
        stmt = select(func.count(Claim.id)).where(Claim.campaign_id == campaign_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_by_ip_since(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        ip_hash: str,
        since_utc: datetime,
    ) -> int:
        stmt = select(func.count(Claim.id)).where(
            Claim.campaign_id == campaign_id,
            Claim.ip_hash == ip_hash,
            Claim.created_at >= since_utc,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_by_location(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        location_fingerprint: str,
        exclude_claim_id: UUID | None = None,
    ) -> int:
        stmt = select(func.count(Claim.id)).where(
            Claim.campaign_id == campaign_id,
            Claim.location_fingerprint == location_fingerprint,
        )
        if exclude_claim_id is not None:
            stmt = stmt.where(Claim.id != exclude_claim_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def count_by_email(
        session: AsyncSession,
        *,
        campaign_id: UUID,
        email_normalized: str,
    ) -> int:
        stmt = select(func.count(Claim.id)).where(
            Claim.campaign_id == campaign_id,
            Claim.email_normalized == email_normalized,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)

    @staticmethod
    async def list_claims(
        session: AsyncSession,
        *,
        campaign_id: UUID | None,
        status: str | None,
        search: str | None,
        limit: int,
        offset: int,
    ) -> list[Claim]:
        stmt = select(Claim)
        if campaign_id is not None:
            stmt = stmt.where(Claim.campaign_id == campaign_id)
        if status is not None:
            stmt = stmt.where(Claim.status == status)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Claim.first_name.ilike(pattern),
                    Claim.last_name.ilike(pattern),
                    Claim.email.ilike(pattern),
                )
            )
        stmt = stmt.order_by(Claim.created_at.desc()).limit(limit).offset(offset)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_for_export(
        session: AsyncSession,
        *,
        campaign_id: UUID | None = None,
    ) -> list[tuple[Claim, str, str]]:
        stmt = select(Claim, Campaign.slug, Campaign.title).join(
            Campaign, Campaign.id == Claim.campaign_id
        )
        if campaign_id is not None:
            stmt = stmt.where(Claim.campaign_id == campaign_id)
        stmt = stmt.order_by(Claim.created_at.desc())
        result = await session.execute(stmt)
        return [(claim, str(slug), str(title)) for claim, slug, title in result.all()]

    @staticmethod
    async def delete(session: AsyncSession, claim_id: UUID) -> int:
        stmt = delete(Claim).where(Claim.id == claim_id)
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def delete_many(session: AsyncSession, claim_ids: Sequence[UUID]) -> int:
        if not claim_ids:
            return 0
        stmt = delete(Claim).where(Claim.id.in_(list(claim_ids)))
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def set_shipped_many(
        session: AsyncSession,
        *,
        claim_ids: Sequence[UUID],
        shipped_at: datetime | None,
    ) -> int:
        if not claim_ids:
            return 0
        stmt = (
            update(Claim)
            .where(Claim.id.in_(list(claim_ids)))
            .values(shipped_at=shipped_at)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    @staticmethod
    async def confirm(
        session: AsyncSession,
        *,
        claim_id: UUID,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(Claim)
            .where(Claim.id == claim_id, Claim.status == "pending")
            .values(status="confirmed", confirmed_at=now_utc)
        )
        result = await session.execute(stmt)
        return int(result.rowcount or 0)
