from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.errors import CampaignNotFoundError
from giveaway.campaigns.service import CampaignService
from giveaway.claims.errors import (
    CampaignAtCapacityError,
    ClaimAlreadySubmittedError,
    ClaimMissingFieldsError,
    ClaimTokenInvalidError,
    DuplicateClaimError,
)
from giveaway.claims.service import clean_optional, fingerprints_for, flush_claim
from giveaway.claims.types import ClaimPayload, PreCreatedClaim, RegisteredClaim
from giveaway.core.config import get_settings
from giveaway.db.models.campaigns import Campaign
from giveaway.db.models.claims import Claim
from giveaway.db.repo.campaigns_repo import CampaignsRepo
from giveaway.db.repo.claims_repo import ClaimsRepo
from giveaway.services.addresses import normalize_email
from giveaway.services.hashing import generate_claim_token, hash_value

logger = structlog.get_logger(__name__)

PLACEHOLDER_COUNTRY = "US"


@dataclass(slots=True)
class PreCreatedClaimLookup:
    campaign: Campaign
    claim: Claim


def build_claim_url(*, slug: str, claim_token: str) -> str:
    return f"{get_settings().base_url}/c/{slug}/claim/{claim_token}"


def placeholder_fingerprint(claim_token: str) -> str:
    return hash_value(f"preclaim:{claim_token}")


class AdminClaimService:
    @staticmethod
    async def register_claim(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        payload: ClaimPayload,
        admin_notes: str | None = None,
        now_utc: datetime | None = None,
    ) -> RegisteredClaim:
        """Record a confirmed claim on behalf of someone met in person."""
        now_utc = now_utc or datetime.now(timezone.utc)
        if not payload.has_required_address():
            raise ClaimMissingFieldsError(
                "Missing required fields: first name, last name, and full address are required"
            )

        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )

        address_fp, location_fp = fingerprints_for(payload)
        if await ClaimsRepo.fingerprint_exists(
            session,
            campaign_id=campaign.id,
            address_fingerprint=address_fp,
        ):
            raise DuplicateClaimError("A claim with this name and address already exists")

        if campaign.has_capacity_limit:
            active = await ClaimsRepo.count_active(session, campaign.id)
            if active >= (campaign.capacity_total or 0):
                raise CampaignAtCapacityError

        email = clean_optional(payload.email)
        claim = Claim(
            id=uuid4(),
            campaign_id=campaign.id,
            status="confirmed",
            is_test_claim=campaign.test_mode,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email=email,
            email_normalized=normalize_email(email) if email else None,
            company=clean_optional(payload.company),
            title=clean_optional(payload.title),
            phone=clean_optional(payload.phone),
            address1=payload.address1.strip(),
            address2=clean_optional(payload.address2),
            city=payload.city.strip(),
            region=payload.region.strip(),
            postal_code=payload.postal_code.strip(),
            country=payload.country.strip(),
            address_fingerprint=address_fp,
            location_fingerprint=location_fp,
            consent_given=True,
            consent_timestamp=now_utc,
            pre_created_by=principal.admin_id,
            admin_notes=clean_optional(admin_notes),
            created_at=now_utc,
            confirmed_at=now_utc,
        )
        session.add(claim)
        await flush_claim(session)

        confirmed = await ClaimsRepo.count_confirmed(session, campaign.id)
        logger.info(
            "claim_registered_by_admin",
            campaign_id=str(campaign.id),
            claim_id=str(claim.id),
            admin_user_id=str(principal.admin_id),
        )
        return RegisteredClaim(
            claim=claim,
            confirmed_count=confirmed,
            capacity_total=campaign.capacity_total,
        )

    @staticmethod
    async def pre_create_claim(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        payload: ClaimPayload,
        admin_notes: str | None = None,
        now_utc: datetime | None = None,
    ) -> PreCreatedClaim:
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )

        claim_token = generate_claim_token()
        email = clean_optional(payload.email)
        claim = await ClaimsRepo.create(
            session,
            claim=Claim(
                id=uuid4(),
                campaign_id=campaign.id,
                status="pending",
                claim_token=claim_token,
                first_name=payload.first_name.strip(),
                last_name=payload.last_name.strip(),
                email=email,
                email_normalized=normalize_email(email) if email else None,
                company=clean_optional(payload.company),
                title=clean_optional(payload.title),
                phone=clean_optional(payload.phone),
                address1="",
                city="",
                region="",
                postal_code="",
                country=PLACEHOLDER_COUNTRY,
                address_fingerprint=placeholder_fingerprint(claim_token),
                is_test_claim=campaign.test_mode,
                consent_given=False,
                pre_created_by=principal.admin_id,
                admin_notes=clean_optional(admin_notes),
                created_at=now_utc,
            ),
        )
        logger.info(
            "claim_pre_created",
            campaign_id=str(campaign.id),
            claim_id=str(claim.id),
            admin_user_id=str(principal.admin_id),
        )
        return PreCreatedClaim(
            claim=claim,
            claim_url=build_claim_url(slug=campaign.slug, claim_token=claim_token),
        )

    @staticmethod
    async def get_pre_created_claim(
        session: AsyncSession,
        *,
        slug: str,
        claim_token: str,
    ) -> PreCreatedClaimLookup:
        campaign = await CampaignsRepo.get_by_slug(session, slug)
        if campaign is None:
            raise CampaignNotFoundError("Campaign not found")

        claim = await ClaimsRepo.get_by_token(
            session,
            campaign_id=campaign.id,
            claim_token=claim_token,
        )
        if claim is None:
            raise ClaimTokenInvalidError("Claim not found or invalid token")
        if claim.address1:
            raise ClaimAlreadySubmittedError
        return PreCreatedClaimLookup(campaign=campaign, claim=claim)
