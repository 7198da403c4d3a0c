from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.campaigns.errors import CampaignNotFoundError
from giveaway.claims.answers import AnswerValue, build_answer_rows, clean_answers
from giveaway.claims.errors import (
    AddressLimitReachedError,
    CampaignAtCapacityError,
    CampaignEndedError,
    CampaignNotStartedError,
    ClaimAlreadySubmittedError,
    ClaimConsentRequiredError,
    ClaimEmailRequiredError,
    ClaimMissingFieldsError,
    ClaimRateLimitedError,
    ClaimTokenInvalidError,
    DuplicateClaimError,
    DuplicateEmailError,
    InviteCodeExhaustedError,
    InviteCodeInvalidError,
)
from giveaway.claims.types import ClaimPayload, ClaimSubmissionResult
from giveaway.claims.verification import VerificationService
from giveaway.db.models.campaigns import Campaign
from giveaway.db.models.claims import Claim
from giveaway.db.repo.admin_users_repo import AdminUsersRepo
from giveaway.db.repo.claims_repo import ClaimsRepo
from giveaway.db.repo.campaigns_repo import CampaignsRepo
from giveaway.db.repo.gift_codes_repo import GiftCodesRepo
from giveaway.db.repo.invite_codes_repo import InviteCodesRepo
from giveaway.db.repo.questions_repo import ClaimAnswersRepo, QuestionsRepo
from giveaway.services.addresses import address_fingerprint, location_fingerprint, normalize_email
from giveaway.services.mailer import MailDeliveryError, Mailer

logger = structlog.get_logger(__name__)

CLAIM_IP_RATE_LIMIT_WINDOW = timedelta(hours=24)
FINGERPRINT_CONSTRAINT_NAME = "uq_claims_campaign_address_fingerprint"


def clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def ensure_claim_window(campaign: Campaign, *, now_utc: datetime) -> None:
    if campaign.starts_at is not None and campaign.starts_at > now_utc:
        raise CampaignNotStartedError
    if campaign.ends_at is not None and campaign.ends_at < now_utc:
        raise CampaignEndedError


def is_fingerprint_conflict(exc: IntegrityError) -> bool:
    return FINGERPRINT_CONSTRAINT_NAME in str(exc.orig)


def fingerprints_for(payload: ClaimPayload) -> tuple[str, str]:
    address_fp = address_fingerprint(
        first_name=payload.first_name,
        last_name=payload.last_name,
        address1=payload.address1,
        city=payload.city,
        region=payload.region,
        postal_code=payload.postal_code,
        country=payload.country,
    )
    location_fp = location_fingerprint(
        address1=payload.address1,
        city=payload.city,
        region=payload.region,
        postal_code=payload.postal_code,
        country=payload.country,
    )
    return address_fp, location_fp


def address_limit_error(limit: int) -> AddressLimitReachedError:
    noun = "person" if limit == 1 else "people"
    return AddressLimitReachedError(
        f"This address has reached the maximum of {limit} {noun} for this campaign"
    )


async def flush_claim(session: AsyncSession) -> None:
    try:
        await session.flush()
    except IntegrityError as exc:
        if is_fingerprint_conflict(exc):
            raise DuplicateClaimError from exc
        raise


class ClaimService:
    @staticmethod
    async def _consume_invite_code(
        session: AsyncSession,
        *,
        campaign: Campaign,
        invite_code: str | None,
    ) -> str:
        code = (invite_code or "").strip().upper()
        if not code:
            raise InviteCodeInvalidError("Invite code is required")

        invite = await InviteCodesRepo.get_by_code(session, campaign_id=campaign.id, code=code)
        if invite is None or not invite.is_active:
            raise InviteCodeInvalidError
        if invite.max_uses is not None and invite.uses >= invite.max_uses:
            raise InviteCodeExhaustedError

        consumed = await InviteCodesRepo.consume(session, invite.id)
        if not consumed:
            raise InviteCodeExhaustedError
        return code

    @staticmethod
    async def _enforce_address_limit(
        session: AsyncSession,
        *,
        campaign: Campaign,
        location_fp: str,
        exclude_claim: Claim | None = None,
    ) -> None:
        limit = campaign.max_claims_per_address
        if not limit or limit <= 0:
            return

        at_location = await ClaimsRepo.count_by_location(
            session,
            campaign_id=campaign.id,
            location_fingerprint=location_fp,
            exclude_claim_id=exclude_claim.id if exclude_claim is not None else None,
        )
        if at_location >= limit:
            raise address_limit_error(limit)

    @staticmethod
    async def _clean_answers(
        session: AsyncSession,
        *,
        campaign: Campaign,
        payload: ClaimPayload,
    ) -> dict[UUID, AnswerValue]:
        if not campaign.enable_questions:
            return {}
        questions = await QuestionsRepo.list_for_campaign(session, campaign.id)
        return clean_answers(questions, payload.answers)

    @staticmethod
    async def _save_answers(
        session: AsyncSession,
        *,
        claim: Claim,
        answers: dict[UUID, AnswerValue],
        now_utc: datetime,
    ) -> None:
        if not answers:
            return
        await ClaimAnswersRepo.add_many(session, build_answer_rows(claim.id, answers, now_utc=now_utc))

    @staticmethod
    async def _send_gift_confirmation(
        session: AsyncSession,
        *,
        claim: Claim,
        campaign: Campaign,
        mailer: Mailer,
    ) -> None:
        if claim.pre_created_by is None or not claim.email:
            return

        gifter = await AdminUsersRepo.get_by_id(session, claim.pre_created_by)
        if gifter is None:
            return

        try:
            await mailer.send_gift_confirmation(
                claim.email,
                campaign.title,
                gifter.display_name or gifter.name,
                gifter.linkedin_url,
            )
        except MailDeliveryError:
            logger.warning("gift_confirmation_email_failed", claim_id=str(claim.id))

    @staticmethod
    async def _finish(
        session: AsyncSession,
        *,
        claim: Claim,
        campaign: Campaign,
        mailer: Mailer,
        now_utc: datetime,
    ) -> ClaimSubmissionResult:
        if claim.status == "pending" and claim.email:
            await VerificationService.issue(
                session,
                claim_id=claim.id,
                email=claim.email,
                campaign_title=campaign.title,
                mailer=mailer,
                now_utc=now_utc,
            )
            return ClaimSubmissionResult(claim_id=claim.id, requires_verification=True)

        await ClaimService._send_gift_confirmation(
            session,
            claim=claim,
            campaign=campaign,
            mailer=mailer,
        )
        return ClaimSubmissionResult(claim_id=claim.id, requires_verification=False)

    @staticmethod
    async def submit_claim(
        session: AsyncSession,
        *,
        slug: str,
        payload: ClaimPayload,
        ip_hash: str,
        user_agent: str | None,
        mailer: Mailer,
        now_utc: datetime | None = None,
    ) -> ClaimSubmissionResult:
        now_utc = now_utc or datetime.now(timezone.utc)

        campaign = await CampaignsRepo.get_active_by_slug(session, slug)
        if campaign is None:
            raise CampaignNotFoundError
        ensure_claim_window(campaign, now_utc=now_utc)

        if payload.claim_token:
            return await ClaimService.complete_pre_created_claim(
                session,
                campaign=campaign,
                payload=payload,
                ip_hash=ip_hash,
                user_agent=user_agent,
                mailer=mailer,
                now_utc=now_utc,
            )

        if not payload.has_required_address():
            raise ClaimMissingFieldsError
        email = clean_optional(payload.email)
        if campaign.require_email and email is None:
            raise ClaimEmailRequiredError
        if not payload.consent:
            raise ClaimConsentRequiredError
        answers = await ClaimService._clean_answers(session, campaign=campaign, payload=payload)

        invite_code = clean_optional(payload.invite_code)
        if campaign.require_invite_code:
            invite_code = await ClaimService._consume_invite_code(
                session,
                campaign=campaign,
                invite_code=payload.invite_code,
            )
        elif invite_code is not None:
            invite_code = invite_code.upper()

        if campaign.has_capacity_limit:
            confirmed = await ClaimsRepo.count_confirmed(session, campaign.id)
            if confirmed >= (campaign.capacity_total or 0):
                raise CampaignAtCapacityError

        recent_from_ip = await ClaimsRepo.count_by_ip_since(
            session,
            campaign_id=campaign.id,
            ip_hash=ip_hash,
            since_utc=now_utc - CLAIM_IP_RATE_LIMIT_WINDOW,
        )
        if recent_from_ip >= campaign.max_claims_per_ip_per_day:
            logger.warning("claim_rate_limited", campaign_id=str(campaign.id))
            raise ClaimRateLimitedError

        address_fp, location_fp = fingerprints_for(payload)
        if await ClaimsRepo.fingerprint_exists(
            session,
            campaign_id=campaign.id,
            address_fingerprint=address_fp,
        ):
            raise DuplicateClaimError
        await ClaimService._enforce_address_limit(
            session,
            campaign=campaign,
            location_fp=location_fp,
        )

        email_normalized = normalize_email(email) if email is not None else None
        if email_normalized is not None and campaign.max_claims_per_email > 0:
            email_claims = await ClaimsRepo.count_by_email(
                session,
                campaign_id=campaign.id,
                email_normalized=email_normalized,
            )
            if email_claims >= campaign.max_claims_per_email:
                raise DuplicateEmailError

        pre_created_by = None
        gift_code = clean_optional(payload.gift_code)
        if gift_code is not None:
            gift = await GiftCodesRepo.get_for_campaign(
                session,
                campaign_id=campaign.id,
                code=gift_code,
            )
            if gift is not None:
                pre_created_by = gift.admin_id

        status = "pending" if campaign.require_email_verification else "confirmed"
        claim = Claim(
            id=uuid4(),
            campaign_id=campaign.id,
            status=status,
            is_test_claim=campaign.test_mode,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email=email,
            email_normalized=email_normalized,
            company=clean_optional(payload.company),
            title=clean_optional(payload.title),
            phone=clean_optional(payload.phone),
            address1=payload.address1.strip(),
            address2=clean_optional(payload.address2),
            city=payload.city.strip(),
            region=payload.region.strip(),
            postal_code=payload.postal_code.strip(),
            country=payload.country.strip(),
            invite_code=invite_code,
            address_fingerprint=address_fp,
            location_fingerprint=location_fp,
            ip_hash=ip_hash,
            user_agent=user_agent,
            consent_given=True,
            consent_timestamp=now_utc,
            pre_created_by=pre_created_by,
            created_at=now_utc,
            confirmed_at=now_utc if status == "confirmed" else None,
        )
        session.add(claim)
        await flush_claim(session)
        await ClaimService._save_answers(session, claim=claim, answers=answers, now_utc=now_utc)

        logger.info(
            "claim_submitted",
            campaign_id=str(campaign.id),
            claim_id=str(claim.id),
            status=status,
            gifted=pre_created_by is not None,
        )
        return await ClaimService._finish(
            session,
            claim=claim,
            campaign=campaign,
            mailer=mailer,
            now_utc=now_utc,
        )

    @staticmethod
    async def complete_pre_created_claim(
        session: AsyncSession,
        *,
        campaign: Campaign,
        payload: ClaimPayload,
        ip_hash: str,
        user_agent: str | None,
        mailer: Mailer,
        now_utc: datetime,
    ) -> ClaimSubmissionResult:
        if not payload.has_required_address():
            raise ClaimMissingFieldsError
        if not payload.consent:
            raise ClaimConsentRequiredError
        answers = await ClaimService._clean_answers(session, campaign=campaign, payload=payload)

        claim = await ClaimsRepo.get_by_token_for_update(
            session,
            campaign_id=campaign.id,
            claim_token=payload.claim_token or "",
        )
        if claim is None:
            raise ClaimTokenInvalidError
        if claim.address1:
            raise ClaimAlreadySubmittedError

        address_fp, location_fp = fingerprints_for(payload)
        if await ClaimsRepo.fingerprint_exists(
            session,
            campaign_id=campaign.id,
            address_fingerprint=address_fp,
            exclude_claim_id=claim.id,
        ):
            raise DuplicateClaimError
        await ClaimService._enforce_address_limit(
            session,
            campaign=campaign,
            location_fp=location_fp,
            exclude_claim=claim,
        )

        email = clean_optional(payload.email) or claim.email
        status = "pending" if campaign.require_email_verification and email else "confirmed"
        invite_code = clean_optional(payload.invite_code)

        claim.first_name = payload.first_name.strip()
        claim.last_name = payload.last_name.strip()
        claim.email = email
        claim.email_normalized = normalize_email(email) if email else None
        claim.company = clean_optional(payload.company) or claim.company
        claim.title = clean_optional(payload.title) or claim.title
        claim.phone = clean_optional(payload.phone) or claim.phone
        claim.address1 = payload.address1.strip()
        claim.address2 = clean_optional(payload.address2)
        claim.city = payload.city.strip()
        claim.region = payload.region.strip()
        claim.postal_code = payload.postal_code.strip()
        claim.country = payload.country.strip()
        claim.invite_code = invite_code.upper() if invite_code else None
        claim.address_fingerprint = address_fp
        claim.location_fingerprint = location_fp
        claim.ip_hash = ip_hash
        claim.user_agent = user_agent
        claim.consent_given = True
        claim.consent_timestamp = now_utc
        claim.status = status
        claim.is_test_claim = campaign.test_mode
        claim.confirmed_at = now_utc if status == "confirmed" else None
        await flush_claim(session)
        await ClaimService._save_answers(session, claim=claim, answers=answers, now_utc=now_utc)

        logger.info(
            "pre_created_claim_submitted",
            campaign_id=str(campaign.id),
            claim_id=str(claim.id),
            status=status,
        )
        return await ClaimService._finish(
            session,
            claim=claim,
            campaign=campaign,
            mailer=mailer,
            now_utc=now_utc,
        )
