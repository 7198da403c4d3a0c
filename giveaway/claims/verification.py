from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.claims.errors import VerificationExpiredError, VerificationInvalidError
from giveaway.core.config import get_settings
from giveaway.db.models.email_verifications import EmailVerification
from giveaway.db.repo.claims_repo import ClaimsRepo
from giveaway.db.repo.email_verifications_repo import EmailVerificationsRepo
from giveaway.services.hashing import generate_verification_token, hash_value
from giveaway.services.mailer import MailDeliveryError, Mailer

logger = structlog.get_logger(__name__)

VERIFICATION_TTL = timedelta(hours=24)


def build_verification_link(token: str) -> str:
    return f"{get_settings().base_url}/verify?token={token}"


class VerificationService:
    @staticmethod
    async def issue(
        session: AsyncSession,
        *,
        claim_id: UUID,
        email: str,
        campaign_title: str | None,
        mailer: Mailer,
        now_utc: datetime,
    ) -> None:
        token = generate_verification_token()
        await EmailVerificationsRepo.create(
            session,
            verification=EmailVerification(
                id=uuid4(),
                claim_id=claim_id,
                token_hash=hash_value(token),
                created_at=now_utc,
                expires_at=now_utc + VERIFICATION_TTL,
            ),
        )

        try:
            await mailer.send_claim_verification(
                email,
                build_verification_link(token),
                campaign_title,
            )
        except MailDeliveryError:
            logger.warning("claim_verification_email_failed", claim_id=str(claim_id))

    @staticmethod
    async def confirm_email_verification(
        session: AsyncSession,
        token: str,
        *,
        now_utc: datetime | None = None,
    ) -> UUID:
        now_utc = now_utc or datetime.now(timezone.utc)
        if not token:
            raise VerificationInvalidError

        verification = await EmailVerificationsRepo.get_unused_by_token_hash_for_update(
            session,
            hash_value(token),
        )
        if verification is None:
            raise VerificationInvalidError
        if now_utc >= verification.expires_at:
            raise VerificationExpiredError

        await ClaimsRepo.confirm(session, claim_id=verification.claim_id, now_utc=now_utc)
        await EmailVerificationsRepo.mark_used(
            session,
            verification_id=verification.id,
            now_utc=now_utc,
        )
        logger.info("claim_email_verified", claim_id=str(verification.claim_id))
        return verification.claim_id
