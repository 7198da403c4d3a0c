from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.errors import OtpDeliveryError, OtpRateLimitedError
from giveaway.auth.sessions import SessionService
from giveaway.auth.types import OtpRejected, OtpVerified, OtpVerifyResult
from giveaway.db.models.admin_otp_requests import AdminOtpRequest
from giveaway.db.repo.admin_otp_repo import AdminOtpRepo
from giveaway.db.repo.admin_users_repo import AdminUsersRepo
from giveaway.services.addresses import normalize_email
from giveaway.services.hashing import generate_otp, hash_value
from giveaway.services.mailer import MailDeliveryError, Mailer

logger = structlog.get_logger(__name__)

OTP_TTL = timedelta(minutes=10)
OTP_MAX_ATTEMPTS = 5
OTP_RATE_LIMIT_WINDOW = timedelta(hours=1)
OTP_MAX_REQUESTS_PER_EMAIL = 3
OTP_MAX_REQUESTS_PER_IP = 10


class OtpService:
    @staticmethod
    async def request_otp(
        session: AsyncSession,
        *,
        email: str,
        ip_hash: str,
        mailer: Mailer,
        now_utc: datetime | None = None,
    ) -> None:
        """Issue a login code; unknown or inactive accounts get the same silent success."""
        now_utc = now_utc or datetime.now(timezone.utc)
        normalized_email = normalize_email(email)

        admin = await AdminUsersRepo.get_by_email(session, normalized_email)
        if admin is None or not admin.is_active:
            logger.info("otp_request_ignored", reason="unknown_or_inactive")
            return

        window_start = now_utc - OTP_RATE_LIMIT_WINDOW
        email_requests = await AdminOtpRepo.count_for_email_since(
            session,
            email=normalized_email,
            since_utc=window_start,
        )
        if email_requests >= OTP_MAX_REQUESTS_PER_EMAIL:
            logger.warning("otp_request_rate_limited", scope="email")
            raise OtpRateLimitedError

        ip_requests = await AdminOtpRepo.count_for_ip_since(
            session,
            ip_hash=ip_hash,
            since_utc=window_start,
        )
        if ip_requests >= OTP_MAX_REQUESTS_PER_IP:
            logger.warning("otp_request_rate_limited", scope="ip")
            raise OtpRateLimitedError

        otp = generate_otp()
        await AdminOtpRepo.create(
            session,
            otp_request=AdminOtpRequest(
                id=uuid4(),
                email=normalized_email,
                otp_hash=hash_value(otp),
                ip_hash=ip_hash,
                attempts=0,
                max_attempts=OTP_MAX_ATTEMPTS,
                created_at=now_utc,
                expires_at=now_utc + OTP_TTL,
            ),
        )

        try:
            await mailer.send_otp(normalized_email, otp)
        except MailDeliveryError as exc:
            logger.exception("otp_delivery_failed", admin_user_id=str(admin.id))
            raise OtpDeliveryError from exc

        logger.info("otp_sent", admin_user_id=str(admin.id))

    @staticmethod
    async def verify_otp(
        session: AsyncSession,
        *,
        email: str,
        otp: str,
        ip_hash: str | None,
        user_agent: str | None,
        now_utc: datetime | None = None,
    ) -> OtpVerifyResult:
        now_utc = now_utc or datetime.now(timezone.utc)
        normalized_email = normalize_email(email)

        otp_request = await AdminOtpRepo.get_latest_unused_for_update(session, normalized_email)
        if otp_request is None:
            return OtpRejected(reason="no_pending_otp")
        if now_utc >= otp_request.expires_at:
            return OtpRejected(reason="expired")
        if otp_request.attempts >= otp_request.max_attempts:
            return OtpRejected(reason="attempts_exhausted")

        if not secrets.compare_digest(otp_request.otp_hash, hash_value(otp.strip())):
            await AdminOtpRepo.increment_attempts(session, otp_request.id)
            logger.info("otp_code_mismatch", attempts=otp_request.attempts + 1)
            return OtpRejected(reason="code_mismatch")

        await AdminOtpRepo.mark_used(session, otp_request_id=otp_request.id, now_utc=now_utc)

        admin = await AdminUsersRepo.get_by_email(session, normalized_email)
        if admin is None:
            return OtpRejected(reason="unknown_admin")
        if not admin.is_active:
            return OtpRejected(reason="inactive_account")

        token = await SessionService.create_session(
            session,
            admin=admin,
            ip_hash=ip_hash,
            user_agent=user_agent,
            now_utc=now_utc,
        )
        logger.info("admin_logged_in", admin_user_id=str(admin.id), role=admin.role)
        return OtpVerified(
            session_token=token,
            admin_id=admin.id,
            email=admin.email,
            role=admin.role,
        )
