from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Protocol

import httpx
import structlog

from giveaway.core.config import Settings

logger = structlog.get_logger(__name__)


class MailDeliveryError(Exception):
    pass


class Mailer(Protocol):
    async def send_otp(self, email: str, otp: str) -> None: ...

    async def send_claim_verification(
        self,
        email: str,
        verification_link: str,
        campaign_title: str | None = None,
    ) -> None: ...

    async def send_invite(self, email: str, name: str, role: str) -> None: ...

    async def send_gift_confirmation(
        self,
        email: str,
        campaign_title: str,
        gifter_name: str,
        gifter_linkedin_url: str | None = None,
    ) -> None: ...


@dataclass(frozen=True)
class OutboundMessage:
    to: str
    subject: str
    text: str
    html: str


def _wrap_html(title: str, body_html: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"></head>"
        "<body style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        f"<h2>{escape(title)}</h2>{body_html}"
        "<hr><p style=\"color: #999; font-size: 12px;\">"
        "If you didn't request this, please ignore this email.</p>"
        "</body></html>"
    )


def build_otp_message(*, email: str, otp: str) -> OutboundMessage:
    text = (
        f"Your one-time login code is: {otp}\n\n"
        "This code will expire in 10 minutes.\n\n"
        "If you didn't request this code, please ignore this email."
    )
    html = _wrap_html(
        "Your Admin Login Code",
        f"<p>Your one-time login code is:</p><p style=\"font-size: 32px; letter-spacing: 8px;\">"
        f"<strong>{escape(otp)}</strong></p><p>This code will expire in 10 minutes.</p>",
    )
    return OutboundMessage(to=email, subject="Your Admin Login Code", text=text, html=html)


def build_verification_message(
    *,
    email: str,
    verification_link: str,
    campaign_title: str | None,
) -> OutboundMessage:
    subject = f"Verify your email for {campaign_title or 'your claim'}"
    text = (
        "Please verify your email address by clicking the link below:\n\n"
        f"{verification_link}\n\n"
        "This link will expire in 24 hours."
    )
    title_html = f"<p><strong>{escape(campaign_title)}</strong></p>" if campaign_title else ""
    html = _wrap_html(
        "Verify Your Email",
        f"<p>Please verify your email address to confirm your claim.</p>{title_html}"
        f"<p><a href=\"{escape(verification_link)}\">Verify Email</a></p>"
        "<p>This link will expire in 24 hours.</p>",
    )
    return OutboundMessage(to=email, subject=subject, text=text, html=html)


def build_invite_message(
    *,
    email: str,
    name: str,
    role: str,
    login_url: str,
) -> OutboundMessage:
    role_label = role.replace("_", " ")
    text = (
        f"Hi {name},\n\n"
        f"You have been added as {role_label} to the giveaway admin.\n"
        f"Sign in with your email address at {login_url}"
    )
    html = _wrap_html(
        "You're invited",
        f"<p>Hi {escape(name)},</p><p>You have been added as <strong>{escape(role_label)}</strong>"
        f" to the giveaway admin.</p><p><a href=\"{escape(login_url)}\">Sign in</a></p>",
    )
    return OutboundMessage(to=email, subject="You've been invited as an admin", text=text, html=html)


def build_gift_confirmation_message(
    *,
    email: str,
    campaign_title: str,
    gifter_name: str,
    gifter_linkedin_url: str | None,
) -> OutboundMessage:
    text = f"{gifter_name} sent you a gift from {campaign_title}. Your address has been received."
    linkedin_html = ""
    if gifter_linkedin_url:
        text += f"\n\nConnect with {gifter_name}: {gifter_linkedin_url}"
        linkedin_html = f"<p><a href=\"{escape(gifter_linkedin_url)}\">Connect on LinkedIn</a></p>"
    html = _wrap_html(
        "Your gift is on its way",
        f"<p>{escape(gifter_name)} sent you a gift from <strong>{escape(campaign_title)}</strong>."
        f" Your address has been received.</p>{linkedin_html}",
    )
    return OutboundMessage(
        to=email,
        subject=f"{gifter_name} sent you a gift",
        text=text,
        html=html,
    )


class MailgunMailer:
    def __init__(
        self,
        *,
        api_key: str,
        domain: str,
        from_email: str,
        api_base_url: str,
        public_base_url: str,
        timeout_seconds: float,
    ) -> None:
        self._api_key = api_key
        self._domain = domain
        self._from_email = from_email or (f"noreply@{domain}" if domain else "")
        self._api_base_url = api_base_url.rstrip("/")
        self._public_base_url = public_base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> MailgunMailer:
        return cls(
            api_key=settings.mailgun_api_key,
            domain=settings.mailgun_domain,
            from_email=settings.mailgun_from_email,
            api_base_url=settings.mailgun_api_base_url,
            public_base_url=settings.base_url,
            timeout_seconds=settings.mail_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._domain)

    async def _deliver(self, message: OutboundMessage, *, kind: str) -> None:
        if not self.is_configured:
            logger.error("mail_not_configured", mail_kind=kind)
            raise MailDeliveryError("mail delivery is not configured")

        url = f"{self._api_base_url}/{self._domain}/messages"
        data = {
            "from": self._from_email,
            "to": message.to,
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.post(url, data=data, auth=("api", self._api_key))
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "mail_delivery_failed",
                mail_kind=kind,
                recipient=message.to,
                error_type=type(exc).__name__,
            )
            raise MailDeliveryError(f"failed to send {kind} email") from exc

        logger.info("mail_sent", mail_kind=kind, recipient=message.to)

    async def send_otp(self, email: str, otp: str) -> None:
        await self._deliver(build_otp_message(email=email, otp=otp), kind="otp")

    async def send_claim_verification(
        self,
        email: str,
        verification_link: str,
        campaign_title: str | None = None,
    ) -> None:
        message = build_verification_message(
            email=email,
            verification_link=verification_link,
            campaign_title=campaign_title,
        )
        await self._deliver(message, kind="claim_verification")

    async def send_invite(self, email: str, name: str, role: str) -> None:
        message = build_invite_message(
            email=email,
            name=name,
            role=role,
            login_url=f"{self._public_base_url}/admin/login",
        )
        await self._deliver(message, kind="admin_invite")

    async def send_gift_confirmation(
        self,
        email: str,
        campaign_title: str,
        gifter_name: str,
        gifter_linkedin_url: str | None = None,
    ) -> None:
        message = build_gift_confirmation_message(
            email=email,
            campaign_title=campaign_title,
            gifter_name=gifter_name,
            gifter_linkedin_url=gifter_linkedin_url,
        )
        await self._deliver(message, kind="gift_confirmation")
