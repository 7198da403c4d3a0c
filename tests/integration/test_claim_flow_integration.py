from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse
from uuid import UUID, uuid4

import pytest
from sqlalchemy import select

from giveaway.auth.otp import OtpService
from giveaway.auth.sessions import SessionService
from giveaway.auth.types import AdminPrincipal, OtpVerified
from giveaway.campaigns.invite_codes import InviteCodeService
from giveaway.campaigns.questions import QuestionService
from giveaway.campaigns.service import CampaignService
from giveaway.claims.errors import ClaimAnswersInvalidError, DuplicateClaimError, InviteCodeExhaustedError
from giveaway.claims.service import ClaimService
from giveaway.claims.types import ClaimPayload
from giveaway.claims.verification import VerificationService
from giveaway.db.models.admin_users import AdminUser
from giveaway.db.models.claim_answers import ClaimAnswer
from giveaway.db.repo.claims_repo import ClaimsRepo
from giveaway.db.repo.invite_codes_repo import InviteCodesRepo
from giveaway.db.session import SessionFactory

UTC = timezone.utc


class CapturingMailer:
    def __init__(self) -> None:
        self.otps: list[str] = []
        self.verification_links: list[str] = []

    async def send_otp(self, email: str, otp: str) -> None:
        self.otps.append(otp)

    async def send_claim_verification(
        self,
        email: str,
        verification_link: str,
        campaign_title: str | None = None,
    ) -> None:
        self.verification_links.append(verification_link)

    async def send_invite(self, email: str, name: str, role: str) -> None:
        return None

    async def send_gift_confirmation(
        self,
        email: str,
        campaign_title: str,
        gifter_name: str,
        gifter_linkedin_url: str | None = None,
    ) -> None:
        return None


async def _create_admin(session_factory: SessionFactory, *, email: str = "owner@example.com") -> AdminPrincipal:
    now_utc = datetime.now(UTC)
    admin = AdminUser(
        id=uuid4(),
        email=email,
        name="Owner",
        role="super_admin",
        is_active=True,
        created_at=now_utc,
        updated_at=now_utc,
    )
    async with session_factory.begin() as session:
        session.add(admin)
    return AdminPrincipal(
        admin_id=admin.id,
        email=admin.email,
        name=admin.name,
        role=admin.role,
        session_id=uuid4(),
    )


async def _create_campaign(
    session_factory: SessionFactory,
    principal: AdminPrincipal,
    *,
    slug: str,
    **fields: object,
) -> UUID:
    async with session_factory.begin() as session:
        campaign = await CampaignService.create_campaign(
            session,
            principal=principal,
            slug=slug,
            fields={"title": "Spring Mugs", **fields},
        )
        return campaign.id


def _payload(**overrides: object) -> ClaimPayload:
    values: dict[str, object] = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "address1": "12 Analytical Way",
        "city": "Springfield",
        "region": "IL",
        "postal_code": "62701",
        "country": "US",
        "consent": True,
    }
    values.update(overrides)
    return ClaimPayload(**values)  # type: ignore[arg-type]


async def _submit(session_factory: SessionFactory, slug: str, payload: ClaimPayload, mailer: CapturingMailer):
    async with session_factory.begin() as session:
        return await ClaimService.submit_claim(
            session,
            slug=slug,
            payload=payload,
            ip_hash="a" * 64,
            user_agent="pytest",
            mailer=mailer,
        )


@pytest.mark.asyncio
async def test_claim_is_confirmed_and_duplicate_address_is_rejected(session_factory: SessionFactory) -> None:
    principal = await _create_admin(session_factory)
    await _create_campaign(session_factory, principal, slug="spring-mugs")
    mailer = CapturingMailer()

    result = await _submit(session_factory, "spring-mugs", _payload(), mailer)

    assert result.requires_verification is False
    async with session_factory() as session:
        claim = await ClaimsRepo.get_by_id(session, result.claim_id)
    assert claim is not None
    assert claim.status == "confirmed"
    assert claim.confirmed_at is not None

    with pytest.raises(DuplicateClaimError):
        await _submit(
            session_factory,
            "spring-mugs",
            _payload(email="other@example.com", address1="  12 analytical way "),
            mailer,
        )


@pytest.mark.asyncio
async def test_pending_claim_is_confirmed_through_emailed_link(session_factory: SessionFactory) -> None:
    principal = await _create_admin(session_factory)
    await _create_campaign(
        session_factory,
        principal,
        slug="verified-mugs",
        require_email_verification=True,
    )
    mailer = CapturingMailer()

    result = await _submit(session_factory, "verified-mugs", _payload(), mailer)

    assert result.requires_verification is True
    assert len(mailer.verification_links) == 1
    token = parse_qs(urlparse(mailer.verification_links[0]).query)["token"][0]

    async with session_factory.begin() as session:
        claim_id = await VerificationService.confirm_email_verification(session, token)

    assert claim_id == result.claim_id
    async with session_factory() as session:
        claim = await ClaimsRepo.get_by_id(session, claim_id)
    assert claim is not None
    assert claim.status == "confirmed"


@pytest.mark.asyncio
async def test_invite_code_is_consumed_until_exhausted(session_factory: SessionFactory) -> None:
    principal = await _create_admin(session_factory)
    campaign_id = await _create_campaign(
        session_factory,
        principal,
        slug="invite-mugs",
        require_invite_code=True,
        max_claims_per_email=0,
    )
    async with session_factory.begin() as session:
        invite = await InviteCodeService.create_code(
            session,
            principal=principal,
            campaign_id=campaign_id,
            code="vip-2024",
            max_uses=1,
        )
    mailer = CapturingMailer()

    await _submit(session_factory, "invite-mugs", _payload(invite_code="vip-2024"), mailer)

    with pytest.raises(InviteCodeExhaustedError):
        await _submit(
            session_factory,
            "invite-mugs",
            _payload(first_name="Grace", last_name="Hopper", invite_code="VIP-2024"),
            mailer,
        )

    async with session_factory() as session:
        stored = await InviteCodesRepo.get_by_id(session, campaign_id=campaign_id, invite_code_id=invite.id)
    assert stored is not None
    assert stored.uses == 1


@pytest.mark.asyncio
async def test_otp_login_creates_session_that_authenticates(session_factory: SessionFactory) -> None:
    principal = await _create_admin(session_factory, email="login@example.com")
    mailer = CapturingMailer()

    async with session_factory.begin() as session:
        await OtpService.request_otp(
            session,
            email="  Login@Example.com ",
            ip_hash="b" * 64,
            mailer=mailer,
        )
    assert len(mailer.otps) == 1

    async with session_factory.begin() as session:
        result = await OtpService.verify_otp(
            session,
            email="login@example.com",
            otp=mailer.otps[0],
            ip_hash="b" * 64,
            user_agent="pytest",
        )
    assert isinstance(result, OtpVerified)
    assert result.admin_id == principal.admin_id

    async with session_factory() as session:
        auth = await SessionService.authenticate(session, result.session_token)
    assert isinstance(auth, AdminPrincipal)
    assert auth.admin_id == principal.admin_id
    assert auth.role == "super_admin"


@pytest.mark.asyncio
async def test_claim_answers_are_stored(session_factory: SessionFactory) -> None:
    principal = await _create_admin(session_factory)
    campaign_id = await _create_campaign(
        session_factory,
        principal,
        slug="question-mugs",
        enable_questions=True,
    )
    async with session_factory.begin() as session:
        size = await QuestionService.create_question(
            session,
            principal=principal,
            campaign_id=campaign_id,
            question_text="Mug size?",
            question_type="multiple_choice",
            is_required=True,
            options=["Small", "Large"],
        )

    with pytest.raises(ClaimAnswersInvalidError):
        await _submit(session_factory, "question-mugs", _payload(), CapturingMailer())

    result = await _submit(
        session_factory,
        "question-mugs",
        _payload(answers={size.id: "Large"}),
        CapturingMailer(),
    )

    async with session_factory() as session:
        answers = (
            await session.execute(select(ClaimAnswer).where(ClaimAnswer.claim_id == result.claim_id))
        ).scalars().all()
    assert [(answer.question_id, answer.answer_option) for answer in answers] == [(size.id, "Large")]
