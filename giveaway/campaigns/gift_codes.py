from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.errors import CampaignNotFoundError, GiftCodeNotFoundError
from giveaway.campaigns.service import CampaignService
from giveaway.claims.errors import CampaignEndedError
from giveaway.core.config import get_settings
from giveaway.db.models.admin_gift_codes import AdminGiftCode
from giveaway.db.models.admin_users import AdminUser
from giveaway.db.models.campaigns import Campaign
from giveaway.db.repo.admin_users_repo import AdminUsersRepo
from giveaway.db.repo.campaigns_repo import CampaignsRepo
from giveaway.db.repo.gift_codes_repo import GiftCodesRepo
from giveaway.services.hashing import generate_gift_code

logger = structlog.get_logger(__name__)

DEFAULT_GIFT_CODE_LABEL = "New QR Code"
GIFT_CODE_OPTIONS: dict[str, Any] = {
    "label": DEFAULT_GIFT_CODE_LABEL,
    "custom_message": None,
    "custom_display_name": None,
    "show_name": True,
    "show_linkedin": True,
    "show_bio": False,
    "show_phone": False,
    "show_email": False,
}


@dataclass(slots=True)
class GifterCard:
    name: str | None
    email: str | None
    phone: str | None
    linkedin_url: str | None
    bio: str | None


@dataclass(slots=True)
class GiftLanding:
    campaign: Campaign
    gifter: GifterCard
    custom_message: str | None


@dataclass(slots=True)
class GiftCodeListing:
    codes: list[AdminGiftCode]
    campaign: Campaign
    profile: AdminUser | None


def build_gifter_card(gift_code: AdminGiftCode, admin: AdminUser) -> GifterCard:
    display_name = gift_code.custom_display_name or admin.display_name or admin.name
    return GifterCard(
        name=display_name if gift_code.show_name else None,
        email=admin.email if gift_code.show_email else None,
        phone=admin.phone if gift_code.show_phone else None,
        linkedin_url=admin.linkedin_url if gift_code.show_linkedin else None,
        bio=admin.bio if gift_code.show_bio else None,
    )


def build_gift_url(*, slug: str, code: str) -> str:
    return f"{get_settings().base_url}/c/{slug}/gift/{code}"


def _clean_options(options: Mapping[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for name in GIFT_CODE_OPTIONS:
        if name not in options:
            continue
        value = options[name]
        if isinstance(value, str):
            value = value.strip() or None
        if name == "label" and value is None:
            value = DEFAULT_GIFT_CODE_LABEL
        if name.startswith("show_") and value is None:
            value = GIFT_CODE_OPTIONS[name]
        cleaned[name] = value
    return cleaned


class GiftCodeService:
    @staticmethod
    async def list_codes(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
    ) -> GiftCodeListing:
        campaign = await CampaignService.get_or_raise(session, campaign_id)
        codes = await GiftCodesRepo.list_for_admin(
            session,
            admin_id=principal.admin_id,
            campaign_id=campaign.id,
        )
        profile = await AdminUsersRepo.get_by_id(session, principal.admin_id)
        return GiftCodeListing(codes=codes, campaign=campaign, profile=profile)

    @staticmethod
    async def create_code(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        options: Mapping[str, Any],
        now_utc: datetime | None = None,
    ) -> AdminGiftCode:
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_or_raise(session, campaign_id)
        values = {**GIFT_CODE_OPTIONS, **_clean_options(options)}

        gift_code = await GiftCodesRepo.create(
            session,
            gift_code=AdminGiftCode(
                id=uuid4(),
                admin_id=principal.admin_id,
                campaign_id=campaign.id,
                code=generate_gift_code(),
                created_at=now_utc,
                **values,
            ),
        )
        logger.info(
            "gift_code_created",
            campaign_id=str(campaign.id),
            gift_code_id=str(gift_code.id),
            admin_user_id=str(principal.admin_id),
        )
        return gift_code

    @staticmethod
    async def _get_owned(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        gift_code_id: UUID,
    ) -> AdminGiftCode:
        gift_code = await GiftCodesRepo.get_owned(
            session,
            gift_code_id=gift_code_id,
            admin_id=principal.admin_id,
            campaign_id=campaign_id,
        )
        if gift_code is None:
            raise GiftCodeNotFoundError("Code not found or not owned by you")
        return gift_code

    @staticmethod
    async def update_code(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        gift_code_id: UUID,
        options: Mapping[str, Any],
    ) -> AdminGiftCode:
        gift_code = await GiftCodeService._get_owned(
            session,
            principal=principal,
            campaign_id=campaign_id,
            gift_code_id=gift_code_id,
        )
        for name, value in _clean_options(options).items():
            setattr(gift_code, name, value)
        await session.flush()
        return gift_code

    @staticmethod
    async def delete_code(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        gift_code_id: UUID,
    ) -> None:
        gift_code = await GiftCodeService._get_owned(
            session,
            principal=principal,
            campaign_id=campaign_id,
            gift_code_id=gift_code_id,
        )
        await GiftCodesRepo.delete(session, gift_code.id)

    @staticmethod
    async def get_landing(
        session: AsyncSession,
        *,
        slug: str,
        code: str,
        now_utc: datetime | None = None,
    ) -> GiftLanding:
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignsRepo.get_active_by_slug(session, slug)
        if campaign is None:
            raise CampaignNotFoundError
        if campaign.ends_at is not None and campaign.ends_at < now_utc:
            raise CampaignEndedError

        gift_code = await GiftCodesRepo.get_for_campaign(
            session,
            campaign_id=campaign.id,
            code=code,
        )
        if gift_code is None:
            raise GiftCodeNotFoundError
        admin = await AdminUsersRepo.get_by_id(session, gift_code.admin_id)
        if admin is None:
            raise GiftCodeNotFoundError

        return GiftLanding(
            campaign=campaign,
            gifter=build_gifter_card(gift_code, admin),
            custom_message=gift_code.custom_message,
        )
