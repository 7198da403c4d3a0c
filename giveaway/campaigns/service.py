from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.permissions import can_create_campaign, can_delete_campaign, can_edit_campaign
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.errors import (
    CampaignHasClaimsError,
    CampaignInvalidError,
    CampaignNotFoundError,
    CampaignSlugTakenError,
)
from giveaway.campaigns.fields import (
    CAMPAIGN_DEFAULTS,
    apply_fields,
    clean_fields,
    ensure_window,
    normalize_slug,
    snapshot,
)
from giveaway.db.models.campaign_versions import CampaignVersion
from giveaway.db.models.campaigns import Campaign
from giveaway.db.repo.campaign_versions_repo import CampaignVersionsRepo
from giveaway.db.repo.campaigns_repo import CampaignsRepo
from giveaway.db.repo.claims_repo import ClaimsRepo
from giveaway.db.repo.gift_codes_repo import GiftCodesRepo
from giveaway.db.repo.invite_codes_repo import InviteCodesRepo
from giveaway.db.repo.questions_repo import QuestionsRepo

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class CampaignDetail:
    campaign: Campaign
    confirmed_count: int
    pending_count: int
    shipped_count: int


async def record_published_version(
    session: AsyncSession,
    *,
    campaign: Campaign,
    version_number: int,
    change_summary: str | None,
    admin_id: UUID,
    now_utc: datetime,
    data: dict[str, Any] | None = None,
) -> CampaignVersion:
    return await CampaignVersionsRepo.create(
        session,
        version=CampaignVersion(
            id=uuid4(),
            campaign_id=campaign.id,
            version_number=version_number,
            status="published",
            data=data if data is not None else snapshot(campaign),
            change_summary=change_summary,
            created_by=admin_id,
            created_at=now_utc,
            published_at=now_utc,
            published_by=admin_id,
        ),
    )


class CampaignService:
    @staticmethod
    async def get_or_raise(session: AsyncSession, campaign_id: UUID) -> Campaign:
        campaign = await CampaignsRepo.get_by_id(session, campaign_id)
        if campaign is None:
            raise CampaignNotFoundError("Campaign not found")
        return campaign

    @staticmethod
    async def get_editable(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
    ) -> Campaign:
        campaign = await CampaignsRepo.get_by_id_for_update(session, campaign_id)
        if campaign is None:
            raise CampaignNotFoundError("Campaign not found")
        if not can_edit_campaign(principal.role, campaign.created_by, principal.admin_id):
            raise PermissionDeniedError("You do not have permission to edit this campaign")
        return campaign

    @staticmethod
    async def list_campaigns(session: AsyncSession) -> list[CampaignDetail]:
        campaigns = await CampaignsRepo.list_all(session)
        details: list[CampaignDetail] = []
        for campaign in campaigns:
            details.append(await CampaignService._detail(session, campaign))
        return details

    @staticmethod
    async def _detail(session: AsyncSession, campaign: Campaign) -> CampaignDetail:
        counts = await ClaimsRepo.count_by_status(session, campaign.id)
        return CampaignDetail(
            campaign=campaign,
            confirmed_count=counts.get("confirmed", 0),
            pending_count=counts.get("pending", 0),
            shipped_count=counts.get("shipped", 0),
        )

    @staticmethod
    async def get_campaign(session: AsyncSession, campaign_id: UUID) -> CampaignDetail:
        campaign = await CampaignService.get_or_raise(session, campaign_id)
        return await CampaignService._detail(session, campaign)

    @staticmethod
    async def create_campaign(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        slug: str,
        fields: Mapping[str, Any],
        now_utc: datetime | None = None,
    ) -> Campaign:
        if not can_create_campaign(principal.role):
            raise PermissionDeniedError("You do not have permission to create campaigns")

        now_utc = now_utc or datetime.now(timezone.utc)
        normalized_slug = normalize_slug(slug)
        values = {**CAMPAIGN_DEFAULTS, **clean_fields(fields)}
        if not values.get("title"):
            raise CampaignInvalidError("Title is required")
        if await CampaignsRepo.slug_exists(session, normalized_slug):
            raise CampaignSlugTakenError

        campaign = Campaign(
            id=uuid4(),
            slug=normalized_slug,
            current_version=1,
            has_draft=False,
            created_by=principal.admin_id,
            updated_by=principal.admin_id,
            created_at=now_utc,
            updated_at=now_utc,
            **values,
        )
        ensure_window(campaign)
        await CampaignsRepo.create(session, campaign=campaign)
        await record_published_version(
            session,
            campaign=campaign,
            version_number=1,
            change_summary="Initial version",
            admin_id=principal.admin_id,
            now_utc=now_utc,
        )
        logger.info(
            "campaign_created",
            campaign_id=str(campaign.id),
            slug=campaign.slug,
            admin_user_id=str(principal.admin_id),
        )
        return campaign

    @staticmethod
    async def update_campaign(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        fields: Mapping[str, Any],
        change_summary: str | None = None,
        now_utc: datetime | None = None,
    ) -> Campaign:
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )

        apply_fields(campaign, clean_fields(fields))
        campaign.current_version += 1
        campaign.updated_at = now_utc
        campaign.updated_by = principal.admin_id
        await session.flush()

        await record_published_version(
            session,
            campaign=campaign,
            version_number=campaign.current_version,
            change_summary=change_summary,
            admin_id=principal.admin_id,
            now_utc=now_utc,
        )
        logger.info(
            "campaign_updated",
            campaign_id=str(campaign.id),
            version=campaign.current_version,
            admin_user_id=str(principal.admin_id),
        )
        return campaign

    @staticmethod
    async def delete_campaign(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
    ) -> None:
        if not can_delete_campaign(principal.role):
            raise PermissionDeniedError("Only super admins can delete campaigns")

        campaign = await CampaignService.get_or_raise(session, campaign_id)
        claim_count = await ClaimsRepo.count_for_campaign(session, campaign.id)
        if claim_count > 0:
            raise CampaignHasClaimsError(
                f"Cannot delete campaign with {claim_count} claims. Delete claims first."
            )

        await InviteCodesRepo.delete_for_campaign(session, campaign.id)
        await CampaignVersionsRepo.delete_for_campaign(session, campaign.id)
        await GiftCodesRepo.delete_for_campaign(session, campaign.id)
        await QuestionsRepo.delete_for_campaign(session, campaign.id)
        await CampaignsRepo.delete(session, campaign.id)
        logger.info(
            "campaign_deleted",
            campaign_id=str(campaign_id),
            admin_user_id=str(principal.admin_id),
        )
