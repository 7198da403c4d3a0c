from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.errors import DraftNotFoundError, VersionNotFoundError
from giveaway.campaigns.fields import (
    apply_fields,
    clean_fields,
    restore,
    serialize_values,
    snapshot,
)
from giveaway.campaigns.service import CampaignService, record_published_version
from giveaway.db.models.campaign_versions import CampaignVersion
from giveaway.db.models.campaigns import Campaign
from giveaway.db.repo.campaign_versions_repo import CampaignVersionsRepo

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class VersionHistory:
    versions: list[CampaignVersion]
    current_version: int
    has_draft: bool


class CampaignVersionService:
    @staticmethod
    async def list_versions(session: AsyncSession, campaign_id: UUID) -> VersionHistory:
        campaign = await CampaignService.get_or_raise(session, campaign_id)
        versions = await CampaignVersionsRepo.list_for_campaign(session, campaign.id)
        return VersionHistory(
            versions=versions,
            current_version=campaign.current_version,
            has_draft=campaign.has_draft,
        )

    @staticmethod
    async def save_draft(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        fields: Mapping[str, Any],
        change_summary: str | None = None,
        now_utc: datetime | None = None,
    ) -> CampaignVersion:
        """Store pending edits without touching the live campaign; replaces any prior draft."""
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )

        data = {**snapshot(campaign), **serialize_values(clean_fields(fields))}
        await CampaignVersionsRepo.delete_drafts(session, campaign.id)
        draft = await CampaignVersionsRepo.create(
            session,
            version=CampaignVersion(
                id=uuid4(),
                campaign_id=campaign.id,
                version_number=campaign.current_version + 1,
                status="draft",
                data=data,
                change_summary=change_summary,
                created_by=principal.admin_id,
                created_at=now_utc,
            ),
        )
        campaign.has_draft = True
        await session.flush()
        logger.info(
            "campaign_draft_saved",
            campaign_id=str(campaign.id),
            version=draft.version_number,
        )
        return draft

    @staticmethod
    async def publish_draft(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        now_utc: datetime | None = None,
    ) -> Campaign:
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )
        draft = await CampaignVersionsRepo.get_draft(session, campaign.id)
        if draft is None:
            raise DraftNotFoundError

        apply_fields(campaign, restore(draft.data))
        campaign.current_version = draft.version_number
        campaign.has_draft = False
        campaign.updated_at = now_utc
        campaign.updated_by = principal.admin_id

        draft.status = "published"
        draft.published_at = now_utc
        draft.published_by = principal.admin_id
        await session.flush()
        logger.info(
            "campaign_draft_published",
            campaign_id=str(campaign.id),
            version=draft.version_number,
        )
        return campaign

    @staticmethod
    async def discard_draft(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
    ) -> None:
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )
        await CampaignVersionsRepo.delete_drafts(session, campaign.id)
        campaign.has_draft = False
        await session.flush()
        logger.info("campaign_draft_discarded", campaign_id=str(campaign.id))

    @staticmethod
    async def revert(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        version_number: int,
        now_utc: datetime | None = None,
    ) -> Campaign:
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_editable(
            session,
            principal=principal,
            campaign_id=campaign_id,
        )
        target = await CampaignVersionsRepo.get_by_number(
            session,
            campaign_id=campaign.id,
            version_number=version_number,
        )
        if target is None:
            raise VersionNotFoundError

        apply_fields(campaign, restore(target.data))
        campaign.current_version += 1
        campaign.has_draft = False
        campaign.updated_at = now_utc
        campaign.updated_by = principal.admin_id

        await CampaignVersionsRepo.delete_drafts(session, campaign.id)
        await session.flush()
        await record_published_version(
            session,
            campaign=campaign,
            version_number=campaign.current_version,
            change_summary=f"Reverted to version {version_number}",
            admin_id=principal.admin_id,
            now_utc=now_utc,
            data=dict(target.data),
        )
        logger.info(
            "campaign_reverted",
            campaign_id=str(campaign.id),
            reverted_to=version_number,
            version=campaign.current_version,
        )
        return campaign
