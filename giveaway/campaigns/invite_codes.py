from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from giveaway.auth.errors import PermissionDeniedError
from giveaway.auth.permissions import can_manage_invite_codes
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.errors import (
    CampaignInvalidError,
    InviteCodeNotFoundError,
    InviteCodeTakenError,
)
from giveaway.campaigns.service import CampaignService
from giveaway.db.models.invite_codes import InviteCode
from giveaway.db.repo.invite_codes_repo import InviteCodesRepo

logger = structlog.get_logger(__name__)


def normalize_invite_code(raw_code: str) -> str:
    return raw_code.strip().upper()


def _ensure_allowed(principal: AdminPrincipal) -> None:
    if not can_manage_invite_codes(principal.role):
        raise PermissionDeniedError("You do not have permission to manage invite codes")


class InviteCodeService:
    @staticmethod
    async def list_codes(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
    ) -> list[InviteCode]:
        _ensure_allowed(principal)
        campaign = await CampaignService.get_or_raise(session, campaign_id)
        return await InviteCodesRepo.list_for_campaign(session, campaign.id)

    @staticmethod
    async def create_code(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        code: str,
        max_uses: int | None = None,
        now_utc: datetime | None = None,
    ) -> InviteCode:
        _ensure_allowed(principal)
        now_utc = now_utc or datetime.now(timezone.utc)
        campaign = await CampaignService.get_or_raise(session, campaign_id)

        normalized_code = normalize_invite_code(code)
        if not normalized_code:
            raise CampaignInvalidError("Code is required")
        if max_uses is not None and max_uses <= 0:
            max_uses = None

        existing = await InviteCodesRepo.get_by_code(
            session,
            campaign_id=campaign.id,
            code=normalized_code,
        )
        if existing is not None:
            raise InviteCodeTakenError

        invite_code = await InviteCodesRepo.create(
            session,
            invite_code=InviteCode(
                id=uuid4(),
                campaign_id=campaign.id,
                code=normalized_code,
                uses=0,
                max_uses=max_uses,
                is_active=True,
                created_by=principal.admin_id,
                created_at=now_utc,
            ),
        )
        logger.info(
            "invite_code_created",
            campaign_id=str(campaign.id),
            invite_code_id=str(invite_code.id),
        )
        return invite_code

    @staticmethod
    async def set_active(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        invite_code_id: UUID,
        is_active: bool,
    ) -> InviteCode:
        _ensure_allowed(principal)
        invite_code = await InviteCodesRepo.get_by_id(
            session,
            campaign_id=campaign_id,
            invite_code_id=invite_code_id,
        )
        if invite_code is None:
            raise InviteCodeNotFoundError
        invite_code.is_active = is_active
        await session.flush()
        return invite_code

    @staticmethod
    async def delete_code(
        session: AsyncSession,
        *,
        principal: AdminPrincipal,
        campaign_id: UUID,
        invite_code_id: UUID,
    ) -> None:
        _ensure_allowed(principal)
        deleted = await InviteCodesRepo.delete(
            session,
            campaign_id=campaign_id,
            invite_code_id=invite_code_id,
        )
        if deleted == 0:
            raise InviteCodeNotFoundError
        logger.info("invite_code_deleted", invite_code_id=str(invite_code_id))
