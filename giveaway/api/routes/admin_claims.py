from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from giveaway.api.deps import get_session_factory, require_admin
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import (
    AdminClaimBody,
    BulkResultResponse,
    BulkShippedBody,
    ClaimIdsBody,
    ClaimResponse,
    ClaimUpdateBody,
    OkResponse,
    PreCreateClaimBody,
    PreCreatedClaimResponse,
    RegisteredClaimResponse,
)
from giveaway.auth.types import AdminPrincipal
from giveaway.claims.admin import AdminClaimService
from giveaway.claims.management import MAX_LIST_LIMIT, ClaimManagementService
from giveaway.core.errors import DomainError
from giveaway.db.session import SessionFactory

router = APIRouter(prefix="/admin", tags=["admin", "claims"])


@router.post(
    "/campaigns/{campaign_id}/register",
    response_model=RegisteredClaimResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_claim(
    campaign_id: UUID,
    payload: AdminClaimBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> RegisteredClaimResponse:
    try:
        async with session_factory.begin() as session:
            registered = await AdminClaimService.register_claim(
                session,
                principal=principal,
                campaign_id=campaign_id,
                payload=payload.to_payload(),
                admin_notes=payload.admin_notes,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return RegisteredClaimResponse.model_validate(registered)


@router.post(
    "/campaigns/{campaign_id}/pre-create-claim",
    response_model=PreCreatedClaimResponse,
    status_code=status.HTTP_201_CREATED,
)
async def pre_create_claim(
    campaign_id: UUID,
    payload: PreCreateClaimBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> PreCreatedClaimResponse:
    try:
        async with session_factory.begin() as session:
            pre_created = await AdminClaimService.pre_create_claim(
                session,
                principal=principal,
                campaign_id=campaign_id,
                payload=payload.to_payload(),
                admin_notes=payload.admin_notes,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return PreCreatedClaimResponse.model_validate(pre_created)


@router.get("/claims", response_model=list[ClaimResponse])
async def list_claims(
    campaign_id: UUID | None = Query(default=None, alias="campaignId"),
    claim_status: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=200),
    limit: int = Query(default=100, ge=1, le=MAX_LIST_LIMIT),
    offset: int = Query(default=0, ge=0),
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> list[ClaimResponse]:
    try:
        async with session_factory() as session:
            claims = await ClaimManagementService.list_claims(
                session,
                campaign_id=campaign_id,
                status=claim_status,
                search=search,
                limit=limit,
                offset=offset,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return [ClaimResponse.model_validate(claim) for claim in claims]


@router.patch("/claims/{claim_id}", response_model=ClaimResponse)
async def update_claim(
    claim_id: UUID,
    payload: ClaimUpdateBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> ClaimResponse:
    try:
        async with session_factory.begin() as session:
            claim = await ClaimManagementService.update_claim(
                session,
                principal=principal,
                claim_id=claim_id,
                changes=payload.model_dump(exclude_unset=True),
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return ClaimResponse.model_validate(claim)


@router.delete("/claims/{claim_id}", response_model=OkResponse)
async def delete_claim(
    claim_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    try:
        async with session_factory.begin() as session:
            await ClaimManagementService.delete_claim(
                session,
                principal=principal,
                claim_id=claim_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return OkResponse()


@router.post("/claims/bulk-delete", response_model=BulkResultResponse)
async def bulk_delete_claims(
    payload: ClaimIdsBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> BulkResultResponse:
    try:
        async with session_factory.begin() as session:
            deleted = await ClaimManagementService.bulk_delete_claims(
                session,
                principal=principal,
                claim_ids=payload.claim_ids,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return BulkResultResponse(count=deleted)


@router.post("/claims/bulk-update", response_model=BulkResultResponse)
async def bulk_update_shipped(
    payload: BulkShippedBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> BulkResultResponse:
    shipped_at = datetime.now(timezone.utc) if payload.shipped else None
    try:
        async with session_factory.begin() as session:
            updated = await ClaimManagementService.bulk_update_shipped(
                session,
                principal=principal,
                claim_ids=payload.claim_ids,
                shipped_at=shipped_at,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return BulkResultResponse(count=updated)
