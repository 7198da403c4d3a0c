from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response

from giveaway.api.deps import get_session_factory, require_admin
from giveaway.api.errors import as_http_exception, error_detail
from giveaway.api.schemas import ImportSummaryResponse
from giveaway.auth.types import AdminPrincipal
from giveaway.claims.csv_export import ClaimExportService, CsvExport
from giveaway.claims.csv_import import AddressImportService
from giveaway.core.errors import DomainError
from giveaway.db.session import SessionFactory

router = APIRouter(prefix="/admin", tags=["admin", "addresses"])
logger = structlog.get_logger(__name__)

MAX_IMPORT_BYTES = 5 * 1024 * 1024


def _csv_response(export: CsvExport) -> Response:
    return Response(
        content=export.content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


def _decode_upload(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


@router.post("/addresses/import", response_model=ImportSummaryResponse)
async def import_addresses(
    file: UploadFile = File(...),
    campaign_slug: str = Form(..., alias="campaignSlug", min_length=1),
    claim_status: str = Form(default="confirmed", alias="status"),
    skip_rows: int | None = Form(default=None, alias="skipRows", ge=0),
    default_shipped_date: str | None = Form(default=None, alias="defaultShippedDate"),
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> ImportSummaryResponse:
    raw = await file.read(MAX_IMPORT_BYTES + 1)
    if len(raw) > MAX_IMPORT_BYTES:
        logger.warning("address_import_rejected", reason="too_large", filename=file.filename)
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=error_detail("E_IMPORT_TOO_LARGE", "Import file is too large"),
        )

    try:
        async with session_factory.begin() as session:
            summary = await AddressImportService.import_addresses(
                session,
                principal=principal,
                campaign_slug=campaign_slug,
                csv_text=_decode_upload(raw),
                status=claim_status,
                skip_rows=skip_rows,
                default_shipped_date=default_shipped_date or None,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return ImportSummaryResponse.model_validate(summary)


@router.get("/addresses/export")
async def export_all_addresses(
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> Response:
    try:
        async with session_factory() as session:
            export = await ClaimExportService.export_all(session, principal=principal)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return _csv_response(export)


@router.get("/campaigns/{campaign_id}/export")
async def export_campaign_claims(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> Response:
    try:
        async with session_factory() as session:
            export = await ClaimExportService.export_campaign(
                session,
                principal=principal,
                campaign_id=campaign_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return _csv_response(export)
