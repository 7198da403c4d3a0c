from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from giveaway.api.deps import (
    ClientMeta,
    clear_session_cookie,
    get_client_meta,
    get_mailer,
    get_session_factory,
    require_admin,
    set_session_cookie,
)
from giveaway.api.errors import as_http_exception, error_detail
from giveaway.auth.errors import AuthError, OtpDeliveryError
from giveaway.auth.otp import OtpService
from giveaway.auth.sessions import SESSION_COOKIE_NAME, SessionService
from giveaway.auth.types import AdminPrincipal, OtpRejected
from giveaway.db.session import SessionFactory
from giveaway.services.mailer import Mailer

router = APIRouter(prefix="/auth", tags=["auth"])
logger = structlog.get_logger(__name__)


class OtpRequestBody(BaseModel):
    email: str = Field(min_length=3, max_length=320)


class OtpVerifyBody(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    otp: str = Field(min_length=1, max_length=16)


class OkResponse(BaseModel):
    ok: bool = True


class CurrentAdminResponse(BaseModel):
    id: UUID
    email: str
    name: str
    role: str


@router.post("/request-otp", response_model=OkResponse)
async def request_otp(
    payload: OtpRequestBody,
    meta: ClientMeta = Depends(get_client_meta),
    session_factory: SessionFactory = Depends(get_session_factory),
    mailer: Mailer = Depends(get_mailer),
) -> OkResponse:
    delivery_error: OtpDeliveryError | None = None
    try:
        async with session_factory.begin() as session:
            try:
                await OtpService.request_otp(
                    session,
                    email=payload.email,
                    ip_hash=meta.ip_hash,
                    mailer=mailer,
                )
            except OtpDeliveryError as exc:
                # The OTP row still commits so failed sends count toward the rate limits.
                delivery_error = exc
    except AuthError as exc:
        raise as_http_exception(exc) from exc
    if delivery_error is not None:
        raise as_http_exception(delivery_error) from delivery_error
    return OkResponse()


@router.post("/verify-otp", response_model=OkResponse)
async def verify_otp(
    payload: OtpVerifyBody,
    response: Response,
    meta: ClientMeta = Depends(get_client_meta),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    async with session_factory.begin() as session:
        result = await OtpService.verify_otp(
            session,
            email=payload.email,
            otp=payload.otp.strip(),
            ip_hash=meta.ip_hash,
            user_agent=meta.user_agent,
        )

    if isinstance(result, OtpRejected):
        logger.info("admin_login_rejected", reason=result.reason)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("E_OTP_INVALID", "Invalid or expired OTP"),
        )

    set_session_cookie(response, result.session_token)
    return OkResponse()


@router.post("/logout", response_model=OkResponse)
async def logout(
    request: Request,
    response: Response,
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        async with session_factory.begin() as session:
            await SessionService.revoke_session(session, token)
    clear_session_cookie(response)
    return OkResponse()


@router.get("/me", response_model=CurrentAdminResponse)
async def current_admin(principal: AdminPrincipal = Depends(require_admin)) -> CurrentAdminResponse:
    return CurrentAdminResponse(
        id=principal.admin_id,
        email=principal.email,
        name=principal.name,
        role=principal.role,
    )
