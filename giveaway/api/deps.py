from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response, status

from giveaway.auth.sessions import SESSION_COOKIE_NAME, SessionService, session_ttl
from giveaway.auth.types import AdminAuthFailure, AdminPrincipal
from giveaway.core.config import get_settings
from giveaway.db.session import SessionFactory
from giveaway.services.hashing import hash_ip
from giveaway.services.mailer import Mailer
from giveaway.services.request_meta import extract_client_ip, extract_user_agent

from giveaway.api.errors import error_detail


@dataclass(frozen=True, slots=True)
class ClientMeta:
    ip: str
    ip_hash: str
    user_agent: str | None


def get_session_factory(request: Request) -> SessionFactory:
    return request.app.state.session_factory


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_client_meta(request: Request) -> ClientMeta:
    client_ip = extract_client_ip(request, trusted_proxies=get_settings().trusted_proxies)
    return ClientMeta(
        ip=client_ip,
        ip_hash=hash_ip(client_ip),
        user_agent=extract_user_agent(request),
    )


async def require_admin(
    request: Request,
    session_factory: SessionFactory = Depends(get_session_factory),
) -> AdminPrincipal:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    async with session_factory.begin() as session:
        result = await SessionService.authenticate(session, token)

    if isinstance(result, AdminAuthFailure):
        if result.kind == "inactive_account":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=error_detail("E_ACCOUNT_INACTIVE", "Account is inactive"),
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("E_UNAUTHORIZED", "Unauthorized"),
        )
    return result


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=int(session_ttl().total_seconds()),
        path="/",
        httponly=True,
        samesite="lax",
        secure=get_settings().is_production,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=get_settings().is_production,
    )
