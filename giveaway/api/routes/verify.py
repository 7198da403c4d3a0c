from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse

from giveaway.api.deps import get_session_factory
from giveaway.claims.errors import VerificationExpiredError, VerificationInvalidError
from giveaway.claims.verification import VerificationService
from giveaway.db.session import SessionFactory

router = APIRouter(tags=["verification"])

VERIFIED_MESSAGE = "Your email has been verified and your claim is confirmed. We'll ship it soon!"
INVALID_MESSAGE = "This verification link is invalid or has already been used."
EXPIRED_MESSAGE = "This verification link has expired. Please request a new one."


def render_verification_page(*, title: str, message: str) -> str:
    return (
        "<!doctype html>"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{escape(title)}</title></head>"
        '<body style="font-family: sans-serif; max-width: 480px; margin: 64px auto; text-align: center;">'
        f"<h1>{escape(title)}</h1><p>{escape(message)}</p>"
        "</body></html>"
    )


@router.get("/verify", response_class=HTMLResponse)
async def verify_email(
    token: str | None = Query(default=None, max_length=128),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> HTMLResponse:
    try:
        async with session_factory.begin() as session:
            await VerificationService.confirm_email_verification(session, token or "")
    except VerificationExpiredError:
        return HTMLResponse(
            render_verification_page(title="Link Expired", message=EXPIRED_MESSAGE),
            status_code=status.HTTP_410_GONE,
        )
    except VerificationInvalidError:
        return HTMLResponse(
            render_verification_page(title="Invalid Link", message=INVALID_MESSAGE),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    return HTMLResponse(render_verification_page(title="Email Verified", message=VERIFIED_MESSAGE))
