from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response

from giveaway.api.routes.admin_addresses import router as admin_addresses_router
from giveaway.api.routes.admin_campaigns import router as admin_campaigns_router
from giveaway.api.routes.admin_claims import router as admin_claims_router
from giveaway.api.routes.admin_gift_codes import router as admin_gift_codes_router
from giveaway.api.routes.admin_invite_codes import router as admin_invite_codes_router
from giveaway.api.routes.admin_profile import router as admin_profile_router
from giveaway.api.routes.admin_questions import router as admin_questions_router
from giveaway.api.routes.admin_users import router as admin_users_router
from giveaway.api.routes.admin_versions import router as admin_versions_router
from giveaway.api.routes.auth import router as auth_router
from giveaway.api.routes.health import router as health_router
from giveaway.api.routes.public_claims import router as public_claims_router
from giveaway.api.routes.verify import router as verify_router
from giveaway.core.config import Settings, get_settings
from giveaway.core.logging import (
    REQUEST_ID_HEADER,
    bind_request_context,
    clear_request_context,
    configure_logging,
)
from giveaway.db.session import SessionFactory, build_engine, build_session_factory
from giveaway.services.mailer import Mailer, MailgunMailer

logger = structlog.get_logger(__name__)


def create_app(
    *,
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
    mailer: Mailer | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = None
    if session_factory is None:
        engine = build_engine(settings.database_url)
        session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("app_started", env=settings.app_env)
        yield
        if engine is not None:
            await engine.dispose()
        logger.info("app_stopped")

    app = FastAPI(
        title="Giveaway Desk API",
        version="0.1.0",
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        openapi_url="/openapi.json" if settings.docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.session_factory = session_factory
    app.state.mailer = mailer or MailgunMailer.from_settings(settings)

    @app.middleware("http")
    async def request_context(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = bind_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed")
            raise
        finally:
            clear_request_context()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(public_claims_router)
    app.include_router(verify_router)
    app.include_router(admin_campaigns_router)
    app.include_router(admin_versions_router)
    app.include_router(admin_claims_router)
    app.include_router(admin_invite_codes_router)
    app.include_router(admin_questions_router)
    app.include_router(admin_gift_codes_router)
    app.include_router(admin_addresses_router)
    app.include_router(admin_users_router)
    app.include_router(admin_profile_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "giveaway.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
