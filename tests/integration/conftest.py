from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from sqlalchemy import text

from giveaway.core.config import get_settings
from giveaway.core.integration_db_safety import assert_safe_test_database
import giveaway.db.models  # noqa: F401
from giveaway.db.models.base import Base
from giveaway.db.session import SessionFactory, build_engine, build_session_factory

TRUNCATE_TABLES = (
    "claim_answers",
    "campaign_questions",
    "email_verifications",
    "claims",
    "invite_codes",
    "admin_gift_codes",
    "campaign_versions",
    "campaigns",
    "admin_sessions",
    "admin_otp_requests",
    "admin_users",
)

TRUNCATE_SQL = f"TRUNCATE TABLE {', '.join(TRUNCATE_TABLES)} RESTART IDENTITY CASCADE"


@pytest.fixture(scope="session", autouse=True)
def guard_integration_db_target() -> None:
    assert_safe_test_database(get_settings().database_url)


@pytest.fixture
async def session_factory() -> AsyncIterator[SessionFactory]:
    engine = build_engine(get_settings().database_url)

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment-dependent
        await engine.dispose()
        pytest.skip(f"Postgres is required for integration tests: {exc}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text(TRUNCATE_SQL))

    yield build_session_factory(engine)

    await engine.dispose()
