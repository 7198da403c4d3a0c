from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.engine import make_url

TEST_DB_NAME_RE = re.compile(r"test", re.IGNORECASE)
LOCAL_TEST_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres", "giveaway_postgres"})


@dataclass(frozen=True, slots=True)
class DatabaseTargetCheck:
    is_safe: bool
    reason: str
    database_name: str
    host: str


def check_test_database(database_url: str) -> DatabaseTargetCheck:
    parsed = make_url(database_url)
    db_name = (parsed.database or "").strip()
    host = (parsed.host or "").strip().lower()

    reason = "ok"
    if parsed.get_backend_name() != "postgresql":
        reason = "integration tests run against PostgreSQL only"
    elif TEST_DB_NAME_RE.search(db_name) is None:
        reason = "database name must contain 'test'"
    elif host not in LOCAL_TEST_HOSTS:
        reason = f"host {host!r} is not a local test host"

    return DatabaseTargetCheck(
        is_safe=reason == "ok",
        reason=reason,
        database_name=db_name,
        host=host,
    )


def assert_safe_test_database(database_url: str) -> None:
    check = check_test_database(database_url)
    if check.is_safe:
        return
    raise RuntimeError(
        "Refusing to truncate tables outside a dedicated test database: "
        f"{check.reason} (name='{check.database_name}' host='{check.host}')"
    )
