from __future__ import annotations

from collections.abc import Iterator
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from giveaway.main import create_app


class FakeSession:
    def __init__(self, *, fail_execute: bool = False) -> None:
        self.fail_execute = fail_execute
        self.commits = 0
        self.rollbacks = 0

    async def execute(self, statement):  # noqa: ARG002
        if self.fail_execute:
            raise ConnectionError("database unavailable")
        return SimpleNamespace(scalar_one=lambda: 1)

    async def flush(self) -> None:
        return None

    async def __aenter__(self) -> FakeSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:  # noqa: ANN001
        if exc_type is None:
            self.commits += 1
        else:
            self.rollbacks += 1
        return False


class FakeSessionFactory:
    def __init__(self, session: FakeSession | None = None) -> None:
        self.session = session or FakeSession()

    def __call__(self) -> FakeSession:
        return self.session

    def begin(self) -> FakeSession:
        return self.session


class FakeMailer:
    def __init__(self) -> None:
        self.sent: list[tuple[str, tuple]] = []

    async def send_otp(self, *args) -> None:
        self.sent.append(("otp", args))

    async def send_claim_verification(self, *args) -> None:
        self.sent.append(("claim_verification", args))

    async def send_invite(self, *args) -> None:
        self.sent.append(("invite", args))

    async def send_gift_confirmation(self, *args) -> None:
        self.sent.append(("gift_confirmation", args))


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def client(session_factory: FakeSessionFactory, mailer: FakeMailer) -> Iterator[TestClient]:
    app = create_app(session_factory=session_factory, mailer=mailer)  # type: ignore[arg-type]
    with TestClient(app) as test_client:
        yield test_client
