"""Test fixtures for the backend."""
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from portal.config import Settings
from portal.database import build_engine, build_sessionmaker
from portal.main import create_app, create_tables

VALID_CAPTCHA = "valid"


class FakeCaptcha:
    """Accepts exactly one token value."""

    def __init__(self) -> None:
        self.calls: list[str | None] = []

    async def verify(self, token, remote_ip=None) -> bool:
        self.calls.append(token)
        return token == VALID_CAPTCHA


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send_password_reset(self, email: str, token: str) -> None:
        self.sent.append((email, token))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'portal_test.db'}")


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = build_engine(settings.database_url)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with build_sessionmaker(engine)() as session:
        yield session


@pytest.fixture
def captcha() -> FakeCaptcha:
    return FakeCaptcha()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def app(settings: Settings, engine: AsyncEngine, captcha: FakeCaptcha, mailer: RecordingMailer) -> FastAPI:
    return create_app(settings, engine=engine, captcha=captcha, mailer=mailer)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an HTTP client for integration tests."""

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


def registration(**overrides) -> dict:
    payload = {
        "username": "jdoe",
        "email": "j.doe@eil.com",
        "password": "secret123",
        "role": "employee",
        "firstName": "J",
        "lastName": "Doe",
    }
    payload.update(overrides)
    return payload


def login_payload(**overrides) -> dict:
    payload = {
        "userId": "j.doe@eil.com",
        "password": "secret123",
        "role": "employee",
        "recaptchaToken": VALID_CAPTCHA,
    }
    payload.update(overrides)
    return payload
