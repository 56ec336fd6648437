"""Shared test fixtures and configuration."""
import os
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from callbridge.main import app
from callbridge.db.database import get_db
from callbridge.db.models import Base
from callbridge.core.config import Settings
from callbridge.core.dependencies import get_settings, get_voice_client
from callbridge.services.voice.client import ElevenLabsClient


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PROVIDER_BASE_URL = "https://provider.test"

ProviderReply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeProvider:
    """Stands in for the ElevenLabs API behind an ``httpx.MockTransport``.

    Replies are registered per ``(method, path)``; unregistered routes answer
    404. Every request received is kept in ``requests``.
    """

    def __init__(self):
        self.replies: Dict[Tuple[str, str], ProviderReply] = {}
        self.requests: List[httpx.Request] = []

    def reply(self, method: str, path: str, reply: ProviderReply) -> None:
        self.replies[(method, path)] = reply

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"detail": "Not found"})
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply


@pytest.fixture
def test_settings():
    """Override settings for testing."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        elevenlabs_api_key="test-key",
        elevenlabs_base_url=PROVIDER_BASE_URL,
        elevenlabs_agent_id="agent_test",
        elevenlabs_phone_number_id="phnum_test",
        app_name="Test Call App",
    )


@pytest.fixture
def unconfigured_settings(test_settings):
    """Settings without a provider credential."""
    return test_settings.model_copy(update={"elevenlabs_api_key": None})


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(test_db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def fake_provider():
    """Fake voice provider with no routes registered."""
    return FakeProvider()


@pytest.fixture
async def provider_http_client(fake_provider):
    """HTTP client wired to the fake provider."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_provider.handler)) as client:
        yield client


@pytest.fixture
def voice_client(test_settings, provider_http_client):
    """Voice client talking to the fake provider."""
    return ElevenLabsClient(test_settings, http_client=provider_http_client)


@pytest.fixture
def override_get_db(test_db):
    """Override get_db dependency with test database."""
    async def _override_get_db():
        yield test_db
    return _override_get_db


@pytest.fixture
def app_settings(test_settings):
    """Settings served to the application; override to change configuration per test."""
    return test_settings


@pytest.fixture
async def api_client(override_get_db, app_settings, provider_http_client):
    """Async HTTP client for the application with test dependencies."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_voice_client] = lambda: ElevenLabsClient(
        app_settings, http_client=provider_http_client
    )

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()
