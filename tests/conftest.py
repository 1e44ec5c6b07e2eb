"""
Pytest configuration and fixtures for the API tests.
"""
import os

# Must be set before app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DISPATCH_ENABLED", "false")

import base64
from datetime import timedelta
from types import SimpleNamespace

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.services.gemini_service as gemini_svc
from app.config import settings
from app.db import Base, get_db
from app.main import app
from app.models.db_models import AuthSession, User
from app.services.dispatcher import get_dispatcher
from app.utils.helpers import utcnow

TEST_TOKEN = "test-session-token"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


class FakeDispatcher:
    """Records jobs instead of running them."""

    def __init__(self):
        self.scheduled = []
        self.cancelled = []

    def schedule(self, platform, row_id, run_at, schedule_id=None):
        job_id = schedule_id or f"job-{platform}-{row_id}"
        self.scheduled.append((platform, row_id, run_at, job_id))
        return job_id

    def cancel(self, schedule_id):
        if schedule_id:
            self.cancelled.append(schedule_id)


class FakeGeminiModels:
    """Stands in for client.models: image model returns image_parts, text model returns alt_text."""

    def __init__(self, image_parts=None, alt_text="A golden sunrise over calm water", text=None):
        self.image_parts = image_parts if image_parts is not None else [
            SimpleNamespace(inline_data=SimpleNamespace(mime_type="image/png", data=PNG_BYTES))
        ]
        self.alt_text = alt_text
        self.text = text
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append(model)
        if model == settings.gemini_image_model:
            return SimpleNamespace(parts=self.image_parts, text=None)
        return SimpleNamespace(parts=None, text=self.text if self.text is not None else self.alt_text)


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest_asyncio.fixture
async def user(session_factory):
    """A user with a live session token."""
    async with session_factory() as session:
        u = User(id="user-1", name="Test User", email="test@example.com", email_verified=True)
        session.add(u)
        session.add(
            AuthSession(
                id="session-1",
                token=TEST_TOKEN,
                user_id=u.id,
                expires_at=utcnow() + timedelta(days=1),
            )
        )
        await session.commit()
        return u


@pytest_asyncio.fixture
async def client(session_factory, dispatcher, user):
    """Authenticated async client against the app with the test database."""

    async def get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {TEST_TOKEN}"},
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def fake_gemini(monkeypatch):
    """Patch the Gemini client; tweak attributes on the returned fake per test."""
    models = FakeGeminiModels()
    monkeypatch.setattr(gemini_svc, "_get_client", lambda: SimpleNamespace(models=models))
    return models


@pytest.fixture
def png_b64():
    return base64.b64encode(PNG_BYTES).decode("ascii")
