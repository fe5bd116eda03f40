"""
MarkDeck — Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   A fresh in-memory SQLite database per test (StaticPool keeps the one
       connection alive across sessions), a fresh FastAPI app per test with
       get_db_session overridden to use it, and an httpx AsyncClient over
       ASGITransport.

Fixture Hierarchy (all function-scoped):
    db_engine ─┬─ session_factory ─┬─ db_session        direct service tests
               │                   └─ test_client       HTTP tests
               └─ (tables created, disposed after the test)
    api_client  (over the same app)                     MarkDeckClient over ASGI
"""

import os

# Override settings for testing BEFORE any markdeck imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from typing import AsyncGenerator, Callable, Dict, Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from markdeck.client.api import MarkDeckClient
from markdeck.database import Base, get_db_session
from markdeck.main import create_app
from markdeck.models import presentation, slide  # noqa: F401  (register tables)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for calling services directly; committed by the test if needed."""
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory):
    """A fresh application whose requests use the test database."""
    application = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP test client talking to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def api_client(app):
    """MarkDeckClient routed to the in-process app."""
    client = MarkDeckClient(base_url="http://test/api", transport=ASGITransport(app=app))
    yield client
    await client.aclose()


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def create_presentation(test_client) -> Callable[..., Any]:
    """Creates a presentation over HTTP and returns its JSON body."""

    async def _create(title: str = "Test Deck", **fields: Any) -> Dict[str, Any]:
        response = await test_client.post("/api/presentations", json={"title": title, **fields})
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def add_slides(test_client) -> Callable[..., Any]:
    """Appends slides titled `titles` to a presentation; returns the ordered slide list."""

    async def _add(presentation_id: str, *titles: str):
        for title in titles:
            response = await test_client.post(
                "/api/slides",
                json={"presentationId": presentation_id, "title": title, "content": f"# {title}"},
            )
            assert response.status_code == 201, response.text
        listing = await test_client.get(f"/api/slides/presentation/{presentation_id}")
        return listing.json()

    return _add
