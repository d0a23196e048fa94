"""
Pytest Configuration and Fixtures

Provides reusable async fixtures for testing Videotrack.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from typing import AsyncGenerator, Callable, Dict, List, Tuple
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from videotrack.core.database import Base
from videotrack.models import CompletionState, VideoActivity


# ==================== Database Fixtures ====================

@pytest.fixture
def mock_async_session() -> AsyncMock:
    """
    Create a mock async database session.

    Returns:
        AsyncMock configured to behave like AsyncSession.
    """
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock(return_value=MagicMock())
    session.add = MagicMock()
    return session


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
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
def session_maker(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
async def activity(session_maker) -> VideoActivity:
    """A video activity with cmid 7 and seek restriction on."""
    async with session_maker() as session:
        activity = VideoActivity(
            id=7,
            course_id=1,
            name="Introduction to Decorators",
            video_url="https://cdn.example.com/videos/decorators.mp4",
            restrict_seeking=True,
        )
        session.add(activity)
        await session.commit()
    return activity


# ==================== Completion Engine Fixtures ====================

class RecordingCompletionEngine:
    """Completion engine that keeps every update it receives."""

    def __init__(self):
        self.updates: List[Tuple[int, int, CompletionState]] = []

    async def update_state(self, activity_id: int, user_id: int, state: CompletionState) -> None:
        self.updates.append((activity_id, user_id, state))


@pytest.fixture
def completion_engine() -> RecordingCompletionEngine:
    return RecordingCompletionEngine()


# ==================== API Fixtures ====================

@pytest.fixture
async def api_client(session_maker, completion_engine) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    HTTP client bound to the ASGI app, with the database and the
    completion engine swapped for test doubles.
    """
    from videotrack.core.database import get_db
    from videotrack.main import app
    from videotrack.services.completion_engine import get_completion_engine

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_completion_engine] = lambda: completion_engine

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[int], Dict[str, str]]:
    """
    Factory fixture for bearer headers.

    Usage:
        headers = auth_headers(3)
    """
    from videotrack.core.security import create_access_token

    def _headers(user_id: int) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _headers


# ==================== HTTP Client Fixtures ====================

@pytest.fixture
def mock_httpx_response():
    """
    Factory fixture to create mock httpx responses.

    Usage:
        response = mock_httpx_response(status_code=200, json_data={"key": "value"})
    """
    def _create_response(status_code: int = 200, json_data: dict = None, text: str = ""):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = json_data or {}
        response.text = text
        return response
    return _create_response


@pytest.fixture
def mock_httpx_client(mock_httpx_response):
    """
    Create a mock httpx.AsyncClient.

    Returns:
        AsyncMock configured for HTTP operations.
    """
    client = AsyncMock()
    client.get = AsyncMock(return_value=mock_httpx_response())
    client.post = AsyncMock(return_value=mock_httpx_response())
    client.request = AsyncMock(return_value=mock_httpx_response())
    return client
