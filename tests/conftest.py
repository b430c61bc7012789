# This project was developed with assistance from AI tools.
"""Shared fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool so
all sessions share one connection) with the full schema created from the
ORM metadata. The storage and notifier singletons are replaced with mocks
so no test touches disk, S3 or SMTP unless it builds its own backend.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from loandesk_db import Base, get_db
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from loandesk.services import notifier as notifier_mod
from loandesk.services import storage as storage_mod


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def mock_notifier(monkeypatch):
    """Notifier whose ``notify`` succeeds; flip ``return_value`` to simulate failure."""
    mock = MagicMock()
    mock.notify = AsyncMock(return_value=True)
    monkeypatch.setattr(notifier_mod, "_notifier", mock)
    return mock


@pytest.fixture(autouse=True)
def mock_storage(monkeypatch):
    """Storage that hands back ``/uploads/<key>`` without writing anything."""
    mock = MagicMock()
    mock.upload_file = AsyncMock(side_effect=lambda data, key, content_type: f"/uploads/{key}")
    mock.delete_file = AsyncMock(return_value=None)
    monkeypatch.setattr(storage_mod, "_service", mock)
    return mock


@pytest_asyncio.fixture
async def client_factory(session_factory):
    """Factory returning an async httpx client bound to the real app.

    ``user=None`` leaves authentication to the real dependencies, so the
    request is anonymous unless it carries a bearer token.
    """
    from loandesk.main import app
    from loandesk.middleware.auth import get_current_user, get_optional_user

    clients = []

    async def _make(user=None):
        async def _get_db():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = _get_db
        if user is not None:
            async def _get_current_user():
                return user

            app.dependency_overrides[get_current_user] = _get_current_user
            app.dependency_overrides[get_optional_user] = _get_current_user
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        client = httpx.AsyncClient(transport=transport, base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()
