"""
Shared fixtures: in-memory SQLite, a fixed clock and a recording notifier.
Environment is prepared before anything from ``turismo`` is imported.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DB_DSN"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["VALIDATION_MODE"] = "lenient"
os.environ["BUSINESS_TIMEZONE"] = "America/Lima"
os.environ["PUBLIC_BASE_URL"] = "https://api.turismo.test"
os.environ["ADMIN_EMAIL"] = ""
os.environ["SMTP_HOST"] = ""

from datetime import datetime, timezone
from typing import List

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from turismo.models import Base
from turismo.security import create_token
from turismo.services.notification_service import BookingNotice, Notifier

# 10:00 in Lima
NOW = datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)


class RecordingNotifier(Notifier):
    """Keeps every notice it receives."""

    def __init__(self):
        self.notices: List[BookingNotice] = []

    async def booking_created(self, notice: BookingNotice) -> None:
        self.notices.append(notice)


class ExplodingNotifier(Notifier):
    """Always fails, like an unreachable mail server."""

    def __init__(self):
        self.calls = 0

    async def booking_created(self, notice: BookingNotice) -> None:
        self.calls += 1
        raise ConnectionError("SMTP down")


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def app(session_factory, clock, notifier):
    from turismo.deps import get_clock
    from turismo.infrastructure.database import get_session
    from turismo.main import app
    from turismo.services.notification_service import get_notifier

    async def _session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def agent_headers() -> dict:
    token = create_token(101, "agent", email="agent@turismo.pe", name="Agent")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict:
    token = create_token(100, "admin", email="admin@turismo.pe", name="Admin")
    return {"Authorization": f"Bearer {token}"}
