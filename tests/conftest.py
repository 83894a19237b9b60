"""
tests/conftest.py

Test fixtures for API route tests and service-layer unit tests.
Includes async clients, fake profiles and session contexts, dependency
overrides, and a mocked AsyncSession with result builders.
"""
import os
import sys
from pathlib import Path

# Rate limits would trip on repeated calls within a test run; emails never leave the process.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("EMAILS_ENABLED", "false")

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# --- Imports ---
from collections.abc import AsyncGenerator, Callable, Generator
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from main import app
from skillconnect.booking.schemas import ApplicationRead, BookingRead
from skillconnect.core.dependencies import SessionContext, get_session_context
from skillconnect.database.enums import (
    ApplicationStatus,
    BookingStatus,
    RateType,
    UserRole,
)
from skillconnect.database.models import Profile
from skillconnect.database.session import get_db
from skillconnect.service.schemas import ServiceProviderRead, ServiceRead


def _now() -> datetime:
    return datetime.now(timezone.utc)


# --- Core Test Fixtures ---


@pytest.fixture(scope="session")
def transport() -> ASGITransport:
    """Fixture for ASGI transport."""
    return ASGITransport(app=app)


@pytest_asyncio.fixture(scope="function")
async def async_client(transport: ASGITransport) -> AsyncGenerator[AsyncClient, None]:
    """Fixture for HTTP async client."""
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# --- Fake Profile Fixtures ---


@pytest.fixture
def fake_client_profile() -> Profile:
    return Profile(
        id=uuid4(),
        user_id=uuid4(),
        full_name="Nino Client",
        email="client.test@example.com",
        user_type=UserRole.CLIENT,
        location="Tbilisi",
        created_at=_now(),
        updated_at=_now(),
    )


@pytest.fixture
def fake_provider_profile() -> Profile:
    return Profile(
        id=uuid4(),
        user_id=uuid4(),
        full_name="Giorgi Provider",
        email="provider.test@example.com",
        user_type=UserRole.PROVIDER,
        bio="Reliable house cleaning",
        skills=["cleaning"],
        location="Tbilisi",
        latitude=41.7151,
        longitude=44.8271,
        rating=4.5,
        total_reviews=12,
        created_at=_now(),
        updated_at=_now(),
    )


@pytest.fixture
def client_session(fake_client_profile: Profile) -> SessionContext:
    return SessionContext(
        user_id=fake_client_profile.user_id,
        email=fake_client_profile.email,
        role=UserRole.CLIENT,
        profile=fake_client_profile,
    )


@pytest.fixture
def provider_session(fake_provider_profile: Profile) -> SessionContext:
    return SessionContext(
        user_id=fake_provider_profile.user_id,
        email=fake_provider_profile.email,
        role=UserRole.PROVIDER,
        profile=fake_provider_profile,
    )


@pytest.fixture
def unassigned_session() -> SessionContext:
    """Authenticated identity that has not picked a role yet (no profile row)."""
    return SessionContext(user_id=uuid4(), email="new.user@example.com", role=None, profile=None)


# --- Dependency Overrides ---


@pytest_asyncio.fixture
async def override_get_db() -> AsyncGenerator[None, None]:
    """Override for the database dependency."""

    async def _override() -> AsyncGenerator[AsyncMock, None]:
        yield AsyncMock()

    app.dependency_overrides[get_db] = _override
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def mock_current_client(client_session: SessionContext) -> AsyncGenerator[SessionContext, None]:
    """Authenticate requests as a client."""
    app.dependency_overrides[get_session_context] = lambda: client_session
    yield client_session
    app.dependency_overrides.pop(get_session_context, None)


@pytest_asyncio.fixture
async def mock_current_provider(
    provider_session: SessionContext,
) -> AsyncGenerator[SessionContext, None]:
    """Authenticate requests as a provider."""
    app.dependency_overrides[get_session_context] = lambda: provider_session
    yield provider_session
    app.dependency_overrides.pop(get_session_context, None)


@pytest_asyncio.fixture
async def mock_current_unassigned(
    unassigned_session: SessionContext,
) -> AsyncGenerator[SessionContext, None]:
    """Authenticate requests as an identity without a role."""
    app.dependency_overrides[get_session_context] = lambda: unassigned_session
    yield unassigned_session
    app.dependency_overrides.pop(get_session_context, None)


# --- Mocked AsyncSession for service-layer tests ---


@pytest.fixture
def db_result() -> Callable[..., MagicMock]:
    """
    Build an object shaped like a SQLAlchemy Result:
    `first` feeds .scalars().first(), `all_` feeds .scalars().all(),
    `rows` feeds .all(), `scalar` feeds .scalar_one()/.scalar_one_or_none().
    """

    def _make(
        first: Any = None,
        all_: list[Any] | None = None,
        rows: list[Any] | None = None,
        scalar: Any = None,
        rowcount: int = 0,
    ) -> MagicMock:
        result = MagicMock()
        result.unique.return_value = result
        result.scalars.return_value.first.return_value = first
        result.scalars.return_value.all.return_value = all_ or []
        result.all.return_value = rows or []
        result.scalar_one.return_value = scalar
        result.scalar_one_or_none.return_value = scalar
        result.rowcount = rowcount
        return result

    return _make


@pytest.fixture
def mock_db() -> AsyncMock:
    """AsyncSession stand-in; refresh() fills in what the database would generate."""
    db = AsyncMock()
    db.add = MagicMock()

    async def _refresh(obj: Any, attribute_names: list[str] | None = None) -> None:
        if getattr(obj, "id", None) is None:
            obj.id = uuid4()
        if getattr(obj, "created_at", None) is None:
            obj.created_at = _now()
        if getattr(obj, "updated_at", None) is None:
            obj.updated_at = _now()

    db.refresh.side_effect = _refresh
    return db


# --- Fake Data Fixtures (Schema Instances) ---


@pytest.fixture
def fake_service_read(fake_provider_profile: Profile) -> ServiceRead:
    return ServiceRead(
        id=uuid4(),
        provider_id=fake_provider_profile.user_id,
        title="Deep Apartment Cleaning",
        description="Kitchen, bathrooms and windows",
        category="deepCleaning",
        rate=50.0,
        rate_type=RateType.HOURLY,
        duration_minutes=120,
        is_active=True,
        created_at=_now(),
        updated_at=_now(),
        provider=ServiceProviderRead(
            user_id=fake_provider_profile.user_id,
            full_name=fake_provider_profile.full_name,
            location=fake_provider_profile.location,
            rating=fake_provider_profile.rating,
        ),
    )


@pytest.fixture
def fake_job_post_read(fake_client_profile: Profile) -> BookingRead:
    return BookingRead(
        id=uuid4(),
        client_id=fake_client_profile.user_id,
        provider_id=None,
        service_id=None,
        amount=80.0,
        currency="gel",
        status=BookingStatus.PENDING,
        notes="Fix kitchen sink - Leaking under the counter",
        job_type="plumber",
        created_at=_now(),
        updated_at=_now(),
    )


@pytest.fixture
def fake_application_read(
    fake_job_post_read: BookingRead, fake_provider_profile: Profile
) -> ApplicationRead:
    return ApplicationRead(
        id=uuid4(),
        booking_id=fake_job_post_read.id,
        provider_id=fake_provider_profile.user_id,
        message="I would like to work on this job.",
        status=ApplicationStatus.PENDING,
        created_at=_now(),
    )
