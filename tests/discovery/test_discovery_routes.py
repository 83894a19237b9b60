# tests/discovery/test_discovery_routes.py
from collections.abc import Callable
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient

from skillconnect.booking import services as booking_services
from skillconnect.core.dependencies import SessionContext
from skillconnect.database.enums import RateType
from skillconnect.database.models import Profile
from skillconnect.discovery import services as discovery_services
from skillconnect.discovery.schemas import JobListing, ProviderFilterCriteria, ProviderListing
from skillconnect.discovery.services import DiscoveryService, build_provider_listing
from skillconnect.service.models import Service


def make_db_service(title: str, category: str, rate: float, is_active: bool = True) -> Service:
    return Service(
        id=uuid4(),
        title=title,
        category=category,
        rate=rate,
        rate_type=RateType.HOURLY,
        is_active=is_active,
    )


# --- Listing Construction ---


def test_listing_uses_only_active_services(fake_provider_profile: Profile) -> None:
    fake_provider_profile.services = [
        make_db_service("Hidden premium clean", "officeCleaning", 10, is_active=False),
        make_db_service("Deep Apartment Cleaning", "deepCleaning", 60),
        make_db_service("Window Cleaning", "houseCleaning", 40),
    ]

    listing = build_provider_listing(fake_provider_profile)

    assert listing.id == fake_provider_profile.user_id
    assert listing.profession == "Deep Apartment Cleaning"
    assert listing.category == "deepCleaning"
    assert listing.categories == ["deepCleaning", "houseCleaning"]
    assert listing.hourly_rate == 40
    assert listing.rating == 4.5
    assert listing.reviews == 12


def test_listing_without_active_services_falls_back_to_skills(
    fake_provider_profile: Profile,
) -> None:
    fake_provider_profile.services = [make_db_service("Paused", "plumber", 30, is_active=False)]
    fake_provider_profile.bio = None

    listing = build_provider_listing(fake_provider_profile)

    assert listing.category == "cleaning"
    assert listing.profession == "cleaning"
    assert listing.categories == []
    assert listing.hourly_rate == 0
    assert listing.bio == "Professional service provider"


def test_listing_defaults_for_bare_profile() -> None:
    profile = Profile(user_id=uuid4(), skills=None, services=[])

    listing = build_provider_listing(profile)

    assert listing.category == "General"
    assert listing.profession == "Service Provider"
    assert listing.rating == 0
    assert listing.reviews == 0


def test_generated_bio_lists_active_services(fake_provider_profile: Profile) -> None:
    fake_provider_profile.bio = None
    fake_provider_profile.services = [make_db_service("Window Cleaning", "houseCleaning", 40)]

    listing = build_provider_listing(fake_provider_profile)

    assert listing.bio == "Professional service provider offering Window Cleaning"


@pytest.mark.asyncio
async def test_directory_read_failure_degrades_to_empty() -> None:
    db = AsyncMock()
    db.execute.side_effect = RuntimeError("connection reset")
    service = DiscoveryService(db)
    service.cache = None

    assert await service.search_providers(ProviderFilterCriteria(category="cleaning")) == []


@pytest.mark.asyncio
async def test_directory_filters_loaded_profiles(
    fake_provider_profile: Profile, db_result: Callable[..., MagicMock]
) -> None:
    fake_provider_profile.services = [make_db_service("Deep clean", "deepCleaning", 60)]
    db = AsyncMock()
    db.execute.return_value = db_result(all_=[fake_provider_profile])
    service = DiscoveryService(db)
    service.cache = None

    found = await service.search_providers(ProviderFilterCriteria(category="Cleaning"))
    missed = await service.search_providers(ProviderFilterCriteria(category="plumber"))

    assert [p.id for p in found] == [fake_provider_profile.user_id]
    assert missed == []


# --- Routes ---


@pytest.mark.asyncio
async def test_list_categories(async_client: AsyncClient) -> None:
    response = await async_client.get("/discovery/categories")

    assert response.status_code == status.HTTP_200_OK
    cleaning = next(c for c in response.json() if c["key"] == "cleaning")
    assert {s["key"] for s in cleaning["subcategories"]} == {
        "houseCleaning",
        "deepCleaning",
        "officeCleaning",
    }


@pytest.mark.asyncio
@patch.object(discovery_services.DiscoveryService, "search_providers", new_callable=AsyncMock)
async def test_search_providers_passes_criteria(
    mock_search: AsyncMock,
    mock_current_client: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    listing = ProviderListing(
        id=uuid4(), name="Nino", profession="Cleaner", category="cleaning", hourly_rate=30
    )
    mock_search.return_value = [listing]

    response = await async_client.get(
        "/discovery/providers",
        params={"category": "Cleaning", "min_rate": 10, "sort_by": "price"},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()[0]["name"] == "Nino"
    criteria = mock_search.call_args.args[0]
    assert criteria.category == "Cleaning"
    assert criteria.min_rate == 10
    assert criteria.sort_by.value == "price"


@pytest.mark.asyncio
async def test_search_providers_requires_token(
    async_client: AsyncClient, override_get_db: None
) -> None:
    response = await async_client.get("/discovery/providers")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_search_providers_rejects_inverted_range(
    mock_current_client: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.get(
        "/discovery/providers", params={"min_rate": 100, "max_rate": 10}
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
@patch.object(discovery_services.DiscoveryService, "search_providers", new_callable=AsyncMock)
async def test_provider_markers_skip_unlocated(
    mock_search: AsyncMock,
    mock_current_client: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    located = ProviderListing(
        id=uuid4(), name="Nino", profession="Cleaner", category="cleaning",
        latitude=41.7, longitude=44.8,
    )
    unlocated = ProviderListing(id=uuid4(), name="Levan", profession="Plumber", category="plumber")
    mock_search.return_value = [located, unlocated]

    response = await async_client.get("/discovery/providers/map")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == str(located.id)
    assert data[0]["position"] == {"lat": 41.7, "lng": 44.8}


@pytest.mark.asyncio
@patch.object(booking_services.BookingService, "list_available_jobs", new_callable=AsyncMock)
async def test_job_markers_for_provider(
    mock_jobs: AsyncMock,
    mock_current_provider: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    job = JobListing(
        id=uuid4(), client_id=uuid4(), title="Fix sink", category="plumber", amount=80,
        currency="gel", latitude=41.0, longitude=44.0, created_at=datetime.now(timezone.utc),
    )
    mock_jobs.return_value = [job]

    response = await async_client.get("/discovery/jobs/map")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()[0]["label"] == "Fix sink"


@pytest.mark.asyncio
async def test_job_markers_forbidden_for_client(
    mock_current_client: SessionContext,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    response = await async_client.get("/discovery/jobs/map")
    assert response.status_code == status.HTTP_403_FORBIDDEN
