"""
skillconnect/discovery/services.py

Discovery Service Layer
Builds the provider directory (provider profiles plus their active services),
caches it in Redis and applies the pure filters from `filters.py`.
Read failures degrade to an empty directory; they never fail the request.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from skillconnect.core.cache import cache_get_json, cache_key, cache_set_json, redis_client
from skillconnect.core.config import settings
from skillconnect.database.enums import UserRole
from skillconnect.database.models import Profile
from skillconnect.discovery import schemas
from skillconnect.discovery.filters import DISTANCE_PLACEHOLDER_KM, filter_providers

logger = logging.getLogger(__name__)

DIRECTORY_CACHE_KEY = cache_key("discovery:providers", "all")


def build_provider_listing(profile: Profile) -> schemas.ProviderListing:
    """
    Flatten a provider profile into a directory row. Only active services
    contribute to the rate, categories and profession shown.
    """
    active = [s for s in profile.services if s.is_active]
    skills = profile.skills or []

    if active:
        primary_category = active[0].category
        profession = active[0].title
        lowest_rate = min(s.rate for s in active)
    else:
        primary_category = skills[0] if skills else "General"
        profession = skills[0] if skills else "Service Provider"
        lowest_rate = 0.0

    bio = profile.bio or "Professional service provider"
    if not profile.bio and active:
        bio += " offering " + ", ".join(s.title for s in active)

    return schemas.ProviderListing(
        id=profile.user_id,
        name=profile.display_name,
        profession=profession,
        category=primary_category,
        categories=[s.category for s in active],
        rating=profile.rating or 0.0,
        reviews=profile.total_reviews or 0,
        distance_km=DISTANCE_PLACEHOLDER_KM,
        hourly_rate=lowest_rate,
        bio=bio,
        avatar_url=profile.avatar_url,
        location=profile.location,
        latitude=profile.latitude,
        longitude=profile.longitude,
    )


class DiscoveryService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.cache = redis_client

    async def get_provider_directory(self) -> list[schemas.ProviderListing]:
        """All provider listings, bounded by DISCOVERY_SCAN_LIMIT, newest profiles first."""
        cached = await cache_get_json(self.cache, DIRECTORY_CACHE_KEY)
        if cached is not None:
            try:
                return [schemas.ProviderListing.model_validate(item) for item in cached]
            except ValueError as e:
                logger.error(f"[CACHE] Provider directory failed validation: {e}")

        stmt = (
            select(Profile)
            .where(Profile.user_type == UserRole.PROVIDER)
            .options(selectinload(Profile.services))
            .order_by(Profile.created_at.desc())
            .limit(settings.DISCOVERY_SCAN_LIMIT)
        )
        try:
            profiles = (await self.db.execute(stmt)).unique().scalars().all()
        except Exception as e:
            logger.error(f"[DISCOVERY] Failed to load provider directory: {e}", exc_info=True)
            return []

        listings = [build_provider_listing(p) for p in profiles]
        logger.debug(f"[DISCOVERY] Built provider directory with {len(listings)} listings")
        await cache_set_json(
            self.cache, DIRECTORY_CACHE_KEY, [item.model_dump(mode="json") for item in listings]
        )
        return listings

    async def search_providers(
        self, criteria: schemas.ProviderFilterCriteria
    ) -> list[schemas.ProviderListing]:
        directory = await self.get_provider_directory()
        return filter_providers(directory, criteria)
