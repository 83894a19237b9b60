"""
skillconnect/service/services.py

Service Listing Service Layer
Manages CRUD operations for service listings published by providers.
Implements Redis caching for public reads and invalidates the relevant
cache entries (detail, owner list, discovery directory) on every write.
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core.cache import (
    CACHE_PREFIX,
    cache_get_json,
    cache_key,
    cache_set_json,
    invalidate,
    paginated_cache_key,
    redis_client,
)
from skillconnect.service import models, schemas

logger = logging.getLogger(__name__)


# ---------------------------------------------------
# ServiceListingService
# ---------------------------------------------------
class ServiceListingService:
    """Handles service creation, update, deletion, activation and reads."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.cache = redis_client
        if not self.cache:
            logger.warning("[CACHE] Redis client not configured, caching disabled.")

    async def _invalidate_service_caches(self, service_id: UUID | None, provider_id: UUID) -> None:
        """Invalidate service detail, the owner's list and the discovery directory."""
        keys = [cache_key("service:detail", service_id)] if service_id else []
        patterns = [
            f"{CACHE_PREFIX}service:my_services:{provider_id}:*",
            f"{CACHE_PREFIX}discovery:providers:*",
        ]
        logger.info(
            f"[CACHE SERVICE] Invalidating service caches for service={service_id}, provider={provider_id}"
        )
        await invalidate(self.cache, keys, patterns)

    async def _get_owned_service(self, provider_id: UUID, service_id: UUID) -> models.Service:
        stmt = select(models.Service).filter_by(id=service_id, provider_id=provider_id)
        service_db_obj = (await self.db.execute(stmt)).unique().scalars().first()
        if not service_db_obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Service not found or unauthorized."
            )
        return service_db_obj

    async def _commit_and_read(self, service_db_obj: models.Service) -> schemas.ServiceRead:
        await self.db.commit()
        await self.db.refresh(service_db_obj, attribute_names=["provider"])
        return schemas.ServiceRead.model_validate(service_db_obj)

    # ---------------------------------------------------
    # Provider Operations
    # ---------------------------------------------------
    async def create_service(
        self, provider_id: UUID, data: schemas.ServiceCreate
    ) -> schemas.ServiceRead:
        """Create a new, active service for a provider."""
        logger.info(f"[SERVICE] Creating new service for provider {provider_id}")
        service_db_obj = models.Service(provider_id=provider_id, is_active=True, **data.model_dump())
        self.db.add(service_db_obj)
        try:
            response = await self._commit_and_read(service_db_obj)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[SERVICE ERROR] Failed to create service: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to create service.")

        await self._invalidate_service_caches(None, provider_id)
        return response

    async def update_service(
        self, provider_id: UUID, service_id: UUID, data: schemas.ServiceUpdate
    ) -> schemas.ServiceRead:
        """Update an existing service listing (must belong to the provider)."""
        service_db_obj = await self._get_owned_service(provider_id, service_id)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return schemas.ServiceRead.model_validate(service_db_obj)

        logger.info(f"[SERVICE] Updating service {service_id} for provider {provider_id}")
        for field, val in update_data.items():
            setattr(service_db_obj, field, val)
        try:
            response = await self._commit_and_read(service_db_obj)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[SERVICE ERROR] Failed to update service: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update service.",
            )

        await self._invalidate_service_caches(service_id, provider_id)
        return response

    async def set_service_active(
        self, provider_id: UUID, service_id: UUID, is_active: bool
    ) -> schemas.ServiceRead:
        """Show or hide a service in discovery without deleting it."""
        service_db_obj = await self._get_owned_service(provider_id, service_id)
        if service_db_obj.is_active == is_active:
            return schemas.ServiceRead.model_validate(service_db_obj)

        logger.info(f"[SERVICE] Setting service {service_id} is_active={is_active}")
        service_db_obj.is_active = is_active
        try:
            response = await self._commit_and_read(service_db_obj)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[SERVICE ERROR] Failed to toggle service: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to update service.")

        await self._invalidate_service_caches(service_id, provider_id)
        return response

    async def delete_service(self, provider_id: UUID, service_id: UUID) -> None:
        service_db_obj = await self._get_owned_service(provider_id, service_id)

        logger.info(f"[SERVICE] Deleting service {service_id} for provider {provider_id}")
        try:
            await self.db.delete(service_db_obj)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[SERVICE ERROR] Failed to delete service: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to delete service.")

        await self._invalidate_service_caches(service_id, provider_id)

    async def get_my_services(
        self, provider_id: UUID, skip: int = 0, limit: int = 50
    ) -> tuple[list[schemas.ServiceRead], int]:
        key = paginated_cache_key("service:my_services", provider_id, skip, limit)
        cached = await cache_get_json(self.cache, key)
        if cached:
            try:
                items = [schemas.ServiceRead.model_validate(i) for i in cached["items"]]
                return items, cached["total_count"]
            except (KeyError, ValueError) as e:
                logger.error(f"[CACHE] my_services {key} failed validation: {e}. Fetching from DB.")

        count = (
            await self.db.execute(
                select(func.count(models.Service.id)).filter(
                    models.Service.provider_id == provider_id
                )
            )
        ).scalar_one()

        stmt = (
            select(models.Service)
            .filter_by(provider_id=provider_id)
            .order_by(models.Service.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        service_db_objs = (await self.db.execute(stmt)).unique().scalars().all()
        items = [schemas.ServiceRead.model_validate(s) for s in service_db_objs]

        await cache_set_json(
            self.cache,
            key,
            {"items": [i.model_dump(mode="json") for i in items], "total_count": count},
        )
        return items, count

    # ---------------------------------------------------
    # Public Read
    # ---------------------------------------------------
    async def get_public_service_detail(self, service_id: UUID) -> schemas.ServiceRead:
        """Active services only; an inactive listing reads as not found."""
        key = cache_key("service:detail", service_id)
        cached = await cache_get_json(self.cache, key)
        if cached:
            try:
                return schemas.ServiceRead.model_validate(cached)
            except ValueError as e:
                logger.error(f"[CACHE] service:detail:{service_id} failed validation: {e}")

        stmt = select(models.Service).filter_by(id=service_id, is_active=True)
        service_db_obj = (await self.db.execute(stmt)).unique().scalars().first()
        if not service_db_obj:
            raise HTTPException(status_code=404, detail="Service not found.")

        response = schemas.ServiceRead.model_validate(service_db_obj)
        await cache_set_json(self.cache, key, response.model_dump(mode="json"))
        return response
