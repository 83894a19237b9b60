"""
skillconnect/profile/services.py

Profile Service Layer
Handles onboarding and profile management for authenticated identities:
- First-visit profile creation
- One-time role assignment (client or provider)
- Owner-only profile updates
- Public profile reads (cached in Redis)
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core.cache import (
    cache_get_json,
    cache_key,
    cache_set_json,
    invalidate,
    redis_client,
)
from skillconnect.core.dependencies import SessionContext
from skillconnect.database.enums import UserRole
from skillconnect.database.models import Profile
from skillconnect.profile import schemas

logger = logging.getLogger(__name__)


class ProfileService:
    """Manages the caller's own profile and public profile reads."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.cache = redis_client

    async def _load_profile(self, user_id: UUID) -> Profile | None:
        result = await self.db.execute(select(Profile).where(Profile.user_id == user_id))
        return result.scalars().first()

    async def _invalidate_profile_caches(self, user_id: UUID) -> None:
        await invalidate(
            self.cache,
            keys=[cache_key("profile:public", user_id)],
            patterns=[cache_key("discovery:providers", "*")],
        )

    # ---------------------------------------------------
    # Onboarding
    # ---------------------------------------------------
    async def get_or_create_my_profile(self, session: SessionContext) -> Profile:
        """Return the caller's profile, creating an empty one on first visit."""
        if session.profile is not None:
            return session.profile

        profile = await self._load_profile(session.user_id)
        if profile:
            return profile

        logger.info(f"[PROFILE] Creating profile for identity {session.user_id}")
        profile = Profile(user_id=session.user_id, email=session.email)
        self.db.add(profile)
        try:
            await self.db.commit()
            await self.db.refresh(profile)
            return profile
        except IntegrityError:
            # A concurrent first visit created the row first.
            await self.db.rollback()
            existing = await self._load_profile(session.user_id)
            if existing:
                return existing
            raise HTTPException(status_code=500, detail="Failed to create profile.")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[PROFILE ERROR] Failed to create profile: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to create profile.")

    async def assign_role(self, session: SessionContext, role: UserRole) -> schemas.ProfileRead:
        """
        Set the caller's role. Allowed exactly once; the guard is part of the
        UPDATE so two racing requests cannot both succeed.
        """
        profile = await self.get_or_create_my_profile(session)
        if profile.user_type is not None:
            logger.warning(
                f"[PROFILE] Role reassignment rejected for {session.user_id} "
                f"(current={profile.user_type.value}, requested={role.value})"
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail="Role has already been assigned."
            )

        stmt = (
            update(Profile)
            .where(Profile.user_id == session.user_id, Profile.user_type.is_(None))
            .values(user_type=role)
            .returning(Profile.id)
        )
        try:
            updated_id = (await self.db.execute(stmt)).scalar_one_or_none()
            if updated_id is None:
                await self.db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Role has already been assigned.",
                )
            await self.db.commit()
            await self.db.refresh(profile)
        except HTTPException:
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[PROFILE ERROR] Failed to assign role: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to assign role.")

        logger.info(f"[PROFILE] Identity {session.user_id} onboarded as {role.value}")
        await self._invalidate_profile_caches(session.user_id)
        return schemas.ProfileRead.model_validate(profile)

    # ---------------------------------------------------
    # Owner Operations
    # ---------------------------------------------------
    async def get_my_profile(self, session: SessionContext) -> schemas.ProfileRead:
        profile = await self.get_or_create_my_profile(session)
        return schemas.ProfileRead.model_validate(profile)

    async def update_my_profile(
        self, session: SessionContext, data: schemas.ProfileUpdate
    ) -> schemas.ProfileRead:
        profile = await self.get_or_create_my_profile(session)

        update_data = data.model_dump(exclude_unset=True)
        if "skills" in update_data and profile.user_type != UserRole.PROVIDER:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only providers can list skills.",
            )
        if not update_data:
            return schemas.ProfileRead.model_validate(profile)

        logger.info(f"[PROFILE] Updating profile {session.user_id}: {sorted(update_data)}")
        for field, value in update_data.items():
            setattr(profile, field, value)
        try:
            await self.db.commit()
            await self.db.refresh(profile)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[PROFILE ERROR] Failed to update profile: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to update profile.")

        await self._invalidate_profile_caches(session.user_id)
        return schemas.ProfileRead.model_validate(profile)

    # ---------------------------------------------------
    # Public Read
    # ---------------------------------------------------
    async def get_public_profile(self, user_id: UUID) -> schemas.PublicProfileRead:
        key = cache_key("profile:public", user_id)
        cached = await cache_get_json(self.cache, key)
        if cached:
            try:
                return schemas.PublicProfileRead.model_validate(cached)
            except ValueError as e:
                logger.error(f"[CACHE] Public profile {key} failed validation: {e}")

        profile = await self._load_profile(user_id)
        if not profile:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found.")

        response = schemas.PublicProfileRead.model_validate(profile)
        await cache_set_json(self.cache, key, response.model_dump(mode="json"))
        return response
