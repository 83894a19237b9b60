"""
skillconnect/profile/routes.py

Profile Routes
- Get (or lazily create) the caller's own profile
- One-time role assignment during onboarding
- Update the caller's profile
- View another identity's public profile
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core.dependencies import SessionDep
from skillconnect.core.limiter import limiter
from skillconnect.database.session import get_db
from skillconnect.profile import schemas
from skillconnect.profile.services import ProfileService

router = APIRouter(prefix="/profiles", tags=["Profiles"])

DBDep = Annotated[AsyncSession, Depends(get_db)]


# ---------------------------------------------------
# Own Profile
# ---------------------------------------------------
@router.get(
    "/me",
    response_model=schemas.ProfileRead,
    status_code=status.HTTP_200_OK,
    summary="Get My Profile",
    description="Return the caller's profile, creating an empty one on first visit.",
)
@limiter.limit("30/minute")
async def get_my_profile(
    request: Request, db: DBDep, session: SessionDep
) -> schemas.ProfileRead:
    return await ProfileService(db).get_my_profile(session)


@router.post(
    "/me/role",
    response_model=schemas.ProfileRead,
    status_code=status.HTTP_200_OK,
    summary="Assign Role",
    description="Choose client or provider. The role can be assigned only once.",
)
@limiter.limit("5/minute")
async def assign_role(
    request: Request,
    data: schemas.RoleAssign,
    db: DBDep,
    session: SessionDep,
) -> schemas.ProfileRead:
    return await ProfileService(db).assign_role(session, data.role)


@router.patch(
    "/me",
    response_model=schemas.ProfileRead,
    status_code=status.HTTP_200_OK,
    summary="Update My Profile",
    description="Partially update the caller's profile. Skills are accepted for providers only.",
)
@limiter.limit("10/minute")
async def update_my_profile(
    request: Request,
    data: schemas.ProfileUpdate,
    db: DBDep,
    session: SessionDep,
) -> schemas.ProfileRead:
    return await ProfileService(db).update_my_profile(session, data)


# ---------------------------------------------------
# Public Profile
# ---------------------------------------------------
@router.get(
    "/{user_id}",
    response_model=schemas.PublicProfileRead,
    status_code=status.HTTP_200_OK,
    summary="Get Public Profile",
    description="Read-only view of another identity's profile.",
)
@limiter.limit("30/minute")
async def get_public_profile(
    request: Request,
    user_id: UUID,
    db: DBDep,
    session: SessionDep,
) -> schemas.PublicProfileRead:
    return await ProfileService(db).get_public_profile(user_id)
