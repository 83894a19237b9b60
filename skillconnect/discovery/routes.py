"""
skillconnect/discovery/routes.py

Discovery Routes
- Category taxonomy for pickers
- Filtered provider directory (list and map markers)
- Map markers for open jobs (providers)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.booking.services import BookingService
from skillconnect.core.dependencies import ProviderDep, SessionDep
from skillconnect.core.limiter import limiter
from skillconnect.database.session import get_db
from skillconnect.discovery import schemas
from skillconnect.discovery.categories import CATEGORIES, Category
from skillconnect.discovery.filters import map_markers
from skillconnect.discovery.services import DiscoveryService

router = APIRouter(prefix="/discovery", tags=["Discovery"])

DBDep = Annotated[AsyncSession, Depends(get_db)]


def _category_read(category: Category) -> schemas.CategoryRead:
    return schemas.CategoryRead(
        key=category.key,
        label=category.label,
        subcategories=[_category_read(sub) for sub in category.subcategories],
    )


@router.get(
    "/categories",
    response_model=list[schemas.CategoryRead],
    status_code=status.HTTP_200_OK,
    summary="List Categories",
    description="Service category taxonomy (parents with their subcategories).",
)
@limiter.limit("60/minute")
async def list_categories(request: Request) -> list[schemas.CategoryRead]:
    return [_category_read(c) for c in CATEGORIES]


@router.get(
    "/providers",
    response_model=list[schemas.ProviderListing],
    status_code=status.HTTP_200_OK,
    summary="Search Providers",
    description=(
        "Providers with their active services, filtered by text, category (parents include "
        "subcategories), rate range, minimum rating and distance. All filters are combined."
    ),
)
@limiter.limit("30/minute")
async def search_providers(
    request: Request,
    db: DBDep,
    session: SessionDep,
    criteria: Annotated[schemas.ProviderFilterCriteria, Query()],
) -> list[schemas.ProviderListing]:
    return await DiscoveryService(db).search_providers(criteria)


@router.get(
    "/providers/map",
    response_model=list[schemas.MapMarker],
    status_code=status.HTTP_200_OK,
    summary="Provider Map Markers",
    description="Marker descriptors for matching providers that have coordinates.",
)
@limiter.limit("30/minute")
async def provider_markers(
    request: Request,
    db: DBDep,
    session: SessionDep,
    criteria: Annotated[schemas.ProviderFilterCriteria, Query()],
) -> list[schemas.MapMarker]:
    return map_markers(await DiscoveryService(db).search_providers(criteria))


@router.get(
    "/jobs/map",
    response_model=list[schemas.MapMarker],
    status_code=status.HTTP_200_OK,
    summary="Job Map Markers",
    description="Marker descriptors for open jobs whose client has coordinates.",
)
@limiter.limit("30/minute")
async def job_markers(
    request: Request,
    db: DBDep,
    current_user: ProviderDep,
    criteria: Annotated[schemas.JobFilterCriteria, Query()],
) -> list[schemas.MapMarker]:
    return map_markers(await BookingService(db).list_available_jobs(current_user, criteria))
