"""
skillconnect/service/routes.py

Service Routes
Defines API routes for managing provider service listings:
- Create, update, delete and activate/deactivate services (provider only)
- View the authenticated provider's services
- Public service detail retrieval
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.core.dependencies import PaginationParams, ProviderDep, SessionDep
from skillconnect.core.limiter import limiter
from skillconnect.core.schemas import MessageResponse, PaginatedResponse
from skillconnect.database.session import get_db
from skillconnect.service import schemas
from skillconnect.service.schemas import ServiceRead
from skillconnect.service.services import ServiceListingService

router = APIRouter(prefix="/services", tags=["Services"])

DBDep = Annotated[AsyncSession, Depends(get_db)]


# ----------------------------------------------------
# Provider Service Endpoints
# ----------------------------------------------------
@router.get(
    "/my",
    response_model=PaginatedResponse[ServiceRead],
    status_code=status.HTTP_200_OK,
    summary="List My Services",
    description="List all services (active and inactive) created by the authenticated provider.",
)
@limiter.limit("20/minute")
async def list_my_services(
    request: Request,
    db: DBDep,
    current_user: ProviderDep,
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[ServiceRead]:
    services_list, total_count = await ServiceListingService(db).get_my_services(
        current_user.user_id, skip=pagination.skip, limit=pagination.limit
    )
    return PaginatedResponse[ServiceRead].from_page(
        services_list, total_count, pagination.skip, pagination.limit
    )


@router.post(
    "",
    response_model=ServiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create New Service",
    description="Create a new, active service listing (provider only).",
)
@limiter.limit("10/minute")
async def create_service(
    request: Request,
    data: schemas.ServiceCreate,
    db: DBDep,
    current_user: ProviderDep,
) -> ServiceRead:
    return await ServiceListingService(db).create_service(current_user.user_id, data)


@router.put(
    "/{service_id}",
    response_model=ServiceRead,
    status_code=status.HTTP_200_OK,
    summary="Update Service",
    description="Update one of the authenticated provider's services.",
)
@limiter.limit("10/minute")
async def update_service(
    request: Request,
    service_id: UUID,
    data: schemas.ServiceUpdate,
    db: DBDep,
    current_user: ProviderDep,
) -> ServiceRead:
    return await ServiceListingService(db).update_service(current_user.user_id, service_id, data)


@router.patch(
    "/{service_id}/active",
    response_model=ServiceRead,
    status_code=status.HTTP_200_OK,
    summary="Activate or Deactivate Service",
    description="Inactive services are hidden from discovery and cannot be booked.",
)
@limiter.limit("10/minute")
async def set_service_active(
    request: Request,
    service_id: UUID,
    data: schemas.ServiceActiveUpdate,
    db: DBDep,
    current_user: ProviderDep,
) -> ServiceRead:
    return await ServiceListingService(db).set_service_active(
        current_user.user_id, service_id, data.is_active
    )


@router.delete(
    "/{service_id}",
    status_code=status.HTTP_200_OK,
    response_model=MessageResponse,
    summary="Delete Service",
    description="Permanently delete one of the authenticated provider's services.",
)
@limiter.limit("5/minute")
async def delete_service(
    request: Request,
    service_id: UUID,
    db: DBDep,
    current_user: ProviderDep,
) -> MessageResponse:
    await ServiceListingService(db).delete_service(current_user.user_id, service_id)
    return MessageResponse(detail="Service deleted successfully")


# ----------------------------------------------------
# Public Service Endpoints
# ----------------------------------------------------
@router.get(
    "/{service_id}",
    response_model=ServiceRead,
    status_code=status.HTTP_200_OK,
    summary="Get Service Detail",
    description="Retrieve an active service listing.",
)
@limiter.limit("30/minute")
async def get_public_service_detail(
    request: Request,
    service_id: UUID,
    db: DBDep,
    session: SessionDep,
) -> ServiceRead:
    return await ServiceListingService(db).get_public_service_detail(service_id)
