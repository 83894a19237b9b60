"""
skillconnect/booking/routes.py

Booking Routes
- Clients: post open jobs, list their posts, review/accept applications, cancel posts
- Providers: browse available jobs, apply, mark assigned jobs completed
- Participants: list and read their bookings
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.booking import schemas
from skillconnect.booking.services import BookingService
from skillconnect.core.dependencies import ClientDep, PaginationParams, ProviderDep, SessionDep
from skillconnect.core.limiter import limiter
from skillconnect.core.schemas import PaginatedResponse
from skillconnect.database.enums import BookingStatus
from skillconnect.database.session import get_db
from skillconnect.discovery.schemas import JobFilterCriteria, JobListing

router = APIRouter(prefix="/bookings", tags=["Bookings"])

DBDep = Annotated[AsyncSession, Depends(get_db)]


# ---------------------------------------------------
# Open Job Posts (client)
# ---------------------------------------------------
@router.post(
    "/jobs",
    response_model=schemas.BookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Post Open Job",
    description="Client posts a job with no provider or service attached.",
)
@limiter.limit("10/minute")
async def post_open_job(
    request: Request,
    data: schemas.JobPostCreate,
    db: DBDep,
    current_user: ClientDep,
) -> schemas.BookingRead:
    return await BookingService(db).post_open_job(current_user, data)


@router.get(
    "/jobs/mine",
    response_model=PaginatedResponse[schemas.BookingRead],
    status_code=status.HTTP_200_OK,
    summary="List My Job Posts",
)
@limiter.limit("20/minute")
async def list_my_job_posts(
    request: Request,
    db: DBDep,
    current_user: ClientDep,
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[schemas.BookingRead]:
    items, total = await BookingService(db).list_my_job_posts(
        current_user, skip=pagination.skip, limit=pagination.limit
    )
    return PaginatedResponse[schemas.BookingRead].from_page(
        items, total, pagination.skip, pagination.limit
    )


@router.get(
    "/jobs/available",
    response_model=list[JobListing],
    status_code=status.HTTP_200_OK,
    summary="List Available Jobs",
    description="Open job posts from other clients, newest first, filtered by the query.",
)
@limiter.limit("30/minute")
async def list_available_jobs(
    request: Request,
    db: DBDep,
    current_user: ProviderDep,
    criteria: Annotated[JobFilterCriteria, Query()],
) -> list[JobListing]:
    return await BookingService(db).list_available_jobs(current_user, criteria)


@router.post(
    "/jobs/{booking_id}/cancel",
    response_model=schemas.BookingRead,
    status_code=status.HTTP_200_OK,
    summary="Cancel Job Post",
    description="Withdraw an open job post. Pending applications are rejected.",
)
@limiter.limit("10/minute")
async def cancel_job_post(
    request: Request,
    booking_id: UUID,
    db: DBDep,
    current_user: ClientDep,
) -> schemas.BookingRead:
    return await BookingService(db).cancel_job_post(current_user, booking_id)


# ---------------------------------------------------
# Applications
# ---------------------------------------------------
@router.post(
    "/jobs/{booking_id}/applications",
    response_model=schemas.ApplicationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Apply To Job",
    description="Provider expresses interest in an open job post.",
)
@limiter.limit("10/minute")
async def apply_to_job(
    request: Request,
    booking_id: UUID,
    data: schemas.ApplicationCreate,
    db: DBDep,
    current_user: ProviderDep,
) -> schemas.ApplicationRead:
    return await BookingService(db).apply_to_job(current_user, booking_id, data.message)


@router.get(
    "/jobs/{booking_id}/applications",
    response_model=list[schemas.ApplicationRead],
    status_code=status.HTTP_200_OK,
    summary="List Applications",
    description="Applications received on one of the client's job posts.",
)
@limiter.limit("20/minute")
async def list_applications(
    request: Request,
    booking_id: UUID,
    db: DBDep,
    current_user: ClientDep,
) -> list[schemas.ApplicationRead]:
    return await BookingService(db).list_applications(current_user, booking_id)


@router.post(
    "/jobs/{booking_id}/applications/{application_id}/accept",
    response_model=schemas.AcceptApplicationResult,
    status_code=status.HTTP_200_OK,
    summary="Accept Application",
    description="Assign the applicant to the job and reject the competing applications.",
)
@limiter.limit("10/minute")
async def accept_application(
    request: Request,
    booking_id: UUID,
    application_id: UUID,
    db: DBDep,
    current_user: ClientDep,
) -> schemas.AcceptApplicationResult:
    return await BookingService(db).accept_application(current_user, booking_id, application_id)


# ---------------------------------------------------
# Participant Endpoints
# ---------------------------------------------------
@router.get(
    "",
    response_model=PaginatedResponse[schemas.BookingRead],
    status_code=status.HTTP_200_OK,
    summary="List My Bookings",
    description="Bookings where the caller is the client or the assigned provider.",
)
@limiter.limit("30/minute")
async def list_my_bookings(
    request: Request,
    db: DBDep,
    current_user: SessionDep,
    booking_status: BookingStatus | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[schemas.BookingRead]:
    items, total = await BookingService(db).list_my_bookings(
        current_user, status_filter=booking_status, skip=pagination.skip, limit=pagination.limit
    )
    return PaginatedResponse[schemas.BookingRead].from_page(
        items, total, pagination.skip, pagination.limit
    )


@router.get(
    "/{booking_id}",
    response_model=schemas.BookingRead,
    status_code=status.HTTP_200_OK,
    summary="Get Booking",
)
@limiter.limit("30/minute")
async def get_booking(
    request: Request,
    booking_id: UUID,
    db: DBDep,
    current_user: SessionDep,
) -> schemas.BookingRead:
    return await BookingService(db).get_booking(current_user, booking_id)


@router.post(
    "/{booking_id}/complete",
    response_model=schemas.BookingRead,
    status_code=status.HTTP_200_OK,
    summary="Complete Booking",
    description="Assigned provider marks a pending job assignment as completed.",
)
@limiter.limit("10/minute")
async def complete_booking(
    request: Request,
    booking_id: UUID,
    db: DBDep,
    current_user: ProviderDep,
) -> schemas.BookingRead:
    return await BookingService(db).complete_booking(current_user, booking_id)
