"""
skillconnect/booking/services.py

Booking Service Layer
Handles the booking lifecycle outside of payment:
- Clients post open jobs (bookings with no provider and no service)
- Providers browse open jobs and apply to them
- Clients review applications and accept one, which assigns the provider
- Clients withdraw open posts; assigned providers mark work completed
- Participants list and read their bookings

Status changes are conditional UPDATEs guarded on the expected current state,
and every one of them excludes payment-tracked bookings (non-null
stripe_session_id); those only move pending -> confirmed through payment
verification.
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import ColumnElement, and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillconnect.booking import schemas
from skillconnect.booking.models import Application, Booking
from skillconnect.core.config import settings
from skillconnect.core.dependencies import SessionContext
from skillconnect.database.enums import ApplicationStatus, BookingStatus
from skillconnect.database.models import Profile
from skillconnect.discovery.filters import DISTANCE_PLACEHOLDER_KM, filter_jobs
from skillconnect.discovery.schemas import JobFilterCriteria, JobListing

logger = logging.getLogger(__name__)

NOTES_SEPARATOR = " - "


# ---------------------------------------------------
# Notes Encoding
# ---------------------------------------------------
def compose_job_notes(title: str, description: str) -> str:
    """Open job posts keep title and description in `notes` as '<title> - <description>'."""
    description = description.strip()
    return f"{title.strip()}{NOTES_SEPARATOR}{description}" if description else title.strip()


def parse_job_notes(notes: str | None) -> tuple[str, str]:
    title, _, description = (notes or "").partition(NOTES_SEPARATOR)
    return title or "Job Posting", description or "No description provided"


def _open_job_clause() -> ColumnElement[bool]:
    return and_(
        Booking.provider_id.is_(None),
        Booking.stripe_session_id.is_(None),
        Booking.status == BookingStatus.PENDING,
    )


def _participant_clause(user_id: UUID) -> ColumnElement[bool]:
    return or_(Booking.client_id == user_id, Booking.provider_id == user_id)


class BookingService:
    """Open job posts, applications, assignment and completion."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_booking(self, booking_id: UUID) -> Booking:
        booking = (
            (await self.db.execute(select(Booking).where(Booking.id == booking_id)))
            .scalars()
            .first()
        )
        if not booking:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found.")
        return booking

    async def _get_client_booking(self, client_id: UUID, booking_id: UUID) -> Booking:
        stmt = select(Booking).where(Booking.id == booking_id, Booking.client_id == client_id)
        booking = (await self.db.execute(stmt)).scalars().first()
        if not booking:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Job post not found or unauthorized."
            )
        return booking

    # ---------------------------------------------------
    # Open Job Posts (client)
    # ---------------------------------------------------
    async def post_open_job(
        self, session: SessionContext, data: schemas.JobPostCreate
    ) -> schemas.BookingRead:
        logger.info(f"[BOOKING] Client {session.user_id} posting open job '{data.title}'")
        booking = Booking(
            client_id=session.user_id,
            provider_id=None,
            service_id=None,
            amount=data.amount,
            currency=settings.DEFAULT_CURRENCY,
            status=BookingStatus.PENDING,
            booking_date=data.booking_date,
            notes=compose_job_notes(data.title, data.description),
            job_type=data.category,
            duration_minutes=data.duration_minutes,
        )
        self.db.add(booking)
        try:
            await self.db.commit()
            await self.db.refresh(booking)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[BOOKING ERROR] Failed to post job: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to post job.")
        return schemas.BookingRead.model_validate(booking)

    async def list_my_job_posts(
        self, session: SessionContext, skip: int = 0, limit: int = 50
    ) -> tuple[list[schemas.BookingRead], int]:
        """Jobs the client posted (any status), newest first."""
        filters = [
            Booking.client_id == session.user_id,
            Booking.service_id.is_(None),
            Booking.stripe_session_id.is_(None),
        ]
        total = (
            await self.db.execute(select(func.count(Booking.id)).where(*filters))
        ).scalar_one()
        stmt = (
            select(Booking)
            .where(*filters)
            .order_by(Booking.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [schemas.BookingRead.model_validate(b) for b in rows], total

    async def cancel_job_post(self, session: SessionContext, booking_id: UUID) -> schemas.BookingRead:
        """Withdraw an open job post. Assigned or paid bookings cannot be cancelled here."""
        booking = await self._get_client_booking(session.user_id, booking_id)
        stmt = (
            update(Booking)
            .where(Booking.id == booking_id, Booking.client_id == session.user_id, _open_job_clause())
            .values(status=BookingStatus.CANCELLED)
            .returning(Booking.id)
        )
        try:
            if (await self.db.execute(stmt)).scalar_one_or_none() is None:
                await self.db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Only open job posts can be cancelled.",
                )
            await self.db.execute(
                update(Application)
                .where(
                    Application.booking_id == booking_id,
                    Application.status == ApplicationStatus.PENDING,
                )
                .values(status=ApplicationStatus.REJECTED)
            )
            await self.db.commit()
            await self.db.refresh(booking)
        except HTTPException:
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[BOOKING ERROR] Failed to cancel job {booking_id}: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to cancel job post.")

        logger.info(f"[BOOKING] Job post {booking_id} cancelled by client {session.user_id}")
        return schemas.BookingRead.model_validate(booking)

    # ---------------------------------------------------
    # Available Jobs & Applications (provider)
    # ---------------------------------------------------
    async def list_available_jobs(
        self, session: SessionContext, criteria: JobFilterCriteria
    ) -> list[JobListing]:
        """
        Open job posts from other identities, newest first, with the caller's
        filters applied. A failed read yields an empty list.
        """
        stmt = (
            select(Booking, Profile)
            .outerjoin(Profile, Profile.user_id == Booking.client_id)
            .where(_open_job_clause(), Booking.client_id != session.user_id)
            .order_by(Booking.created_at.desc())
            .limit(settings.DISCOVERY_SCAN_LIMIT)
        )
        try:
            rows = (await self.db.execute(stmt)).all()
        except Exception as e:
            logger.error(f"[BOOKING] Failed to load available jobs: {e}", exc_info=True)
            return []

        listings = []
        for booking, client in rows:
            title, description = parse_job_notes(booking.notes)
            listings.append(
                JobListing(
                    id=booking.id,
                    client_id=booking.client_id,
                    client_name=(client.full_name if client else None) or "Unknown Client",
                    title=title,
                    description=description,
                    category=booking.job_type,
                    amount=booking.amount,
                    currency=booking.currency,
                    booking_date=booking.booking_date,
                    duration_minutes=booking.duration_minutes,
                    distance_km=DISTANCE_PLACEHOLDER_KM,
                    location=client.location if client else None,
                    latitude=client.latitude if client else None,
                    longitude=client.longitude if client else None,
                    created_at=booking.created_at,
                )
            )
        return filter_jobs(listings, criteria)

    async def apply_to_job(
        self, session: SessionContext, booking_id: UUID, message: str
    ) -> schemas.ApplicationRead:
        """
        Record interest in an open job post. The booking itself is not touched;
        repeated applications by the same provider are all kept.
        """
        booking = await self._get_booking(booking_id)
        if booking.client_id == session.user_id:
            logger.warning(f"[BOOKING] Identity {session.user_id} tried to apply to own job {booking_id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="You cannot apply to your own job."
            )
        if not booking.is_open_job_post:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This job is no longer accepting applications.",
            )

        application = Application(
            booking_id=booking_id,
            provider_id=session.user_id,
            message=message,
            status=ApplicationStatus.PENDING,
        )
        self.db.add(application)
        try:
            await self.db.commit()
            await self.db.refresh(application)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[BOOKING ERROR] Failed to create application: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to apply to job.")

        logger.info(f"[BOOKING] Provider {session.user_id} applied to job {booking_id}")
        return schemas.ApplicationRead.model_validate(application)

    async def list_applications(
        self, session: SessionContext, booking_id: UUID
    ) -> list[schemas.ApplicationRead]:
        await self._get_client_booking(session.user_id, booking_id)
        stmt = (
            select(Application)
            .where(Application.booking_id == booking_id)
            .order_by(Application.created_at.asc())
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [schemas.ApplicationRead.model_validate(a) for a in rows]

    async def accept_application(
        self, session: SessionContext, booking_id: UUID, application_id: UUID
    ) -> schemas.AcceptApplicationResult:
        """
        Assign the applicant to the job in one transaction: the booking gets the
        provider while its status stays pending, the chosen application is
        accepted and every other pending application on the job is rejected.
        The booking update only matches while the post is still open, so a
        second accept (or a cancel) racing this one gets 409.
        """
        booking = await self._get_client_booking(session.user_id, booking_id)

        stmt = select(Application).where(
            Application.id == application_id, Application.booking_id == booking_id
        )
        application = (await self.db.execute(stmt)).scalars().first()
        if not application:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found.")
        if application.status != ApplicationStatus.PENDING:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Application is already {application.status.value}.",
            )

        assign = (
            update(Booking)
            .where(Booking.id == booking_id, _open_job_clause())
            .values(provider_id=application.provider_id)
            .returning(Booking.id)
        )
        try:
            if (await self.db.execute(assign)).scalar_one_or_none() is None:
                await self.db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="This job has already been assigned or closed.",
                )
            await self.db.execute(
                update(Application)
                .where(Application.id == application_id)
                .values(status=ApplicationStatus.ACCEPTED)
            )
            rejected = await self.db.execute(
                update(Application)
                .where(
                    Application.booking_id == booking_id,
                    Application.id != application_id,
                    Application.status == ApplicationStatus.PENDING,
                )
                .values(status=ApplicationStatus.REJECTED)
            )
            await self.db.commit()
            await self.db.refresh(booking)
            await self.db.refresh(application)
        except HTTPException:
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                f"[BOOKING ERROR] Failed to accept application {application_id}: {e}", exc_info=True
            )
            raise HTTPException(status_code=500, detail="Failed to accept application.")

        rejected_count = rejected.rowcount or 0
        logger.info(
            f"[BOOKING] Job {booking_id} assigned to provider {application.provider_id} "
            f"({rejected_count} competing applications rejected)"
        )
        return schemas.AcceptApplicationResult(
            booking=schemas.BookingRead.model_validate(booking),
            application=schemas.ApplicationRead.model_validate(application),
            rejected_count=rejected_count,
        )

    async def complete_booking(
        self, session: SessionContext, booking_id: UUID
    ) -> schemas.BookingRead:
        """Assigned provider marks an unpaid job assignment done."""
        booking = await self._get_booking(booking_id)
        if booking.provider_id != session.user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found or unauthorized."
            )

        stmt = (
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.provider_id == session.user_id,
                Booking.stripe_session_id.is_(None),
                Booking.status == BookingStatus.PENDING,
            )
            .values(status=BookingStatus.COMPLETED)
            .returning(Booking.id)
        )
        try:
            if (await self.db.execute(stmt)).scalar_one_or_none() is None:
                await self.db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Only pending job assignments can be completed.",
                )
            await self.db.commit()
            await self.db.refresh(booking)
        except HTTPException:
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[BOOKING ERROR] Failed to complete booking {booking_id}: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to complete booking.")

        logger.info(f"[BOOKING] Booking {booking_id} completed by provider {session.user_id}")
        return schemas.BookingRead.model_validate(booking)

    # ---------------------------------------------------
    # Participant Reads
    # ---------------------------------------------------
    async def list_my_bookings(
        self,
        session: SessionContext,
        status_filter: BookingStatus | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[schemas.BookingRead], int]:
        filters: list[ColumnElement[bool]] = [_participant_clause(session.user_id)]
        if status_filter is not None:
            filters.append(Booking.status == status_filter)

        total = (
            await self.db.execute(select(func.count(Booking.id)).where(*filters))
        ).scalar_one()
        stmt = (
            select(Booking)
            .where(*filters)
            .order_by(Booking.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [schemas.BookingRead.model_validate(b) for b in rows], total

    async def get_booking(self, session: SessionContext, booking_id: UUID) -> schemas.BookingRead:
        stmt = select(Booking).where(Booking.id == booking_id, _participant_clause(session.user_id))
        booking = (await self.db.execute(stmt)).scalars().first()
        if not booking:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found.")
        return schemas.BookingRead.model_validate(booking)
