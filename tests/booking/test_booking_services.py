# tests/booking/test_booking_services.py
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from fastapi import HTTPException

from skillconnect.booking import schemas as booking_schemas
from skillconnect.booking.models import Application, Booking
from skillconnect.booking.services import BookingService, compose_job_notes, parse_job_notes
from skillconnect.core.dependencies import SessionContext
from skillconnect.database.enums import ApplicationStatus, BookingStatus, UserRole
from skillconnect.database.models import Profile
from skillconnect.discovery.schemas import JobFilterCriteria

# --- Helpers ---


def create_db_booking(
    client_id: UUID,
    provider_id: UUID | None = None,
    status: BookingStatus = BookingStatus.PENDING,
    stripe_session_id: str | None = None,
    notes: str | None = "Fix kitchen sink - Leaking under the counter",
) -> Booking:
    now = datetime.now(timezone.utc)
    return Booking(
        id=uuid4(),
        client_id=client_id,
        provider_id=provider_id,
        amount=80.0,
        currency="gel",
        status=status,
        stripe_session_id=stripe_session_id,
        notes=notes,
        job_type="plumber",
        created_at=now - timedelta(hours=1),
        updated_at=now,
    )


def create_db_application(booking_id: UUID, provider_id: UUID) -> Application:
    return Application(
        id=uuid4(),
        booking_id=booking_id,
        provider_id=provider_id,
        message="I would like to work on this job.",
        status=ApplicationStatus.PENDING,
        created_at=datetime.now(timezone.utc),
    )


def provider_session_for(user_id: UUID) -> SessionContext:
    return SessionContext(user_id=user_id, email=None, role=UserRole.PROVIDER, profile=None)


# --- Notes Encoding ---


def test_job_notes_round_trip() -> None:
    notes = compose_job_notes("Fix sink", "Leaking - badly")
    assert notes == "Fix sink - Leaking - badly"
    assert parse_job_notes(notes) == ("Fix sink", "Leaking - badly")


def test_job_notes_defaults() -> None:
    assert compose_job_notes("Fix sink", "  ") == "Fix sink"
    assert parse_job_notes("Fix sink") == ("Fix sink", "No description provided")
    assert parse_job_notes(None) == ("Job Posting", "No description provided")


# --- Open Job Posts ---


@pytest.mark.asyncio
async def test_post_open_job_has_no_provider_or_service(
    mock_db: AsyncMock, client_session: SessionContext
) -> None:
    data = booking_schemas.JobPostCreate(
        title="Fix kitchen sink", description="Leaking", amount=80, category="Plumber"
    )

    result = await BookingService(mock_db).post_open_job(client_session, data)

    booking = mock_db.add.call_args.args[0]
    assert booking.provider_id is None
    assert booking.service_id is None
    assert booking.stripe_session_id is None
    assert booking.status == BookingStatus.PENDING
    assert booking.job_type == "plumber"
    assert result.notes == "Fix kitchen sink - Leaking"
    assert result.client_id == client_session.user_id


@pytest.mark.asyncio
async def test_list_available_jobs_builds_listings_and_filters(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    provider_session: SessionContext,
    fake_client_profile: Profile,
) -> None:
    sink = create_db_booking(fake_client_profile.user_id)
    tutoring = create_db_booking(uuid4(), notes="Algebra lessons")
    tutoring.job_type = "math"
    mock_db.execute.return_value = db_result(rows=[(sink, fake_client_profile), (tutoring, None)])

    everything = await BookingService(mock_db).list_available_jobs(
        provider_session, JobFilterCriteria()
    )
    plumbing = await BookingService(mock_db).list_available_jobs(
        provider_session, JobFilterCriteria(category="handyman")
    )

    assert [j.title for j in everything] == ["Fix kitchen sink", "Algebra lessons"]
    assert everything[0].client_name == "Nino Client"
    assert everything[1].client_name == "Unknown Client"
    assert everything[1].description == "No description provided"
    assert [j.id for j in plumbing] == [sink.id]


@pytest.mark.asyncio
async def test_list_available_jobs_read_failure_is_empty(
    mock_db: AsyncMock, provider_session: SessionContext
) -> None:
    mock_db.execute.side_effect = RuntimeError("timeout")

    assert await BookingService(mock_db).list_available_jobs(
        provider_session, JobFilterCriteria()
    ) == []


# --- Applications ---


@pytest.mark.asyncio
async def test_apply_to_own_job_forbidden(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    provider_session: SessionContext,
) -> None:
    booking = create_db_booking(provider_session.user_id)
    mock_db.execute.return_value = db_result(first=booking)

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).apply_to_job(provider_session, booking.id, "me please")

    assert exc.value.status_code == 403
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_apply_to_missing_job_not_found(
    mock_db: AsyncMock, db_result: Callable[..., MagicMock], provider_session: SessionContext
) -> None:
    mock_db.execute.return_value = db_result(first=None)

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).apply_to_job(provider_session, uuid4(), "hello")

    assert exc.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, provider_id, stripe_session_id",
    [
        (BookingStatus.CONFIRMED, uuid4(), None),
        (BookingStatus.PENDING, uuid4(), None),
        (BookingStatus.CANCELLED, None, None),
        (BookingStatus.PENDING, None, "cs_test_123"),
    ],
)
async def test_apply_to_closed_job_rejected(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    provider_session: SessionContext,
    status: BookingStatus,
    provider_id: UUID | None,
    stripe_session_id: str | None,
) -> None:
    booking = create_db_booking(
        uuid4(), provider_id=provider_id, status=status, stripe_session_id=stripe_session_id
    )
    mock_db.execute.return_value = db_result(first=booking)

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).apply_to_job(provider_session, booking.id, "hello")

    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_two_providers_apply_and_booking_is_untouched(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    fake_client_profile: Profile,
) -> None:
    booking = create_db_booking(fake_client_profile.user_id)
    mock_db.execute.return_value = db_result(first=booking)
    first, second = provider_session_for(uuid4()), provider_session_for(uuid4())

    app_one = await BookingService(mock_db).apply_to_job(first, booking.id, "I can come today")
    app_two = await BookingService(mock_db).apply_to_job(second, booking.id, "Available tomorrow")

    assert mock_db.add.call_count == 2
    assert {app_one.provider_id, app_two.provider_id} == {first.user_id, second.user_id}
    assert app_one.status == app_two.status == ApplicationStatus.PENDING
    assert booking.provider_id is None
    assert booking.status == BookingStatus.PENDING


# --- Accept Application ---


@pytest.mark.asyncio
async def test_accept_application_assigns_provider(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    client_session: SessionContext,
) -> None:
    booking = create_db_booking(client_session.user_id)
    application = create_db_application(booking.id, uuid4())
    mock_db.execute.side_effect = [
        db_result(first=booking),
        db_result(first=application),
        db_result(scalar=booking.id),
        db_result(rowcount=1),
        db_result(rowcount=2),
    ]

    result = await BookingService(mock_db).accept_application(
        client_session, booking.id, application.id
    )

    assert result.rejected_count == 2
    assert result.booking.id == booking.id
    assert result.application.id == application.id
    assign_params = mock_db.execute.call_args_list[2].args[0].compile().params
    assert assign_params["provider_id"] == application.provider_id
    assert "status" not in assign_params
    mock_db.commit.assert_awaited_once()
    mock_db.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_accept_on_already_assigned_job_conflicts(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    client_session: SessionContext,
) -> None:
    booking = create_db_booking(client_session.user_id)
    application = create_db_application(booking.id, uuid4())
    # The guarded UPDATE matches nothing once another accept has won.
    mock_db.execute.side_effect = [
        db_result(first=booking),
        db_result(first=application),
        db_result(scalar=None),
    ]

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).accept_application(
            client_session, booking.id, application.id
        )

    assert exc.value.status_code == 409
    mock_db.rollback.assert_awaited_once()
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_accept_non_pending_application_conflicts(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    client_session: SessionContext,
) -> None:
    booking = create_db_booking(client_session.user_id)
    application = create_db_application(booking.id, uuid4())
    application.status = ApplicationStatus.REJECTED
    mock_db.execute.side_effect = [db_result(first=booking), db_result(first=application)]

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).accept_application(
            client_session, booking.id, application.id
        )

    assert exc.value.status_code == 409
    assert mock_db.execute.await_count == 2


@pytest.mark.asyncio
async def test_accept_on_foreign_job_not_found(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    client_session: SessionContext,
) -> None:
    mock_db.execute.return_value = db_result(first=None)

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).accept_application(client_session, uuid4(), uuid4())

    assert exc.value.status_code == 404


# --- Cancel / Complete ---


@pytest.mark.asyncio
async def test_cancel_assigned_job_conflicts(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    client_session: SessionContext,
) -> None:
    booking = create_db_booking(client_session.user_id, provider_id=uuid4())
    mock_db.execute.side_effect = [db_result(first=booking), db_result(scalar=None)]

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).cancel_job_post(client_session, booking.id)

    assert exc.value.status_code == 409
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_open_job(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    client_session: SessionContext,
) -> None:
    booking = create_db_booking(client_session.user_id)
    mock_db.execute.side_effect = [
        db_result(first=booking),
        db_result(scalar=booking.id),
        db_result(rowcount=3),
    ]

    await BookingService(mock_db).cancel_job_post(client_session, booking.id)

    assert mock_db.execute.await_count == 3
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_complete_by_other_provider_not_found(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    provider_session: SessionContext,
) -> None:
    booking = create_db_booking(uuid4(), provider_id=uuid4())
    mock_db.execute.return_value = db_result(first=booking)

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).complete_booking(provider_session, booking.id)

    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_complete_paid_booking_conflicts(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    provider_session: SessionContext,
) -> None:
    booking = create_db_booking(
        uuid4(),
        provider_id=provider_session.user_id,
        status=BookingStatus.CONFIRMED,
        stripe_session_id="cs_test_paid",
    )
    mock_db.execute.side_effect = [db_result(first=booking), db_result(scalar=None)]

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).complete_booking(provider_session, booking.id)

    assert exc.value.status_code == 409
    mock_db.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_complete_assigned_job(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    provider_session: SessionContext,
) -> None:
    booking = create_db_booking(uuid4(), provider_id=provider_session.user_id)
    mock_db.execute.side_effect = [db_result(first=booking), db_result(scalar=booking.id)]

    await BookingService(mock_db).complete_booking(provider_session, booking.id)

    complete_stmt = mock_db.execute.call_args_list[1].args[0]
    params = complete_stmt.compile().params
    assert params["status"] == BookingStatus.COMPLETED
    assert BookingStatus.PENDING in params.values()
    assert BookingStatus.CONFIRMED not in params.values()
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_complete_confirmed_booking_conflicts(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    provider_session: SessionContext,
) -> None:
    booking = create_db_booking(
        uuid4(), provider_id=provider_session.user_id, status=BookingStatus.CONFIRMED
    )
    mock_db.execute.side_effect = [db_result(first=booking), db_result(scalar=None)]

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).complete_booking(provider_session, booking.id)

    assert exc.value.status_code == 409
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_booking_of_non_participant_not_found(
    mock_db: AsyncMock,
    db_result: Callable[..., MagicMock],
    client_session: SessionContext,
) -> None:
    mock_db.execute.return_value = db_result(first=None)
    outsider = replace(client_session, user_id=uuid4())

    with pytest.raises(HTTPException) as exc:
        await BookingService(mock_db).get_booking(outsider, uuid4())

    assert exc.value.status_code == 404
