"""BookingRepository against SQLite: uniqueness, counting and status sweeps."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from thrive.core.timezone_utils import utc_now
from thrive.core.ulid_helper import generate_ulid
from thrive.models.booking import BookingStatus
from thrive.models.session import SessionType
from thrive.repositories.booking_repository import BookingRepository


def test_second_confirmed_booking_for_same_session_is_rejected(db, make_session, user_id):
    live_session = make_session()
    repo = BookingRepository(db)
    repo.create(user_id=user_id, session_id=live_session.id, status=BookingStatus.CONFIRMED.value)
    db.commit()

    with pytest.raises(IntegrityError):
        repo.create(
            user_id=user_id, session_id=live_session.id, status=BookingStatus.CONFIRMED.value
        )


def test_rebooking_after_cancellation_is_allowed(db, make_session, make_booking, user_id):
    live_session = make_session()
    make_booking(user_id, live_session, status=BookingStatus.CANCELLED)

    booking = BookingRepository(db).create(
        user_id=user_id, session_id=live_session.id, status=BookingStatus.CONFIRMED.value
    )
    db.commit()

    assert booking.id is not None


def test_find_active_excludes_cancelled_and_ended(db, make_session, make_booking, user_id):
    upcoming = make_session()
    ended = make_session(scheduled_at=utc_now() - timedelta(hours=3))
    cancelled = make_session()
    kept = make_booking(user_id, upcoming)
    make_booking(user_id, ended)
    make_booking(user_id, cancelled, status=BookingStatus.CANCELLED)
    make_booking(generate_ulid(), upcoming)

    active = BookingRepository(db).find_active_by_user_id(user_id)

    assert [booking.id for booking in active] == [kept.id]


def test_session_in_progress_still_counts_as_active(db, make_session, make_booking, user_id):
    in_progress = make_session(scheduled_at=utc_now() - timedelta(minutes=10), duration=60)
    make_booking(user_id, in_progress)

    assert len(BookingRepository(db).find_active_by_user_id(user_id)) == 1


def test_non_cancelled_history_count(db, make_session, make_booking, user_id):
    make_booking(user_id, make_session(), status=BookingStatus.COMPLETED)
    make_booking(user_id, make_session(), status=BookingStatus.CONFIRMED)
    make_booking(user_id, make_session(), status=BookingStatus.CANCELLED)

    assert BookingRepository(db).count_non_cancelled_by_user_id(user_id) == 2


def test_monthly_count_only_includes_standard_sessions_in_month(
    db, make_session, make_booking, user_id, next_month_start
):
    in_month = next_month_start + timedelta(days=3)
    make_booking(user_id, make_session(scheduled_at=in_month))
    make_booking(user_id, make_session(scheduled_at=in_month + timedelta(days=1)))
    make_booking(
        user_id, make_session(scheduled_at=in_month, session_type=SessionType.PREMIUM)
    )
    make_booking(
        user_id, make_session(scheduled_at=in_month), status=BookingStatus.CANCELLED
    )
    make_booking(user_id, make_session(scheduled_at=next_month_start - timedelta(hours=1)))
    make_booking(user_id, make_session(scheduled_at=next_month_start + timedelta(days=40)))

    count = BookingRepository(db).count_monthly_standard_session_bookings(
        user_id, next_month_start.year, next_month_start.month
    )

    assert count == 2


def test_find_by_user_id_is_newest_first(db, make_session, make_booking, user_id):
    now = utc_now()
    older = make_booking(user_id, make_session(), created_at=now - timedelta(days=2))
    newer = make_booking(user_id, make_session(), created_at=now - timedelta(days=1))

    bookings = BookingRepository(db).find_by_user_id(user_id)

    assert [booking.id for booking in bookings] == [newer.id, older.id]


def test_cancel_only_moves_confirmed_bookings(db, make_session, make_booking, user_id):
    booking = make_booking(user_id, make_session())
    repo = BookingRepository(db)

    assert repo.cancel(booking.id) is True
    assert repo.cancel(booking.id) is False
    db.commit()

    db.refresh(booking)
    assert booking.status == BookingStatus.CANCELLED.value
    assert booking.cancelled_at is not None


def test_mark_past_bookings_completed(db, make_session, make_booking, user_id):
    ended = make_booking(user_id, make_session(scheduled_at=utc_now() - timedelta(hours=5)))
    upcoming = make_booking(user_id, make_session())
    cancelled = make_booking(
        user_id,
        make_session(scheduled_at=utc_now() - timedelta(hours=5)),
        status=BookingStatus.CANCELLED,
    )
    repo = BookingRepository(db)

    assert repo.mark_past_bookings_completed() == 1
    db.commit()

    for booking in (ended, upcoming, cancelled):
        db.refresh(booking)
    assert ended.status == BookingStatus.COMPLETED.value
    assert ended.completed_at is not None
    assert upcoming.status == BookingStatus.CONFIRMED.value
    assert cancelled.status == BookingStatus.CANCELLED.value


def test_find_by_session_id_returns_every_attendee(db, make_session, make_booking):
    live_session = make_session()
    attendees = {generate_ulid() for _ in range(3)}
    for attendee in attendees:
        make_booking(attendee, live_session)
    make_booking(generate_ulid(), make_session())

    bookings = BookingRepository(db).find_by_session_id(live_session.id)

    assert {booking.user_id for booking in bookings} == attendees
