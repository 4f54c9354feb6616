# backend/thrive/repositories/booking_repository.py
"""
Booking Repository

Implements all data access operations for bookings:
- Booking creation (duplicate CONFIRMED bookings rejected by the database)
- User history and active-booking queries
- Monthly counting used by plan limits
- Status transitions (cancel, completion sweep)
"""

from datetime import datetime
import logging
from typing import Any, List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import ensure_utc, month_bounds, utc_now
from ..models.booking import Booking, BookingStatus
from ..models.session import LiveSession, SessionType
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def create(self, **kwargs: Any) -> Booking:
        """Create a booking, exposing integrity errors for conflict handling."""
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise exc.__cause__
            raise

    def find_by_id(self, booking_id: str) -> Optional[Booking]:
        return self.get_by_id(booking_id)

    def find_by_user_id(self, user_id: str) -> List[Booking]:
        """All bookings for a user in any status, newest first."""
        query = (
            self._build_query()
            .filter(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return self._execute_query(query)

    def find_by_session_id(self, session_id: str) -> List[Booking]:
        return self.find_by(session_id=session_id)

    def find_active_by_user_id(self, user_id: str, now: Optional[datetime] = None) -> List[Booking]:
        """
        CONFIRMED bookings whose session has not ended yet.

        Session end depends on a per-row duration, so the end-time filter is
        applied after loading; a user only ever holds a handful of confirmed
        bookings.
        """
        now = ensure_utc(now) if now else utc_now()
        query = (
            self._build_query()
            .join(LiveSession, LiveSession.id == Booking.session_id)
            .filter(
                Booking.user_id == user_id,
                Booking.status == BookingStatus.CONFIRMED.value,
            )
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return [booking for booking in self._execute_query(query) if booking.session.ends_at > now]

    def find_upcoming_by_user_id(
        self, user_id: str, now: Optional[datetime] = None
    ) -> List[Booking]:
        """CONFIRMED bookings whose session has not ended, soonest session first."""
        now = ensure_utc(now) if now else utc_now()
        query = (
            self._build_query()
            .join(LiveSession, LiveSession.id == Booking.session_id)
            .filter(
                Booking.user_id == user_id,
                Booking.status == BookingStatus.CONFIRMED.value,
            )
            .order_by(LiveSession.scheduled_at.asc(), Booking.id.asc())
        )
        return [booking for booking in self._execute_query(query) if booking.session.ends_at > now]

    def find_confirmed_by_session_id(self, session_id: str) -> List[Booking]:
        return [booking for booking in self.find_by_session_id(session_id) if booking.is_confirmed]

    def count_non_cancelled_by_user_id(self, user_id: str) -> int:
        """Lifetime booking count excluding cancellations (trial allowance)."""
        query = self.db.query(func.count(Booking.id)).filter(
            Booking.user_id == user_id,
            Booking.status != BookingStatus.CANCELLED.value,
        )
        return int(self._execute_scalar(query) or 0)

    def count_monthly_standard_session_bookings(self, user_id: str, year: int, month: int) -> int:
        """
        Count a user's non-cancelled bookings of STANDARD sessions scheduled
        within the given UTC calendar month.
        """
        start, end = month_bounds(year, month)
        query = (
            self.db.query(func.count(Booking.id))
            .join(LiveSession, LiveSession.id == Booking.session_id)
            .filter(
                Booking.user_id == user_id,
                Booking.status != BookingStatus.CANCELLED.value,
                LiveSession.type == SessionType.STANDARD.value,
                LiveSession.scheduled_at >= start,
                LiveSession.scheduled_at < end,
            )
        )
        return int(self._execute_scalar(query) or 0)

    def cancel(self, booking_id: str, cancelled_at: Optional[datetime] = None) -> bool:
        """Move a CONFIRMED booking to CANCELLED. Returns False if it was not confirmed."""
        try:
            result = self.db.execute(
                update(Booking)
                .where(
                    Booking.id == booking_id,
                    Booking.status == BookingStatus.CONFIRMED.value,
                )
                .values(
                    status=BookingStatus.CANCELLED.value,
                    cancelled_at=cancelled_at or utc_now(),
                )
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error cancelling booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to cancel booking: {str(e)}") from e
        return result.rowcount > 0

    def mark_past_bookings_completed(self, now: Optional[datetime] = None) -> int:
        """
        Complete every CONFIRMED booking whose session has ended.

        Returns the number of bookings updated.
        """
        now = ensure_utc(now) if now else utc_now()
        candidates = self._execute_query(
            self._build_query().filter(Booking.status == BookingStatus.CONFIRMED.value)
        )
        ended_ids = [booking.id for booking in candidates if booking.session.ends_at < now]
        if not ended_ids:
            return 0

        try:
            result = self.db.execute(
                update(Booking)
                .where(
                    Booking.id.in_(ended_ids),
                    Booking.status == BookingStatus.CONFIRMED.value,
                )
                .values(status=BookingStatus.COMPLETED.value, completed_at=now)
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error completing past bookings: {str(e)}")
            raise RepositoryException(f"Failed to complete past bookings: {str(e)}") from e
        return result.rowcount
