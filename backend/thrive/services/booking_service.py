# backend/thrive/services/booking_service.py
"""
Booking Service for the Thrive booking backend.

Admits, cancels and lists session bookings. Admission validates first and
then writes inside a single transaction where the database has the final
word on capacity, duplicates and points:

- the booking INSERT hits a partial unique index on (user_id, session_id)
  for CONFIRMED rows
- the participant counter moves through a conditional UPDATE that refuses
  to pass max_participants
- points are deducted through a conditional UPDATE that refuses to go
  negative

Any of these failing rolls back the whole admission.
"""

import math
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.booking_errors import BookingError, BookingErrorCode, resolve_booking_error_code
from ..core.booking_policy import BookingPolicy
from ..core.exceptions import ConflictException, ForbiddenException, NotFoundException
from ..core.timezone_utils import utc_now
from ..models.booking import Booking, BookingStatus
from ..models.session import LiveSession
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.profile_repository import ProfileRepository
from ..repositories.session_repository import SessionRepository
from ..schemas.booking import (
    BookingEligibilityResponse,
    BookingLimitsInfo,
    BookingValidationResult,
    EligibilityChecks,
    EligibilitySession,
    EligibilityUser,
    RecurringSeriesInfo,
    SessionAttendee,
)
from .activity_service import ActivityService
from .base import BaseService
from .booking_validation_service import BookingValidationService


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Owns the transaction boundary for every booking write. Repositories
    only flush.
    """

    def __init__(
        self,
        db: Session,
        validation_service: Optional[BookingValidationService] = None,
        activity_service: Optional[ActivityService] = None,
        policy: Optional[BookingPolicy] = None,
        session_repository: Optional[SessionRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        profile_repository: Optional[ProfileRepository] = None,
    ):
        super().__init__(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.profile_repository = (
            profile_repository or RepositoryFactory.create_profile_repository(db)
        )
        self.validation_service = validation_service or BookingValidationService(
            db,
            policy=policy,
            session_repository=self.session_repository,
            booking_repository=self.booking_repository,
            profile_repository=self.profile_repository,
        )
        self.activity_service = activity_service or ActivityService(db)

    def validate_booking(self, user_id: str, session_id: str) -> BookingValidationResult:
        return self.validation_service.validate_booking(user_id, session_id)

    def get_booking_limits(self, user_id: str) -> BookingLimitsInfo:
        return self.validation_service.get_booking_limits(user_id)

    @BaseService.measure_operation("create_booking")
    def create_booking(self, user_id: str, session_id: str) -> Booking:
        """
        Admit ``user_id`` into ``session_id``.

        Raises:
            BookingError: Admission denied. ``booking_code`` names the single
                highest-priority problem and ``reasons`` lists all of them.
            ServiceException: The database failed for a non-business reason.
        """
        validation = self.validation_service.validate_booking(user_id, session_id)
        if not validation.can_book:
            code = resolve_booking_error_code(validation.validation_details)
            self.logger.info(
                "booking_denied",
                extra={"user_id": user_id, "session_id": session_id, "code": code.value},
            )
            prometheus_metrics.inc_booking_admission(code.value)
            raise BookingError(code, validation.reasons)

        try:
            booking, session = self._admit(user_id, session_id)
        except BookingError as exc:
            prometheus_metrics.inc_booking_admission(exc.booking_code.value)
            raise
        prometheus_metrics.inc_booking_admission("ADMITTED")

        self.log_operation(
            "create_booking", user_id=user_id, session_id=session_id, booking_id=booking.id
        )
        self.activity_service.log_session_booked(user_id, session.title, session.scheduled_at)
        return booking

    def _admit(self, user_id: str, session_id: str) -> Tuple[Booking, LiveSession]:
        """Write the booking, take a seat and deduct points in one transaction."""
        with self.transaction():
            session = self.session_repository.get_by_id(session_id, for_update=True)
            if session is None:
                raise BookingError(BookingErrorCode.SESSION_NOT_FOUND, ["Session not found"])

            try:
                booking = self.booking_repository.create(
                    user_id=user_id,
                    session_id=session_id,
                    status=BookingStatus.CONFIRMED.value,
                )
            except IntegrityError as exc:
                self.logger.info(
                    "booking_duplicate_rejected",
                    extra={"user_id": user_id, "session_id": session_id, "error": str(exc)},
                )
                raise BookingError(
                    BookingErrorCode.ALREADY_BOOKED, ["You have already booked this session"]
                ) from exc

            if self.session_repository.increment_participants(session_id) is None:
                raise BookingError(BookingErrorCode.SESSION_FULL, ["This session is full"])

            points_required = session.points_required or 0
            if points_required > 0 and not self.profile_repository.update_points(
                user_id, -points_required
            ):
                raise BookingError(
                    BookingErrorCode.INSUFFICIENT_POINTS,
                    [f"Insufficient points: {points_required} required."],
                )
        return booking, session

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, user_id: str, booking_id: str) -> Booking:
        """
        Cancel a confirmed booking owned by ``user_id`` and release its seat.

        Points spent on the booking are not refunded.
        """
        booking = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        if booking.user_id != user_id:
            raise ForbiddenException(
                "You can only cancel your own bookings", code="BOOKING_NOT_OWNED"
            )
        if not booking.is_confirmed:
            raise ConflictException(
                f"Only confirmed bookings can be cancelled (status: {booking.status})",
                code="BOOKING_NOT_CANCELLABLE",
                details={"status": booking.status},
            )

        with self.transaction():
            if not self.booking_repository.cancel(booking_id, cancelled_at=utc_now()):
                raise ConflictException(
                    "Booking was changed by another request", code="BOOKING_NOT_CANCELLABLE"
                )
            self.session_repository.decrement_participants(booking.session_id)

        self.db.refresh(booking)
        self.log_operation("cancel_booking", user_id=user_id, booking_id=booking_id)
        if booking.session is not None:
            self.activity_service.log_session_cancelled(user_id, booking.session.title)
        return booking

    def get_my_bookings(self, user_id: str) -> List[Booking]:
        """All of a user's bookings in any status, newest first."""
        return self.booking_repository.find_by_user_id(user_id)

    def get_upcoming_bookings(self, user_id: str) -> List[Booking]:
        """Confirmed bookings whose session has not ended, soonest first."""
        return self.booking_repository.find_upcoming_by_user_id(user_id, now=utc_now())

    def get_session_attendees(self, session_id: str) -> List[SessionAttendee]:
        """Users holding a confirmed seat in ``session_id``."""
        if self.session_repository.get_by_id(session_id) is None:
            raise NotFoundException("Session not found", code="SESSION_NOT_FOUND")

        attendees = []
        for booking in self.booking_repository.find_confirmed_by_session_id(session_id):
            profile = self.profile_repository.find_by_user_id(booking.user_id)
            attendees.append(
                SessionAttendee(
                    booking_id=booking.id,
                    user_id=booking.user_id,
                    name=(profile.name if profile is not None else "") or "Unknown",
                )
            )
        return attendees

    @BaseService.measure_operation("check_booking_eligibility")
    def check_booking_eligibility(
        self, user_id: str, session_id: str
    ) -> BookingEligibilityResponse:
        session = self.session_repository.get_by_id(session_id)
        if session is None:
            raise NotFoundException("Session not found", code="SESSION_NOT_FOUND")

        validation = self.validation_service.validate_booking(user_id, session_id)
        series = self.session_repository.get_recurring_series_info(session_id)
        details = validation.validation_details

        return BookingEligibilityResponse(
            can_book=validation.can_book,
            reasons=validation.reasons,
            session=EligibilitySession(
                id=session.id,
                title=session.title,
                type=session.type,
                scheduled_at=session.starts_at,
                points_required=session.points_required or 0,
                spots_available=session.spots_available,
                series=RecurringSeriesInfo(**series),
            ),
            user=EligibilityUser(
                points=details.user_points,
                active_bookings=details.active_bookings_count,
                plan=details.user_plan,
                has_active_subscription=details.has_active_subscription,
                max_active_bookings=details.max_active_bookings,
                active_bookings_remaining=details.active_bookings_remaining,
                monthly_booking_count=details.monthly_booking_count,
                monthly_booking_limit=details.monthly_booking_limit,
                remaining_monthly_bookings=details.remaining_monthly_bookings,
                # Monthly usage above is counted in the session's month.
                current_month=details.session_month,
            ),
            validation=EligibilityChecks(
                meets_minimum_notice=details.meets_minimum_notice,
                hours_until_session=math.floor(details.hours_until_session),
                can_access_session_type=details.can_access_session_type,
                is_already_booked=details.is_already_booked,
            ),
        )

    @BaseService.measure_operation("complete_past_bookings")
    def complete_past_bookings(self) -> int:
        """Mark confirmed bookings of ended sessions as COMPLETED."""
        with self.transaction():
            completed = self.booking_repository.mark_past_bookings_completed(now=utc_now())
        if completed:
            self.log_operation("complete_past_bookings", completed=completed)
        return completed
