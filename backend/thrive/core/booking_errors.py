"""
Booking admission error codes.

A denied validation can carry several reasons at once, but the create path
reports a single actionable code. The code is chosen by walking
BOOKING_ERROR_PRIORITY in order and taking the first predicate that matches
the validation details.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

from fastapi import status

from .exceptions import BusinessRuleException

if TYPE_CHECKING:
    from ..schemas.booking import BookingValidationDetails


class BookingErrorCode(str, Enum):
    """Machine-readable booking denial codes."""

    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    NO_SUBSCRIPTION = "NO_SUBSCRIPTION"
    PLAN_ACCESS_DENIED = "PLAN_ACCESS_DENIED"
    ACTIVE_BOOKING_LIMIT = "ACTIVE_BOOKING_LIMIT"
    MONTHLY_LIMIT_EXCEEDED = "MONTHLY_LIMIT_EXCEEDED"
    INSUFFICIENT_NOTICE = "INSUFFICIENT_NOTICE"
    SESSION_FULL = "SESSION_FULL"
    ALREADY_BOOKED = "ALREADY_BOOKED"
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"
    SESSION_INACTIVE = "SESSION_INACTIVE"
    SESSION_PAST = "SESSION_PAST"
    VALIDATION_FAILED = "VALIDATION_FAILED"


_STATUS_BY_CODE = {
    BookingErrorCode.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookingErrorCode.NO_SUBSCRIPTION: status.HTTP_403_FORBIDDEN,
    BookingErrorCode.PLAN_ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
}

_VALID_SUBSCRIPTION_STATUSES = ("active", "trialing")

DetailsPredicate = Callable[["BookingValidationDetails"], bool]

BOOKING_ERROR_PRIORITY: Sequence[Tuple[DetailsPredicate, BookingErrorCode]] = (
    (lambda d: not d.session_found, BookingErrorCode.SESSION_NOT_FOUND),
    (
        lambda d: not d.has_active_subscription
        or d.subscription_status not in _VALID_SUBSCRIPTION_STATUSES,
        BookingErrorCode.NO_SUBSCRIPTION,
    ),
    (lambda d: d.is_already_booked, BookingErrorCode.ALREADY_BOOKED),
    (
        lambda d: not d.meets_minimum_notice and not d.is_past,
        BookingErrorCode.INSUFFICIENT_NOTICE,
    ),
    (lambda d: d.is_past, BookingErrorCode.SESSION_PAST),
    (lambda d: not d.is_session_active, BookingErrorCode.SESSION_INACTIVE),
    (lambda d: not d.can_access_session_type, BookingErrorCode.PLAN_ACCESS_DENIED),
    (lambda d: d.active_bookings_remaining <= 0, BookingErrorCode.ACTIVE_BOOKING_LIMIT),
    (
        lambda d: d.remaining_monthly_bookings is not None and d.remaining_monthly_bookings <= 0,
        BookingErrorCode.MONTHLY_LIMIT_EXCEEDED,
    ),
    (lambda d: d.spots_available <= 0, BookingErrorCode.SESSION_FULL),
    (lambda d: not d.has_enough_points, BookingErrorCode.INSUFFICIENT_POINTS),
)


def resolve_booking_error_code(details: "BookingValidationDetails") -> BookingErrorCode:
    """Return the highest-priority code matching a denied validation."""
    for predicate, code in BOOKING_ERROR_PRIORITY:
        if predicate(details):
            return code
    return BookingErrorCode.VALIDATION_FAILED


class BookingError(BusinessRuleException):
    """Raised when a booking cannot be admitted."""

    def __init__(
        self,
        code: BookingErrorCode,
        reasons: Optional[List[str]] = None,
        message: Optional[str] = None,
    ) -> None:
        self.booking_code = code
        self.reasons = list(reasons or [])
        super().__init__(
            message=message or (self.reasons[0] if self.reasons else "Booking validation failed"),
            code=code.value,
            details={"reasons": self.reasons},
        )
        self.status_code = _STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)
