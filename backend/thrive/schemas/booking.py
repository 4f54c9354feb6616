"""
Booking admission schemas.

BookingValidationDetails is a fixed-shape record: every field is always
present so eligibility screens can render partial state even when a
booking is denied.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from ..models.session import SessionType
from .base import StandardizedModel, StrictModel


class BookingCreate(StrictModel):
    """Request body for admitting a booking."""

    session_id: str = Field(..., min_length=1, max_length=26)


class BookingValidationDetails(StandardizedModel):
    user_plan: Optional[str] = None
    subscription_status: Optional[str] = None
    has_active_subscription: bool = False
    session_found: bool = False

    active_bookings_count: int = 0
    max_active_bookings: int = 0
    active_bookings_remaining: int = 0
    monthly_booking_count: int = 0
    monthly_booking_limit: Optional[int] = None
    remaining_monthly_bookings: Optional[int] = None
    current_month: str
    session_month: str

    hours_until_session: float = 0.0
    meets_minimum_notice: bool = False
    is_past: bool = False
    can_access_session_type: bool = False
    session_type: SessionType = SessionType.STANDARD
    has_enough_points: bool = False
    points_required: int = 0
    user_points: int = 0
    spots_available: int = 0
    is_session_active: bool = False
    is_already_booked: bool = False


class BookingValidationResult(StandardizedModel):
    can_book: bool
    reasons: List[str] = Field(default_factory=list)
    validation_details: BookingValidationDetails


class BookingLimitsInfo(StandardizedModel):
    """A user's standing against booking limits, independent of any session."""

    user_plan: Optional[str] = None
    has_active_subscription: bool = False
    active_bookings_count: int = 0
    max_active_bookings: int = 0
    active_bookings_remaining: int = 0
    monthly_booking_count: int = 0
    monthly_booking_limit: Optional[int] = None
    remaining_monthly_bookings: Optional[int] = None
    current_month: str


class BookingResponse(StandardizedModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: str
    user_id: str
    session_id: str
    status: str
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class RecurringSeriesInfo(StandardizedModel):
    is_recurring: bool
    is_parent: bool
    parent_id: Optional[str] = None
    children_count: int = 0
    total_in_series: int = 1


class EligibilitySession(StandardizedModel):
    id: str
    title: str
    type: SessionType
    scheduled_at: datetime
    points_required: int
    spots_available: int
    series: RecurringSeriesInfo


class EligibilityUser(StandardizedModel):
    points: int
    active_bookings: int
    plan: Optional[str] = None
    has_active_subscription: bool
    max_active_bookings: int
    active_bookings_remaining: int
    monthly_booking_count: int
    monthly_booking_limit: Optional[int] = None
    remaining_monthly_bookings: Optional[int] = None
    current_month: str


class EligibilityChecks(StandardizedModel):
    meets_minimum_notice: bool
    hours_until_session: int
    can_access_session_type: bool
    is_already_booked: bool


class BookingEligibilityResponse(StandardizedModel):
    can_book: bool
    reasons: List[str]
    session: EligibilitySession
    user: EligibilityUser
    validation: EligibilityChecks


class BookedSessionSummary(StandardizedModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: str
    title: str
    type: SessionType
    scheduled_at: datetime
    duration: int
    points_required: int = 0
    meeting_url: Optional[str] = None


class UpcomingBookingResponse(BookingResponse):
    """A confirmed booking together with the session it is for."""

    session: BookedSessionSummary


class SessionAttendee(StandardizedModel):
    booking_id: str
    user_id: str
    name: str
