# backend/thrive/services/booking_validation_service.py
"""
Booking Validation Service

Read-only decision engine for session bookings. Given a user and a session
it gathers facts from the session, booking, subscription and profile stores
and returns an itemized admit/deny result.

Rules:
- Subscription must be ``active`` or ``trialing``
- Trial users: lifetime allowance of non-cancelled bookings, any session type
- Active users: plan tier decides session-type access, active-booking cap and
  (standard tier only) a monthly cap counted in the session's own month
- Always: not already booked, minimum notice, not ended, session active,
  a free seat, enough points

Every failing rule appends a reason; nothing short-circuits, so callers see
all problems at once. The result is advisory. Capacity and duplicate
bookings are enforced again by the database when the booking is written.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.booking_policy import BookingPolicy
from ..core.config import settings
from ..core.timezone_utils import month_string, utc_now
from ..models.booking import Booking
from ..models.profile import Profile
from ..models.session import LiveSession, SessionType
from ..models.subscription import Subscription, SubscriptionStatus
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.profile_repository import ProfileRepository
from ..repositories.session_repository import SessionRepository
from ..repositories.subscription_repository import SubscriptionRepository
from ..schemas.booking import BookingLimitsInfo, BookingValidationDetails, BookingValidationResult
from .base import BaseService

SESSION_NOT_FOUND_REASON = "Session not found"


class BookingValidationService(BaseService):
    """Evaluates booking rules without mutating any state."""

    def __init__(
        self,
        db: Session,
        policy: Optional[BookingPolicy] = None,
        session_repository: Optional[SessionRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        subscription_repository: Optional[SubscriptionRepository] = None,
        profile_repository: Optional[ProfileRepository] = None,
    ):
        super().__init__(db)
        self.policy = policy or BookingPolicy.from_settings(settings)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.subscription_repository = (
            subscription_repository or RepositoryFactory.create_subscription_repository(db)
        )
        self.profile_repository = (
            profile_repository or RepositoryFactory.create_profile_repository(db)
        )

    @staticmethod
    def _hours_until(scheduled_at: datetime, now: datetime) -> float:
        return (scheduled_at - now).total_seconds() / 3600

    @BaseService.measure_operation("validate_booking")
    def validate_booking(self, user_id: str, session_id: str) -> BookingValidationResult:
        """
        Decide whether ``user_id`` may book ``session_id``.

        A missing session is the only hard failure: the result then carries a
        single reason and default details with ``session_found=False``.
        """
        now = utc_now()

        # One SQLAlchemy Session serves the request, so the independent reads
        # run back to back rather than concurrently.
        session = self.session_repository.get_by_id(session_id)
        subscription = self.subscription_repository.find_active_by_user_id(user_id)
        active_bookings = self.booking_repository.find_active_by_user_id(user_id, now=now)
        profile = self.profile_repository.find_by_user_id(user_id)

        if session is None:
            return BookingValidationResult(
                can_book=False,
                reasons=[SESSION_NOT_FOUND_REASON],
                validation_details=self._empty_validation_details(now),
            )

        reasons: List[str] = []
        details = self._session_facts(session, active_bookings, profile, now)

        if subscription is None:
            reasons.append("Active subscription required to book sessions")
        else:
            details.user_plan = subscription.subscription_plan
            details.subscription_status = subscription.status
            details.has_active_subscription = True

            if subscription.status == SubscriptionStatus.TRIALING.value:
                self._apply_trial_rules(user_id, details, reasons)
            elif subscription.status == SubscriptionStatus.ACTIVE.value:
                self._apply_plan_rules(user_id, subscription, session, details, reasons)
            else:
                reasons.append("Your subscription is not in a valid state for booking.")

        if details.is_already_booked:
            reasons.append("You have already booked this session")
        if not details.meets_minimum_notice and not details.is_past:
            reasons.append(
                f"Sessions must be booked at least {self.policy.minimum_hours_notice} "
                "hours in advance."
            )
        if details.is_past:
            reasons.append("This session has already ended")
        if not details.is_session_active:
            reasons.append("This session is not currently active")
        if details.spots_available <= 0:
            reasons.append("This session is full")
        if not details.has_enough_points:
            reasons.append(
                f"Insufficient points: {details.points_required} required, "
                f"{details.user_points} available."
            )

        if reasons:
            self.logger.info(
                "booking_validation_denied",
                extra={"user_id": user_id, "session_id": session_id, "reasons": reasons},
            )

        return BookingValidationResult(
            can_book=not reasons,
            reasons=reasons,
            validation_details=details,
        )

    @BaseService.measure_operation("get_booking_limits")
    def get_booking_limits(self, user_id: str) -> BookingLimitsInfo:
        """
        A user's standing against the booking limits, independent of a session.

        Monthly usage is counted for the current UTC month. validate_booking()
        counts the session's month instead, so booking ahead draws on that
        month's quota.
        """
        now = utc_now()
        subscription = self.subscription_repository.find_active_by_user_id(user_id)
        if subscription is None:
            return BookingLimitsInfo(current_month=month_string(now))

        active_count = len(self.booking_repository.find_active_by_user_id(user_id, now=now))

        if subscription.status == SubscriptionStatus.TRIALING.value:
            limit = self.policy.trial_lifetime_limit
            history_count = self.booking_repository.count_non_cancelled_by_user_id(user_id)
            remaining = max(0, limit - history_count)
            return BookingLimitsInfo(
                user_plan=subscription.subscription_plan,
                has_active_subscription=True,
                active_bookings_count=active_count,
                max_active_bookings=limit,
                active_bookings_remaining=remaining,
                monthly_booking_count=history_count,
                monthly_booking_limit=limit,
                remaining_monthly_bookings=remaining,
                current_month=month_string(now),
            )

        limits = self.policy.limits_for_plan(subscription.subscription_plan)
        monthly_count = self.booking_repository.count_monthly_standard_session_bookings(
            user_id, now.year, now.month
        )
        return BookingLimitsInfo(
            user_plan=subscription.subscription_plan,
            has_active_subscription=True,
            active_bookings_count=active_count,
            max_active_bookings=limits.max_active,
            active_bookings_remaining=max(0, limits.max_active - active_count),
            monthly_booking_count=monthly_count,
            monthly_booking_limit=limits.monthly_limit,
            remaining_monthly_bookings=(
                max(0, limits.monthly_limit - monthly_count)
                if limits.monthly_limit is not None
                else None
            ),
            current_month=month_string(now),
        )

    # Rule helpers

    def _session_facts(
        self,
        session: LiveSession,
        active_bookings: List[Booking],
        profile: Optional[Profile],
        now: datetime,
    ) -> BookingValidationDetails:
        hours_until_session = self._hours_until(session.starts_at, now)
        user_points = profile.points if profile is not None else 0
        points_required = session.points_required or 0

        return BookingValidationDetails(
            session_found=True,
            active_bookings_count=len(active_bookings),
            current_month=month_string(now),
            session_month=month_string(session.starts_at),
            hours_until_session=hours_until_session,
            meets_minimum_notice=hours_until_session >= self.policy.minimum_hours_notice,
            is_past=session.is_past(now),
            session_type=session.type,
            has_enough_points=points_required <= 0
            or (profile is not None and user_points >= points_required),
            points_required=points_required,
            user_points=user_points,
            spots_available=session.spots_available,
            is_session_active=bool(session.is_active),
            is_already_booked=any(b.session_id == session.id for b in active_bookings),
        )

    def _apply_trial_rules(
        self, user_id: str, details: BookingValidationDetails, reasons: List[str]
    ) -> None:
        """Trials ignore plan tiers; only the lifetime allowance applies."""
        limit = self.policy.trial_lifetime_limit
        history_count = self.booking_repository.count_non_cancelled_by_user_id(user_id)

        details.max_active_bookings = limit
        details.can_access_session_type = True
        details.active_bookings_remaining = max(0, limit - history_count)

        if history_count >= limit:
            reasons.append(
                "Trial users can only book one session for the entire trial duration."
                if limit == 1
                else f"Trial users can only book {limit} sessions for the entire trial duration."
            )

    def _apply_plan_rules(
        self,
        user_id: str,
        subscription: Subscription,
        session: LiveSession,
        details: BookingValidationDetails,
        reasons: List[str],
    ) -> None:
        limits = self.policy.limits_for_plan(subscription.subscription_plan)
        details.max_active_bookings = limits.max_active
        details.monthly_booking_limit = limits.monthly_limit

        if limits.can_access_all_types:
            details.can_access_session_type = True
        else:
            details.can_access_session_type = session.type == SessionType.STANDARD.value
            if not details.can_access_session_type:
                reasons.append(
                    "Standard plans can only access Standard sessions. "
                    "Upgrade to Premium for access."
                )

        if details.active_bookings_count >= limits.max_active:
            reasons.append(
                f"{limits.tier.capitalize()} users can only have {limits.max_active} "
                "active upcoming sessions at a time."
            )
        details.active_bookings_remaining = max(0, limits.max_active - details.active_bookings_count)

        if limits.monthly_limit is not None:
            starts_at = session.starts_at
            details.monthly_booking_count = (
                self.booking_repository.count_monthly_standard_session_bookings(
                    user_id, starts_at.year, starts_at.month
                )
            )
            if details.monthly_booking_count >= limits.monthly_limit:
                reasons.append(
                    f"Monthly booking limit reached ({limits.monthly_limit}) for this month."
                )
            details.remaining_monthly_bookings = max(
                0, limits.monthly_limit - details.monthly_booking_count
            )

    @staticmethod
    def _empty_validation_details(now: datetime) -> BookingValidationDetails:
        current_month = month_string(now)
        return BookingValidationDetails(current_month=current_month, session_month=current_month)
