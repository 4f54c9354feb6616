"""Unit coverage for the booking validation engine with mocked repositories."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from thrive.core.booking_errors import BookingErrorCode, resolve_booking_error_code
from thrive.core.booking_policy import BookingPolicy
from thrive.core.ulid_helper import generate_ulid
from thrive.models.session import LiveSession, SessionType
from thrive.services.booking_validation_service import BookingValidationService

NOW = datetime(2030, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_live_session(**overrides: object) -> LiveSession:
    fields = {
        "id": generate_ulid(),
        "title": "Conversation Club",
        "type": SessionType.STANDARD.value,
        "scheduled_at": NOW + timedelta(days=3),
        "duration": 60,
        "max_participants": 10,
        "current_participants": 0,
        "points_required": 0,
        "is_active": True,
        "is_recurring": False,
    }
    fields.update(overrides)
    return LiveSession(**fields)


def make_subscription(plan: str = "standard", status: str = "active") -> SimpleNamespace:
    return SimpleNamespace(subscription_plan=plan, status=status)


def make_active_bookings(count: int) -> list[SimpleNamespace]:
    return [SimpleNamespace(id=generate_ulid(), session_id=generate_ulid()) for _ in range(count)]


@pytest.fixture(autouse=True)
def frozen_now(monkeypatch: pytest.MonkeyPatch) -> datetime:
    monkeypatch.setattr("thrive.services.booking_validation_service.utc_now", lambda: NOW)
    return NOW


@pytest.fixture
def repos() -> SimpleNamespace:
    session_repo = MagicMock()
    session_repo.get_by_id.return_value = make_live_session()

    booking_repo = MagicMock()
    booking_repo.find_active_by_user_id.return_value = []
    booking_repo.count_non_cancelled_by_user_id.return_value = 0
    booking_repo.count_monthly_standard_session_bookings.return_value = 0

    subscription_repo = MagicMock()
    subscription_repo.find_active_by_user_id.return_value = make_subscription()

    profile_repo = MagicMock()
    profile_repo.find_by_user_id.return_value = SimpleNamespace(points=100)

    return SimpleNamespace(
        session=session_repo,
        booking=booking_repo,
        subscription=subscription_repo,
        profile=profile_repo,
    )


def build_service(repos: SimpleNamespace, policy: BookingPolicy | None = None):
    return BookingValidationService(
        MagicMock(),
        policy=policy or BookingPolicy(),
        session_repository=repos.session,
        booking_repository=repos.booking,
        subscription_repository=repos.subscription,
        profile_repository=repos.profile,
    )


def test_happy_path_admits_standard_user(repos: SimpleNamespace) -> None:
    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.can_book is True
    assert result.reasons == []
    details = result.validation_details
    assert details.session_found is True
    assert details.has_active_subscription is True
    assert details.user_plan == "standard"
    assert details.max_active_bookings == 4
    assert details.active_bookings_remaining == 4
    assert details.monthly_booking_limit == 4
    assert details.remaining_monthly_bookings == 4
    assert details.current_month == "2030-03"
    assert details.session_month == "2030-03"


def test_missing_session_reports_single_reason(repos: SimpleNamespace) -> None:
    repos.session.get_by_id.return_value = None

    result = build_service(repos).validate_booking("user-1", "missing")

    assert result.can_book is False
    assert result.reasons == ["Session not found"]
    assert result.validation_details.session_found is False
    assert result.validation_details.session_month == "2030-03"
    assert resolve_booking_error_code(result.validation_details) is BookingErrorCode.SESSION_NOT_FOUND


def test_full_session_is_denied_as_session_full(repos: SimpleNamespace) -> None:
    repos.session.get_by_id.return_value = make_live_session(
        max_participants=5, current_participants=5
    )

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.can_book is False
    assert result.validation_details.spots_available == 0
    assert "This session is full" in result.reasons
    assert resolve_booking_error_code(result.validation_details) is BookingErrorCode.SESSION_FULL


def test_standard_user_with_four_active_bookings_hits_active_limit(repos: SimpleNamespace) -> None:
    repos.booking.find_active_by_user_id.return_value = make_active_bookings(4)
    repos.booking.count_monthly_standard_session_bookings.return_value = 1

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.can_book is False
    assert result.validation_details.active_bookings_remaining == 0
    assert "Standard users can only have 4 active upcoming sessions at a time." in result.reasons
    assert (
        resolve_booking_error_code(result.validation_details)
        is BookingErrorCode.ACTIVE_BOOKING_LIMIT
    )


def test_premium_active_limit_reason_names_premium_tier(repos: SimpleNamespace) -> None:
    repos.subscription.find_active_by_user_id.return_value = make_subscription(plan="yearly")
    repos.booking.find_active_by_user_id.return_value = make_active_bookings(2)

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert "Premium users can only have 2 active upcoming sessions at a time." in result.reasons


@pytest.mark.parametrize("session_type", list(SessionType))
def test_trial_lifetime_limit_applies_to_every_session_type(
    repos: SimpleNamespace, session_type: SessionType
) -> None:
    repos.subscription.find_active_by_user_id.return_value = make_subscription(status="trialing")
    repos.booking.count_non_cancelled_by_user_id.return_value = 1
    repos.session.get_by_id.return_value = make_live_session(type=session_type.value)

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.can_book is False
    assert any("Trial users can only book one session" in reason for reason in result.reasons)
    assert result.validation_details.can_access_session_type is True
    assert result.validation_details.active_bookings_remaining == 0


def test_trial_user_without_history_may_book_premium_session(repos: SimpleNamespace) -> None:
    repos.subscription.find_active_by_user_id.return_value = make_subscription(status="trialing")
    repos.session.get_by_id.return_value = make_live_session(type=SessionType.PREMIUM.value)

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.can_book is True
    assert result.validation_details.max_active_bookings == 1


@pytest.mark.parametrize(("user_points", "expected"), [(50, True), (49, False)])
def test_points_boundary(repos: SimpleNamespace, user_points: int, expected: bool) -> None:
    repos.session.get_by_id.return_value = make_live_session(points_required=50)
    repos.profile.find_by_user_id.return_value = SimpleNamespace(points=user_points)

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.validation_details.has_enough_points is expected
    assert result.can_book is expected
    if not expected:
        assert "Insufficient points: 50 required, 49 available." in result.reasons
        assert (
            resolve_booking_error_code(result.validation_details)
            is BookingErrorCode.INSUFFICIENT_POINTS
        )


def test_missing_profile_counts_as_zero_points(repos: SimpleNamespace) -> None:
    repos.session.get_by_id.return_value = make_live_session(points_required=1)
    repos.profile.find_by_user_id.return_value = None

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.validation_details.user_points == 0
    assert result.validation_details.has_enough_points is False


def test_premium_user_books_event_session(repos: SimpleNamespace) -> None:
    repos.subscription.find_active_by_user_id.return_value = make_subscription(plan="premium")
    repos.session.get_by_id.return_value = make_live_session(
        type=SessionType.EVENT.value,
        scheduled_at=NOW + timedelta(hours=48),
        max_participants=2,
        current_participants=1,
        points_required=0,
    )
    repos.booking.find_active_by_user_id.return_value = make_active_bookings(1)
    repos.profile.find_by_user_id.return_value = SimpleNamespace(points=0)

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.can_book is True
    details = result.validation_details
    assert details.session_type == "EVENT"
    assert details.max_active_bookings == 2
    assert details.active_bookings_remaining == 1
    assert details.monthly_booking_limit is None
    assert details.remaining_monthly_bookings is None
    repos.booking.count_monthly_standard_session_bookings.assert_not_called()


def test_standard_user_cannot_book_premium_session(repos: SimpleNamespace) -> None:
    repos.session.get_by_id.return_value = make_live_session(type=SessionType.PREMIUM.value)

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.can_book is False
    assert result.validation_details.can_access_session_type is False
    assert (
        resolve_booking_error_code(result.validation_details)
        is BookingErrorCode.PLAN_ACCESS_DENIED
    )


def test_unrecognised_plan_is_validated_as_standard(repos: SimpleNamespace) -> None:
    repos.subscription.find_active_by_user_id.return_value = make_subscription(plan="enterprise")
    repos.session.get_by_id.return_value = make_live_session(type=SessionType.PREMIUM.value)

    result = build_service(repos).validate_booking("user-1", "session-1")

    details = result.validation_details
    assert result.can_book is False
    assert details.max_active_bookings == 4
    assert details.monthly_booking_limit == 4
    assert resolve_booking_error_code(details) is BookingErrorCode.PLAN_ACCESS_DENIED


@pytest.mark.parametrize("plan", ["standard", "premium"])
def test_ten_hours_notice_is_insufficient(repos: SimpleNamespace, plan: str) -> None:
    repos.subscription.find_active_by_user_id.return_value = make_subscription(plan=plan)
    repos.session.get_by_id.return_value = make_live_session(scheduled_at=NOW + timedelta(hours=10))

    result = build_service(repos).validate_booking("user-1", "session-1")

    details = result.validation_details
    assert result.can_book is False
    assert details.meets_minimum_notice is False
    assert details.hours_until_session == pytest.approx(10)
    assert "Sessions must be booked at least 24 hours in advance." in result.reasons
    assert resolve_booking_error_code(details) is BookingErrorCode.INSUFFICIENT_NOTICE


def test_minimum_notice_comes_from_policy(repos: SimpleNamespace) -> None:
    repos.session.get_by_id.return_value = make_live_session(scheduled_at=NOW + timedelta(hours=10))

    result = build_service(repos, BookingPolicy(minimum_hours_notice=6)).validate_booking(
        "user-1", "session-1"
    )

    assert result.validation_details.meets_minimum_notice is True
    assert result.can_book is True


def test_ended_session_reports_past_not_notice(repos: SimpleNamespace) -> None:
    repos.session.get_by_id.return_value = make_live_session(scheduled_at=NOW - timedelta(hours=3))

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.validation_details.is_past is True
    assert "This session has already ended" in result.reasons
    assert not any("in advance" in reason for reason in result.reasons)
    assert resolve_booking_error_code(result.validation_details) is BookingErrorCode.SESSION_PAST


def test_inactive_session_is_denied(repos: SimpleNamespace) -> None:
    repos.session.get_by_id.return_value = make_live_session(is_active=False)

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert "This session is not currently active" in result.reasons
    assert (
        resolve_booking_error_code(result.validation_details) is BookingErrorCode.SESSION_INACTIVE
    )


def test_already_booked_session_is_detected(repos: SimpleNamespace) -> None:
    live_session = make_live_session()
    repos.session.get_by_id.return_value = live_session
    repos.booking.find_active_by_user_id.return_value = [
        SimpleNamespace(id=generate_ulid(), session_id=live_session.id)
    ]

    result = build_service(repos).validate_booking("user-1", live_session.id)

    assert result.validation_details.is_already_booked is True
    assert "You have already booked this session" in result.reasons
    assert resolve_booking_error_code(result.validation_details) is BookingErrorCode.ALREADY_BOOKED


def test_no_subscription_collects_every_reason(repos: SimpleNamespace) -> None:
    repos.subscription.find_active_by_user_id.return_value = None
    repos.session.get_by_id.return_value = make_live_session(
        max_participants=1, current_participants=1
    )

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert result.reasons == [
        "Active subscription required to book sessions",
        "This session is full",
    ]
    assert result.validation_details.has_active_subscription is False
    assert resolve_booking_error_code(result.validation_details) is BookingErrorCode.NO_SUBSCRIPTION


def test_subscription_in_invalid_state_is_denied(repos: SimpleNamespace) -> None:
    repos.subscription.find_active_by_user_id.return_value = make_subscription(status="past_due")

    result = build_service(repos).validate_booking("user-1", "session-1")

    assert "Your subscription is not in a valid state for booking." in result.reasons
    assert resolve_booking_error_code(result.validation_details) is BookingErrorCode.NO_SUBSCRIPTION


def test_monthly_limit_counts_the_sessions_month(repos: SimpleNamespace) -> None:
    repos.session.get_by_id.return_value = make_live_session(
        scheduled_at=datetime(2030, 4, 2, 9, 0, tzinfo=timezone.utc)
    )
    repos.booking.count_monthly_standard_session_bookings.return_value = 4

    result = build_service(repos).validate_booking("user-1", "session-1")

    repos.booking.count_monthly_standard_session_bookings.assert_called_once_with(
        "user-1", 2030, 4
    )
    details = result.validation_details
    assert details.session_month == "2030-04"
    assert details.current_month == "2030-03"
    assert details.remaining_monthly_bookings == 0
    assert "Monthly booking limit reached (4) for this month." in result.reasons
    assert resolve_booking_error_code(details) is BookingErrorCode.MONTHLY_LIMIT_EXCEEDED


def test_limits_without_subscription_are_empty(repos: SimpleNamespace) -> None:
    repos.subscription.find_active_by_user_id.return_value = None

    limits = build_service(repos).get_booking_limits("user-1")

    assert limits.has_active_subscription is False
    assert limits.max_active_bookings == 0
    assert limits.monthly_booking_limit is None
    assert limits.current_month == "2030-03"


def test_limits_count_the_current_month(repos: SimpleNamespace) -> None:
    repos.booking.find_active_by_user_id.return_value = make_active_bookings(1)
    repos.booking.count_monthly_standard_session_bookings.return_value = 3

    limits = build_service(repos).get_booking_limits("user-1")

    repos.booking.count_monthly_standard_session_bookings.assert_called_once_with(
        "user-1", 2030, 3
    )
    assert limits.active_bookings_count == 1
    assert limits.active_bookings_remaining == 3
    assert limits.monthly_booking_count == 3
    assert limits.remaining_monthly_bookings == 1


def test_limits_for_trial_use_lifetime_history(repos: SimpleNamespace) -> None:
    repos.subscription.find_active_by_user_id.return_value = make_subscription(status="trialing")
    repos.booking.count_non_cancelled_by_user_id.return_value = 1

    limits = build_service(repos).get_booking_limits("user-1")

    assert limits.max_active_bookings == 1
    assert limits.monthly_booking_count == 1
    assert limits.monthly_booking_limit == 1
    assert limits.remaining_monthly_bookings == 0
    assert limits.active_bookings_remaining == 0


def test_limits_are_idempotent(repos: SimpleNamespace) -> None:
    service = build_service(repos)
    repos.booking.count_monthly_standard_session_bookings.return_value = 2

    assert service.get_booking_limits("user-1") == service.get_booking_limits("user-1")
