"""
Shared fixtures for the booking backend tests.

Each test gets its own in-memory SQLite database. Builders insert rows
directly and commit, so services under test see them like any other
committed state.
"""

from datetime import datetime, timedelta
import os
from typing import Callable, Optional

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from thrive.core.timezone_utils import month_bounds, utc_now
from thrive.core.ulid_helper import generate_ulid
from thrive.database import Base

# Import models so Base.metadata is populated for create_all.
import thrive.models  # noqa: F401
from thrive.models.booking import Booking, BookingStatus
from thrive.models.profile import Profile
from thrive.models.session import LiveSession, SessionType
from thrive.models.subscription import Subscription, SubscriptionStatus


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestSessionLocal = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def next_month_start() -> datetime:
    """Start of next UTC month: far enough ahead for notice rules, one fixed month."""
    now = utc_now()
    return month_bounds(now.year, now.month)[1]


@pytest.fixture
def make_session(db: Session) -> Callable[..., LiveSession]:
    def _make(
        *,
        scheduled_at: Optional[datetime] = None,
        session_type: SessionType = SessionType.STANDARD,
        max_participants: int = 10,
        current_participants: int = 0,
        points_required: int = 0,
        duration: int = 60,
        is_active: bool = True,
        title: str = "Conversation Club",
        **extra,
    ) -> LiveSession:
        live_session = LiveSession(
            id=generate_ulid(),
            title=title,
            description="",
            type=session_type.value,
            scheduled_at=scheduled_at or utc_now() + timedelta(days=3),
            duration=duration,
            max_participants=max_participants,
            current_participants=current_participants,
            points_required=points_required,
            is_active=is_active,
            **extra,
        )
        db.add(live_session)
        db.commit()
        return live_session

    return _make


@pytest.fixture
def make_subscription(db: Session) -> Callable[..., Subscription]:
    def _make(
        user_id: str,
        plan: str = "standard",
        status: str = SubscriptionStatus.ACTIVE.value,
    ) -> Subscription:
        subscription = Subscription(user_id=user_id, subscription_plan=plan, status=status)
        db.add(subscription)
        db.commit()
        return subscription

    return _make


@pytest.fixture
def make_profile(db: Session) -> Callable[..., Profile]:
    def _make(user_id: str, points: int = 0) -> Profile:
        profile = Profile(user_id=user_id, name="Test User", points=points)
        db.add(profile)
        db.commit()
        return profile

    return _make


@pytest.fixture
def make_booking(db: Session) -> Callable[..., Booking]:
    """Insert a booking row directly, bypassing admission rules."""

    def _make(
        user_id: str,
        live_session: LiveSession,
        status: BookingStatus = BookingStatus.CONFIRMED,
        created_at: Optional[datetime] = None,
    ) -> Booking:
        booking = Booking(
            user_id=user_id,
            session_id=live_session.id,
            status=status.value,
        )
        if created_at is not None:
            booking.created_at = created_at
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def user_id() -> str:
    return generate_ulid()
