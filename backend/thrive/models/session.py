"""
Live session model.

A session is a single scheduled instance. Recurring series share a
``recurring_parent_id``; capacity and booking limits always apply to the
individual instance, never to the series as a whole.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from ..core.timezone_utils import ensure_utc, utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base


class SessionType(str, Enum):
    """Kinds of live session. Standard-tier plans may only book STANDARD."""

    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
    SPEAKING = "SPEAKING"
    EVENT = "EVENT"


class LiveSession(Base):
    """A scheduled live session that users book seats in."""

    __tablename__ = "sessions"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(20), nullable=False, default=SessionType.STANDARD.value, index=True)
    host_id = Column(String(26), nullable=True)
    meeting_url = Column(String(500), nullable=True)

    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    duration = Column(Integer, nullable=False)  # minutes

    max_participants = Column(Integer, nullable=False)
    current_participants = Column(Integer, nullable=False, default=0)
    points_required = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_parent_id = Column(
        String(26), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=True, index=True
    )
    recurring_weeks = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("current_participants >= 0", name="ck_sessions_participants_non_negative"),
        CheckConstraint(
            "current_participants <= max_participants", name="ck_sessions_participants_capacity"
        ),
        CheckConstraint("points_required >= 0", name="ck_sessions_points_non_negative"),
        CheckConstraint("duration > 0", name="ck_sessions_duration_positive"),
        Index("ix_sessions_type_scheduled_at", "type", "scheduled_at"),
    )

    @property
    def starts_at(self) -> datetime:
        return ensure_utc(self.scheduled_at)

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration)

    @property
    def spots_available(self) -> int:
        return self.max_participants - self.current_participants

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants

    def is_past(self, now: Optional[datetime] = None) -> bool:
        """True once the session has ended."""
        return self.ends_at < (ensure_utc(now) if now else utc_now())

    @property
    def is_series_parent(self) -> bool:
        return bool(self.is_recurring) and self.recurring_parent_id is None

    def __repr__(self) -> str:
        return f"<LiveSession {self.id} {self.type} at {self.scheduled_at}>"
