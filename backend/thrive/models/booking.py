"""
Booking model.

A booking is one user's seat in one live session. At most one CONFIRMED
booking may exist per (user, session); the partial unique index below is the
authoritative guard against concurrent duplicate admissions.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    CONFIRMED = "CONFIRMED"  # Default - admitted booking
    CANCELLED = "CANCELLED"  # Cancelled by the user
    COMPLETED = "COMPLETED"  # Session has ended


class Booking(Base):
    """A user's admitted seat in a live session."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    user_id = Column(String(26), nullable=False, index=True)
    session_id = Column(
        String(26), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    session = relationship("LiveSession", lazy="joined")

    __table_args__ = (
        Index(
            "uq_bookings_user_session_confirmed",
            "user_id",
            "session_id",
            unique=True,
            postgresql_where=text("status = 'CONFIRMED'"),
            sqlite_where=text("status = 'CONFIRMED'"),
        ),
        Index("ix_bookings_user_status", "user_id", "status"),
    )

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED.value

    def __repr__(self) -> str:
        return f"<Booking {self.id} user={self.user_id} session={self.session_id} {self.status}>"
