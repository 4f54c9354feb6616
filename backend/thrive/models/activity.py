"""Recent activity feed entries written after booking events."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class ActivityType(str, Enum):
    SESSION_BOOKED = "SESSION_BOOKED"
    SESSION_CANCELLED = "SESSION_CANCELLED"


class RecentActivity(Base):
    __tablename__ = "recent_activities"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(26), nullable=False, index=True)
    activity_type = Column(String(40), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    metadata_json = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<RecentActivity {self.activity_type} user={self.user_id}>"
