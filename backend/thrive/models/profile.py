"""User profile model. The booking core only touches the points balance."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from ..database import Base


class Profile(Base):
    __tablename__ = "profiles"

    user_id = Column(String(26), primary_key=True)
    name = Column(String(255), nullable=False, default="")
    points = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (CheckConstraint("points >= 0", name="ck_profiles_points_non_negative"),)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Profile user={self.user_id} points={self.points}>"
