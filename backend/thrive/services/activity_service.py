"""
Activity feed writer.

Activity entries are a side effect of booking events. Writing them is
best-effort: a failure is logged and rolled back, never surfaced to the
booking caller.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import ensure_utc
from ..models.activity import ActivityType, RecentActivity
from ..repositories.activity_repository import ActivityRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService


class ActivityService(BaseService):
    def __init__(self, db: Session, repository: Optional[ActivityRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_activity_repository(db)

    def log_activity(
        self,
        user_id: str,
        activity_type: ActivityType,
        title: str,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[RecentActivity]:
        """Record one activity entry in its own transaction. Returns None on failure."""
        try:
            with self.repository.transaction():
                return self.repository.create(
                    user_id=user_id,
                    activity_type=activity_type.value,
                    title=title,
                    description=description,
                    metadata_json=metadata,
                )
        except (SQLAlchemyError, RepositoryException) as exc:
            self.logger.warning(
                "activity_log_failed",
                extra={
                    "user_id": user_id,
                    "activity_type": activity_type.value,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return None

    def log_session_booked(
        self, user_id: str, session_title: str, scheduled_at: datetime
    ) -> Optional[RecentActivity]:
        scheduled_at = ensure_utc(scheduled_at)
        return self.log_activity(
            user_id,
            ActivityType.SESSION_BOOKED,
            f'Booked "{session_title}"',
            f"Scheduled for {scheduled_at:%Y-%m-%d}",
            {"session_title": session_title, "session_date": scheduled_at.isoformat()},
        )

    def log_session_cancelled(self, user_id: str, session_title: str) -> Optional[RecentActivity]:
        return self.log_activity(
            user_id,
            ActivityType.SESSION_CANCELLED,
            f'Cancelled "{session_title}"',
            None,
            {"session_title": session_title},
        )
