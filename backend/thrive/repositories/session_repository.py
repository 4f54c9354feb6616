# backend/thrive/repositories/session_repository.py
"""
Session Repository

Data access for live sessions, including the atomic participant counter
updates used by booking admission and cancellation.

The capacity check done during validation is advisory only. The
conditional UPDATE in increment_participants() is what guarantees
current_participants never exceeds max_participants when several
admissions race for the last seat.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.session import LiveSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[LiveSession]):
    """Repository for live session data access."""

    def __init__(self, db: Session):
        super().__init__(db, LiveSession)

    def find_by_id(self, session_id: str) -> Optional[LiveSession]:
        return self.get_by_id(session_id)

    def increment_participants(self, session_id: str) -> Optional[LiveSession]:
        """
        Take one seat in a session.

        Only succeeds while the session is active and below capacity. Returns
        the refreshed session, or None when no seat was taken (full, inactive
        or missing).
        """
        try:
            result = self.db.execute(
                update(LiveSession)
                .where(
                    LiveSession.id == session_id,
                    LiveSession.is_active.is_(True),
                    LiveSession.current_participants < LiveSession.max_participants,
                )
                .values(current_participants=LiveSession.current_participants + 1)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error incrementing participants for session {session_id}: {e}")
            raise RepositoryException(f"Failed to increment participants: {str(e)}") from e

        if result.rowcount == 0:
            return None
        return self._reload(session_id)

    def decrement_participants(self, session_id: str) -> Optional[LiveSession]:
        """Release one seat. The counter never goes below zero."""
        try:
            result = self.db.execute(
                update(LiveSession)
                .where(
                    LiveSession.id == session_id,
                    LiveSession.current_participants > 0,
                )
                .values(current_participants=LiveSession.current_participants - 1)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error decrementing participants for session {session_id}: {e}")
            raise RepositoryException(f"Failed to decrement participants: {str(e)}") from e

        if result.rowcount == 0:
            return None
        return self._reload(session_id)

    def find_by_recurring_parent_id(self, parent_id: str) -> List[LiveSession]:
        """Return child instances of a recurring series, earliest first."""
        query = (
            self._build_query()
            .filter(LiveSession.recurring_parent_id == parent_id)
            .order_by(LiveSession.scheduled_at.asc())
        )
        return self._execute_query(query)

    def get_recurring_series_info(self, session_id: str) -> Dict[str, Any]:
        """
        Describe the series a session belongs to.

        The parent is the instance with ``is_recurring`` set and no
        ``recurring_parent_id``; ``total_in_series`` includes the parent.
        """
        session = self.get_by_id(session_id)
        if session is None or not session.is_recurring:
            return {
                "is_recurring": False,
                "is_parent": False,
                "parent_id": None,
                "children_count": 0,
                "total_in_series": 1,
            }

        is_parent = session.is_series_parent
        parent_id = session.id if is_parent else session.recurring_parent_id
        children_count = self.count(recurring_parent_id=parent_id)

        return {
            "is_recurring": True,
            "is_parent": is_parent,
            "parent_id": None if is_parent else parent_id,
            "children_count": children_count,
            "total_in_series": children_count + 1,
        }

    def _reload(self, session_id: str) -> Optional[LiveSession]:
        # The bulk UPDATE bypassed the identity map; pull fresh column values.
        session = self.get_by_id(session_id)
        if session is not None:
            self.db.refresh(session)
        return session
