# backend/thrive/repositories/activity_repository.py
"""Recent activity feed storage."""

from typing import List

from sqlalchemy.orm import Session

from ..models.activity import RecentActivity
from .base_repository import BaseRepository


class ActivityRepository(BaseRepository[RecentActivity]):
    def __init__(self, db: Session):
        super().__init__(db, RecentActivity)

    def find_recent_by_user_id(self, user_id: str, limit: int = 20) -> List[RecentActivity]:
        query = (
            self._build_query()
            .filter(RecentActivity.user_id == user_id)
            .order_by(RecentActivity.created_at.desc(), RecentActivity.id.desc())
            .limit(limit)
        )
        return self._execute_query(query)
