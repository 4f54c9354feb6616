# backend/thrive/repositories/profile_repository.py
"""
Profile Repository

Points are shared mutable state: every change goes through a single
conditional UPDATE so concurrent deductions cannot drive a balance negative.
"""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.profile import Profile
from .base_repository import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    def __init__(self, db: Session):
        super().__init__(db, Profile)

    def find_by_user_id(self, user_id: str) -> Optional[Profile]:
        return self.find_one_by(user_id=user_id)

    def update_points(self, user_id: str, delta: int) -> bool:
        """
        Apply ``delta`` to a user's points balance.

        Returns False without changing anything when the profile is missing
        or the balance would drop below zero.
        """
        statement = update(Profile).where(Profile.user_id == user_id)
        if delta < 0:
            statement = statement.where(Profile.points >= -delta)
        try:
            result = self.db.execute(
                statement.values(points=Profile.points + delta).execution_options(
                    synchronize_session="fetch"
                )
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating points for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to update points: {str(e)}") from e
        return result.rowcount > 0
