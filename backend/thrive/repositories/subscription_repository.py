# backend/thrive/repositories/subscription_repository.py
"""Read access to user subscriptions for the booking core."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.subscription import ACCESS_GRANTING_STATUSES, Subscription
from .base_repository import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    def __init__(self, db: Session):
        super().__init__(db, Subscription)

    def find_by_user_id(self, user_id: str) -> Optional[Subscription]:
        return self.find_one_by(user_id=user_id)

    def find_active_by_user_id(self, user_id: str) -> Optional[Subscription]:
        """The user's subscription if it is ``active`` or ``trialing``, else None."""
        query = self._build_query().filter(
            Subscription.user_id == user_id,
            Subscription.status.in_(ACCESS_GRANTING_STATUSES),
        )
        results = self._execute_query(query.limit(1))
        return results[0] if results else None
