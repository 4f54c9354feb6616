# backend/thrive/repositories/__init__.py
"""
Repository Pattern Implementation

Key Components:
- BaseRepository: Foundation for all repositories
- IRepository: Interface defining required methods for all repositories
- RepositoryFactory: Factory for creating repository instances
- SessionRepository: Live sessions and atomic participant counters
- BookingRepository: Booking history, active bookings and monthly counts
- SubscriptionRepository: Current subscription lookup
- ProfileRepository: Points balance with atomic updates
- ActivityRepository: Recent activity feed

Usage:
    from thrive.repositories import RepositoryFactory

    bookings = RepositoryFactory.create_booking_repository(db)
    active = bookings.find_active_by_user_id(user_id)
"""

from .activity_repository import ActivityRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .profile_repository import ProfileRepository
from .session_repository import SessionRepository
from .subscription_repository import SubscriptionRepository

__all__ = [
    "ActivityRepository",
    "BaseRepository",
    "BookingRepository",
    "IRepository",
    "ProfileRepository",
    "RepositoryFactory",
    "SessionRepository",
    "SubscriptionRepository",
]
