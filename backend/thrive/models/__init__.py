"""
Database models for the Thrive booking backend.

- LiveSession: scheduled live sessions and their capacity counters
- Booking: a user's seat in a session
- Subscription: the user's current plan and status
- Profile: points balance
- RecentActivity: activity feed entries
"""

from .activity import ActivityType, RecentActivity
from .booking import Booking, BookingStatus
from .profile import Profile
from .session import LiveSession, SessionType
from .subscription import Subscription, SubscriptionPlan, SubscriptionStatus

__all__ = [
    "ActivityType",
    "Booking",
    "BookingStatus",
    "LiveSession",
    "Profile",
    "RecentActivity",
    "SessionType",
    "Subscription",
    "SubscriptionPlan",
    "SubscriptionStatus",
]
