"""Subscription model: one current subscription per user."""

from enum import Enum

from sqlalchemy import Column, DateTime, Index, String
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class SubscriptionPlan(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONE_TIME = "one-time"
    STANDARD = "standard"
    PREMIUM = "premium"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    UNPAID = "unpaid"
    CANCELED = "canceled"


# Statuses that grant booking access.
ACCESS_GRANTING_STATUSES = (SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value)


class Subscription(Base):
    """
    A user's current subscription.

    Written by payment webhook handlers elsewhere; the booking core only reads it.
    """

    __tablename__ = "subscriptions"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    user_id = Column(String(26), nullable=False, unique=True)
    subscription_plan = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value)
    current_period_start = Column(DateTime(timezone=True), nullable=True)
    current_period_end = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (Index("ix_subscriptions_user_status", "user_id", "status"),)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Subscription user={self.user_id} plan={self.subscription_plan} {self.status}>"
