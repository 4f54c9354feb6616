"""Booking limits shared by the validation engine and the limits query."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, FrozenSet, Optional

from ..models.subscription import SubscriptionPlan

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

PREMIUM_TIER_PLANS: FrozenSet[SubscriptionPlan] = frozenset(
    {SubscriptionPlan.PREMIUM, SubscriptionPlan.MONTHLY, SubscriptionPlan.YEARLY}
)


@dataclass(frozen=True)
class PlanLimits:
    """Numeric limits for an active (non-trial) subscription."""

    tier: str
    max_active: int
    monthly_limit: Optional[int]
    can_access_all_types: bool


@dataclass(frozen=True)
class BookingPolicy:
    """
    Business limits for session bookings.

    One instance is injected into every component that evaluates limits so the
    eligibility check and the limits display cannot drift apart.
    """

    standard_plan_monthly_limit: int = 4
    standard_plan_active_limit: int = 4
    premium_plan_active_limit: int = 2
    trial_lifetime_limit: int = 1
    minimum_hours_notice: int = 24

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BookingPolicy":
        return cls(
            standard_plan_monthly_limit=settings.booking_standard_monthly_limit,
            standard_plan_active_limit=settings.booking_standard_active_limit,
            premium_plan_active_limit=settings.booking_premium_active_limit,
            trial_lifetime_limit=settings.booking_trial_lifetime_limit,
            minimum_hours_notice=settings.booking_minimum_hours_notice,
        )

    @staticmethod
    def is_premium_plan(plan: SubscriptionPlan | str) -> bool:
        """Unknown plan strings fall back to the standard tier."""
        try:
            return SubscriptionPlan(plan) in PREMIUM_TIER_PLANS
        except ValueError:
            logger.warning("Unknown subscription plan %r, applying standard limits", plan)
            return False

    def limits_for_plan(self, plan: SubscriptionPlan | str) -> PlanLimits:
        """Limits for a subscription in ``active`` status. Trials use trial_lifetime_limit."""
        if self.is_premium_plan(plan):
            return PlanLimits(
                tier="premium",
                max_active=self.premium_plan_active_limit,
                monthly_limit=None,
                can_access_all_types=True,
            )
        return PlanLimits(
            tier="standard",
            max_active=self.standard_plan_active_limit,
            monthly_limit=self.standard_plan_monthly_limit,
            can_access_all_types=False,
        )
