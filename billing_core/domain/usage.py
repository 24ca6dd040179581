"""Metered usage

Usage status bucketing and the two ways an organization's registrations are
metered: against a tracked Subscription row, or on the implicit free tier
(no active row) by counting live registration records.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Union

from billing_core.domain.plan import PlanTier
from billing_core.domain.subscription import Subscription

WARNING_THRESHOLD = 80
CRITICAL_THRESHOLD = 95


class UsageStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


def calculate_usage_status(percentage: float) -> UsageStatus:
    if percentage >= CRITICAL_THRESHOLD:
        return UsageStatus.CRITICAL
    if percentage >= WARNING_THRESHOLD:
        return UsageStatus.WARNING
    return UsageStatus.OK


def calculate_usage_percentage(current_count: int, limit: int) -> int:
    """Rounded (half-up) percentage, uncapped; a zero limit yields 0"""
    if limit <= 0:
        return 0
    ratio = Decimal(current_count) * 100 / Decimal(limit)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def remaining_registrations(current_count: int, limit: int) -> int:
    return max(0, limit - current_count)


@dataclass(frozen=True)
class TrackedUsage:
    """Usage counted by an active Subscription row"""

    subscription: Subscription

    @property
    def plan_tier(self) -> PlanTier:
        return PlanTier(self.subscription.plan_tier)

    @property
    def limit(self) -> int:
        return int(self.subscription.registration_limit)

    @property
    def current_count(self) -> int:
        return int(self.subscription.current_registration_count or 0)

    @property
    def subscription_id(self) -> Optional[int]:
        return self.subscription.id


@dataclass(frozen=True)
class ImplicitFreeUsage:
    """No active Subscription row: free tier, live registration count"""

    live_count: int
    limit: int
    plan_tier: PlanTier = PlanTier.FREE
    subscription_id: Optional[int] = None

    @property
    def current_count(self) -> int:
        return self.live_count


MeteredUsage = Union[TrackedUsage, ImplicitFreeUsage]
