from .base import BaseModel
from .plan import PlanTier, PlanCatalog, PlanDefinition, PLAN_NAMES, PLAN_RANKS
from .subscription import Subscription, SubscriptionStatus
from .coupon import Coupon, DiscountType, normalize_code
from .coupon_redemption import CouponRedemption
from .registration import Registration
from .usage import (
    UsageStatus,
    TrackedUsage,
    ImplicitFreeUsage,
    MeteredUsage,
    calculate_usage_status,
    calculate_usage_percentage,
)

__all__ = [
    "BaseModel",
    "PlanTier",
    "PlanCatalog",
    "PlanDefinition",
    "PLAN_NAMES",
    "PLAN_RANKS",
    "Subscription",
    "SubscriptionStatus",
    "Coupon",
    "DiscountType",
    "normalize_code",
    "CouponRedemption",
    "Registration",
    "UsageStatus",
    "TrackedUsage",
    "ImplicitFreeUsage",
    "MeteredUsage",
    "calculate_usage_status",
    "calculate_usage_percentage",
]
