"""Coupon use cases"""
from .coupon_engine import CouponEngine, discount_amount, MINIMUM_CHARGE_CENTS
from .coupon_admin import CouponAdmin
from .coupon_analytics import CouponAnalytics
from .dtos import (
    CouponDiscountDTO,
    CouponValidationDTO,
    TrackCouponUsageCommandDTO,
    RedemptionResponseDTO,
    CreateCouponCommandDTO,
    UpdateCouponCommandDTO,
    CouponDTO,
    TopUserDTO,
    CouponAnalyticsDTO,
)

__all__ = [
    "CouponEngine",
    "discount_amount",
    "MINIMUM_CHARGE_CENTS",
    "CouponAdmin",
    "CouponAnalytics",
    "CouponDiscountDTO",
    "CouponValidationDTO",
    "TrackCouponUsageCommandDTO",
    "RedemptionResponseDTO",
    "CreateCouponCommandDTO",
    "UpdateCouponCommandDTO",
    "CouponDTO",
    "TopUserDTO",
    "CouponAnalyticsDTO",
]
