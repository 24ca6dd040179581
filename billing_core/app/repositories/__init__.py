from .subscription_repository import SubscriptionRepository
from .registration_repository import RegistrationRepository
from .coupon_repository import CouponRepository
from .coupon_redemption_repository import CouponRedemptionRepository

__all__ = [
    "SubscriptionRepository",
    "RegistrationRepository",
    "CouponRepository",
    "CouponRedemptionRepository",
]
