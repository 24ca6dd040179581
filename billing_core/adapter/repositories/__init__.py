from .subscription_repository import SqlAlchemySubscriptionRepository
from .registration_repository import SqlAlchemyRegistrationRepository
from .coupon_repository import SqlAlchemyCouponRepository
from .coupon_redemption_repository import SqlAlchemyCouponRedemptionRepository

__all__ = [
    "SqlAlchemySubscriptionRepository",
    "SqlAlchemyRegistrationRepository",
    "SqlAlchemyCouponRepository",
    "SqlAlchemyCouponRedemptionRepository",
]
