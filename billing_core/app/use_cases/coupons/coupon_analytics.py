"""CouponAnalytics Use Case

Aggregate redemption metrics for one coupon or all coupons.
"""

from typing import Optional
from billing_core.app.repositories.coupon_redemption_repository import CouponRedemptionRepository
from .dtos import CouponAnalyticsDTO, TopUserDTO

TOP_USERS_LIMIT = 10


class CouponAnalytics:
    def __init__(self, redemption_repo: CouponRedemptionRepository):
        self.redemption_repo = redemption_repo

    async def get_coupon_analytics(self, coupon_id: Optional[int] = None) -> CouponAnalyticsDTO:
        """
        Redemption count, total and average discount, redemptions per coupon
        in scope, and the top 10 users by redemption count
        """
        total_redemptions, total_discount, average_discount, coupon_count = (
            await self.redemption_repo.summarize(coupon_id)
        )
        top_users = await self.redemption_repo.top_users(coupon_id, limit=TOP_USERS_LIMIT)

        redemption_rate = total_redemptions / coupon_count if coupon_count else 0.0

        return CouponAnalyticsDTO(
            total_redemptions=total_redemptions,
            total_discount_given=total_discount,
            average_discount=float(average_discount or 0),
            redemption_rate=float(redemption_rate),
            top_users=[
                TopUserDTO(user_id=user_id, redemptions=redemptions, total_discount=total)
                for user_id, redemptions, total in top_users
            ],
        )
