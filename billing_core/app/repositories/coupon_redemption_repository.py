"""Coupon Redemption Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional, List, Tuple
from billing_core.domain.coupon_redemption import CouponRedemption


class CouponRedemptionRepository(ABC):
    """
    Repository interface for CouponRedemption persistence

    Redemptions are append-only: there is no update or delete.
    """

    @abstractmethod
    async def create(self, redemption: CouponRedemption) -> CouponRedemption:
        pass

    @abstractmethod
    async def summarize(self, coupon_id: Optional[int] = None) -> Tuple[int, int, float, int]:
        """
        Aggregate redemptions across coupons in scope

        Args:
            coupon_id: Restrict to one coupon (None = every coupon)

        Returns:
            (redemption count, total discount, average discount,
             distinct coupons in scope)
        """
        pass

    @abstractmethod
    async def top_users(
        self, coupon_id: Optional[int] = None, limit: int = 10
    ) -> List[Tuple[str, int, int]]:
        """
        Users with the most redemptions

        Returns:
            List of (user_id, redemption count, total discount), most
            redemptions first
        """
        pass
