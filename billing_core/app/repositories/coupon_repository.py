"""Coupon Repository Interface

Defines the contract for coupon persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from billing_core.domain.coupon import Coupon


class CouponRepository(ABC):
    """Repository interface for Coupon persistence"""

    @abstractmethod
    async def create(self, coupon: Coupon) -> Coupon:
        pass

    @abstractmethod
    async def get_by_id(self, coupon_id: int) -> Optional[Coupon]:
        pass

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Coupon]:
        """
        Retrieve coupon by its normalized code

        Args:
            code: Coupon code, already trimmed and upper-cased

        Returns:
            Coupon if found (active or not), None otherwise
        """
        pass

    @abstractmethod
    async def update(self, coupon: Coupon) -> Coupon:
        pass

    @abstractmethod
    async def list(
        self, active: Optional[bool] = None, created_by: Optional[str] = None
    ) -> List[Coupon]:
        """
        List coupons, newest first

        Args:
            active: Optional filter on the active flag
            created_by: Optional filter on the creating admin
        """
        pass

    @abstractmethod
    async def increment_uses(self, coupon_id: int) -> bool:
        """
        Atomically add one use if the coupon is not exhausted

        Returns:
            True if incremented, False if max_uses was already reached
        """
        pass
