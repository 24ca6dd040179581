"""SQLAlchemy Coupon Redemption Repository Implementation

Append-only persistence and aggregate queries for coupon analytics.
"""

from typing import Optional, List, Tuple
from sqlalchemy import distinct, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from billing_core.app.repositories.coupon_redemption_repository import CouponRedemptionRepository
from billing_core.domain.coupon import Coupon
from billing_core.domain.coupon_redemption import CouponRedemption


class SqlAlchemyCouponRedemptionRepository(CouponRedemptionRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, redemption: CouponRedemption) -> CouponRedemption:
        self.session.add(redemption)
        await self.session.flush()
        await self.session.refresh(redemption)
        return redemption

    async def summarize(self, coupon_id: Optional[int] = None) -> Tuple[int, int, float, int]:
        """
        Coupons LEFT JOIN redemptions, so coupons never redeemed still count
        towards the number of coupons in scope
        """
        stmt = (
            select(
                func.count(CouponRedemption.id),
                func.coalesce(func.sum(CouponRedemption.discount_applied), 0),
                func.coalesce(func.avg(CouponRedemption.discount_applied), 0),
                func.count(distinct(Coupon.id)),
            )
            .select_from(Coupon)
            .outerjoin(CouponRedemption, CouponRedemption.coupon_id == Coupon.id)
        )

        if coupon_id is not None:
            stmt = stmt.where(Coupon.id == coupon_id)

        result = await self.session.execute(stmt)
        count, total, average, coupons = result.one()
        return int(count or 0), int(total or 0), float(average or 0), int(coupons or 0)

    async def top_users(
        self, coupon_id: Optional[int] = None, limit: int = 10
    ) -> List[Tuple[str, int, int]]:
        redemptions = func.count(CouponRedemption.id).label("redemptions")
        total_discount = func.coalesce(func.sum(CouponRedemption.discount_applied), 0).label(
            "total_discount"
        )

        stmt = select(CouponRedemption.user_id, redemptions, total_discount)

        if coupon_id is not None:
            stmt = stmt.where(CouponRedemption.coupon_id == coupon_id)

        stmt = (
            stmt.group_by(CouponRedemption.user_id)
            .order_by(redemptions.desc(), CouponRedemption.user_id)
            .limit(limit)
        )

        result = await self.session.execute(stmt)
        return [(user_id, int(count), int(total)) for user_id, count, total in result.all()]
