"""SQLAlchemy Coupon Repository Implementation

Implements coupon persistence using SQLAlchemy async session.
"""

from typing import Optional, List
from datetime import datetime
from sqlalchemy import or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from billing_core.app.repositories.coupon_repository import CouponRepository
from billing_core.domain.coupon import Coupon


class SqlAlchemyCouponRepository(CouponRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, coupon: Coupon) -> Coupon:
        self.session.add(coupon)
        await self.session.flush()
        await self.session.refresh(coupon)
        return coupon

    async def get_by_id(self, coupon_id: int) -> Optional[Coupon]:
        stmt = (
            select(Coupon)
            .where(Coupon.id == coupon_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_code(self, code: str) -> Optional[Coupon]:
        stmt = (
            select(Coupon)
            .where(Coupon.code == code)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, coupon: Coupon) -> Coupon:
        self.session.add(coupon)
        await self.session.flush()
        await self.session.refresh(coupon)
        return coupon

    async def list(
        self, active: Optional[bool] = None, created_by: Optional[str] = None
    ) -> List[Coupon]:
        stmt = select(Coupon)

        if active is not None:
            stmt = stmt.where(Coupon.active == active)
        if created_by:
            stmt = stmt.where(Coupon.created_by == created_by)

        stmt = stmt.order_by(Coupon.created_at.desc(), Coupon.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def increment_uses(self, coupon_id: int) -> bool:
        """
        Conditional increment: only succeeds while current_uses < max_uses
        (or max_uses is unset)
        """
        stmt = (
            update(Coupon)
            .where(Coupon.id == coupon_id)
            .where(or_(Coupon.max_uses.is_(None), Coupon.current_uses < Coupon.max_uses))
            .values(current_uses=Coupon.current_uses + 1, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
