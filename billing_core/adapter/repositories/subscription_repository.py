"""SQLAlchemy Subscription Repository Implementation

Implements subscription persistence using SQLAlchemy async session.
"""

from datetime import datetime
from typing import Optional, List
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.subscription import Subscription, SubscriptionStatus


class SqlAlchemySubscriptionRepository(SubscriptionRepository):
    """
    SQLAlchemy implementation of SubscriptionRepository

    Features:
    - Most-recent-row selection by current_period_start
    - Pessimistic locking via SELECT FOR UPDATE
    - Single-statement conditional updates for the registration counter and
      finalization (affected row count decides success)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_current(
        self,
        organization_id: str,
        status: Optional[SubscriptionStatus] = None,
        for_update: bool = False,
    ) -> Optional[Subscription]:
        stmt = select(Subscription).where(Subscription.organization_id == organization_id)

        if status:
            stmt = stmt.where(Subscription.status == status)

        stmt = stmt.order_by(
            Subscription.current_period_start.desc(), Subscription.id.desc()
        ).limit(1)

        if for_update:
            stmt = stmt.with_for_update()

        # Conditional updates bypass the identity map, always reload the row
        stmt = stmt.execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        stmt = (
            select(Subscription)
            .where(Subscription.id == subscription_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, subscription: Subscription) -> Subscription:
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def update(self, subscription: Subscription) -> Subscription:
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def increment_registration_count(self, subscription_id: int) -> bool:
        stmt = (
            update(Subscription)
            .where(Subscription.id == subscription_id)
            .where(Subscription.status == SubscriptionStatus.ACTIVE)
            .where(Subscription.current_registration_count < Subscription.registration_limit)
            .values(
                current_registration_count=Subscription.current_registration_count + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def find_expired_cancellations(self, now: datetime) -> List[Subscription]:
        stmt = (
            select(Subscription)
            .where(Subscription.status == SubscriptionStatus.CANCELING)
            .where(Subscription.current_period_end < now)
            .order_by(Subscription.current_period_end.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_canceled(self, subscription_id: int, now: datetime) -> bool:
        stmt = (
            update(Subscription)
            .where(Subscription.id == subscription_id)
            .where(Subscription.status == SubscriptionStatus.CANCELING)
            .values(status=SubscriptionStatus.CANCELED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
