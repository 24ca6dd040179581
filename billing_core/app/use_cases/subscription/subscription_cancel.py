"""SubscriptionCancel Use Case

Previews and executes a cancellation that keeps access until the current
billing period ends.
"""

import logging
import math
from datetime import datetime
from typing import Optional
from billing_core.libs.result import Result, Return
from billing_core.app.services.unit_of_work import UnitOfWork
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.errors import (
    BillingError,
    BillingValidationError,
    StateConflictError,
    SubscriptionNotFoundError,
)
from billing_core.domain.plan import PlanCatalog, PlanTier
from billing_core.domain.subscription import Subscription, SubscriptionStatus
from .dtos import CancelPreviewDTO, CancelResultDTO

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def days_until(end: datetime, now: datetime) -> int:
    """Whole days left, rounded up and floored at 0"""
    seconds = (end - now).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


class SubscriptionCancel:
    """
    Use Case: Cancel a paid subscription at period end

    Business Rules:
    1. Only the most recent subscription row is considered
    2. Free plan cannot be cancelled
    3. execute_cancel moves active -> canceling, never straight to canceled;
       the finalizer closes the row once current_period_end has passed
    4. No refunds are modeled
    5. Registrations are preserved; counts above the free limit block new
       registrations after the period ends
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        plan_catalog: PlanCatalog,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.plan_catalog = plan_catalog

    async def can_cancel(self, organization_id: str) -> bool:
        subscription = await self.subscription_repo.get_current(organization_id)

        if subscription is None:
            return False
        if subscription.status != SubscriptionStatus.ACTIVE:
            return False
        return PlanTier(subscription.plan_tier) != PlanTier.FREE

    async def preview_cancel(
        self, organization_id: str, now: Optional[datetime] = None
    ) -> CancelPreviewDTO:
        """
        Preview access end date and data impact of cancelling

        Raises:
            SubscriptionNotFoundError: no subscription row
            BillingValidationError: FREE_PLAN_NOT_CANCELABLE
        """
        now = now or datetime.utcnow()
        subscription = await self.subscription_repo.get_current(organization_id)
        self._ensure_cancelable_plan(subscription)

        catalog = self.plan_catalog
        current_plan = PlanTier(subscription.plan_tier)
        current_count = int(subscription.current_registration_count or 0)
        free_limit = catalog.free_limit
        access_until = subscription.current_period_end

        will_exceed_free_limit = current_count > free_limit
        plan_name = catalog.display_name(current_plan)

        summary = f"Your {plan_name} subscription will remain active until {access_until:%Y-%m-%d}."
        if will_exceed_free_limit:
            summary += (
                f" Note: You have {current_count} registrations, which will exceed the "
                f"Free plan limit of {free_limit}. Your data will be preserved, but new "
                f"registrations will be blocked."
            )
        else:
            summary += f" After that, you'll be on the Free plan with up to {free_limit} registrations."

        return CancelPreviewDTO(
            current_plan=current_plan,
            current_plan_name=plan_name,
            current_limit=subscription.registration_limit,
            current_registration_count=current_count,
            access_until=access_until,
            days_remaining=days_until(access_until, now),
            will_exceed_free_limit=will_exceed_free_limit,
            registrations_over_free_limit=max(0, current_count - free_limit),
            refund_amount=0,
            summary=summary,
        )

    async def execute_cancel(
        self, organization_id: str, reason: Optional[str] = None
    ) -> Result[CancelResultDTO]:
        try:
            subscription = await self.subscription_repo.get_current(
                organization_id, for_update=True
            )
            self._ensure_cancelable_plan(subscription)

            if subscription.status in (SubscriptionStatus.CANCELING, SubscriptionStatus.CANCELED):
                raise StateConflictError(
                    "Subscription is already cancelled or canceling",
                    code="ALREADY_CANCELED",
                )
        except BillingError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())

        now = datetime.utcnow()
        access_until = subscription.current_period_end

        try:
            subscription.status = SubscriptionStatus.CANCELING
            subscription.cancellation_reason = reason
            subscription.cancelled_at = now
            subscription.updated_at = now
            subscription = await self.subscription_repo.update(subscription)

            await self.uow.commit()

        except Exception:
            await self.uow.rollback()
            raise

        logger.info(
            f"Subscription {subscription.id} for organization {organization_id} is canceling "
            f"(access until {access_until.isoformat()}, reason={reason})"
        )

        return Return.ok(
            CancelResultDTO(
                subscription_id=subscription.id,
                message=(
                    f"Your subscription has been cancelled. "
                    f"You'll have access until {access_until:%Y-%m-%d}."
                ),
                access_until=access_until,
            )
        )

    def _ensure_cancelable_plan(self, subscription: Optional[Subscription]) -> None:
        if subscription is None:
            raise SubscriptionNotFoundError("No active subscription found")

        if PlanTier(subscription.plan_tier) == PlanTier.FREE:
            raise BillingValidationError(
                "Cannot cancel free plan", code="FREE_PLAN_NOT_CANCELABLE"
            )
