"""PlanUpgrade Use Case

Previews and executes a move to a strictly higher plan tier.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple
from billing_core.libs.result import Result, Return
from billing_core.app.services.unit_of_work import UnitOfWork
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.errors import BillingError, BillingValidationError, StateConflictError
from billing_core.domain.plan import PlanCatalog, PlanTier, format_cents
from billing_core.domain.subscription import Subscription, SubscriptionStatus
from .dtos import UpgradePreviewDTO, UpgradeResultDTO

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 30


class PlanUpgrade:
    """
    Use Case: Upgrade an organization to a higher plan tier

    Business Rules:
    1. Valid upgrade iff rank(target) > rank(current); same tier and any
       downgrade are rejected
    2. Current tier comes from the active subscription row, else free
    3. A full month of the target price is due immediately (no proration)
    4. Existing row: tier, limit and amount change in place, the
       registration counter is preserved
    5. No row: a new one starts with count 0 and a 30-day period
    6. A canceling row blocks upgrades until the finalizer closes it, so an
       organization never has two non-terminal rows

    preview_upgrade raises BillingError; execute_upgrade returns an error
    Result instead.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        plan_catalog: PlanCatalog,
        period_days: int = DEFAULT_PERIOD_DAYS,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.plan_catalog = plan_catalog
        self.period_days = period_days

    def is_valid_upgrade(self, current_plan: PlanTier, target_plan: PlanTier) -> bool:
        return self.plan_catalog.rank(target_plan) > self.plan_catalog.rank(current_plan)

    async def preview_upgrade(self, organization_id: str, target_plan: PlanTier) -> UpgradePreviewDTO:
        """
        Preview pricing and limit changes for an upgrade

        Raises:
            StateConflictError: SAME_PLAN, SUBSCRIPTION_CANCELING
            BillingValidationError: INVALID_UPGRADE (downgrade)
        """
        target_plan = PlanTier(target_plan)
        _, current_plan = await self._resolve_current(organization_id)
        self._validate(current_plan, target_plan)

        catalog = self.plan_catalog
        current_monthly_price = catalog.monthly_price(current_plan)
        new_monthly_price = catalog.monthly_price(target_plan)

        return UpgradePreviewDTO(
            current_plan=current_plan,
            current_plan_name=catalog.display_name(current_plan),
            current_limit=catalog.registration_limit(current_plan),
            target_plan=target_plan,
            target_plan_name=catalog.display_name(target_plan),
            target_limit=catalog.registration_limit(target_plan),
            current_monthly_price=current_monthly_price,
            new_monthly_price=new_monthly_price,
            price_difference=new_monthly_price - current_monthly_price,
            amount_due_now=new_monthly_price,
            effective_immediately=True,
            summary=self._summary(current_plan, target_plan),
        )

    async def execute_upgrade(self, organization_id: str, target_plan: PlanTier) -> Result[UpgradeResultDTO]:
        target_plan = PlanTier(target_plan)

        try:
            subscription, current_plan = await self._resolve_current(
                organization_id, for_update=True
            )
            self._validate(current_plan, target_plan)
        except BillingError as e:
            await self.uow.rollback()
            return Return.err(e.to_error())

        new_limit = self.plan_catalog.registration_limit(target_plan)
        new_amount = self.plan_catalog.monthly_price(target_plan)
        now = datetime.utcnow()

        try:
            if subscription is not None:
                subscription.plan_tier = target_plan
                subscription.registration_limit = new_limit
                subscription.amount = new_amount
                subscription.updated_at = now
                subscription = await self.subscription_repo.update(subscription)
            else:
                subscription = await self.subscription_repo.create(
                    Subscription(
                        organization_id=organization_id,
                        plan_tier=target_plan,
                        status=SubscriptionStatus.ACTIVE,
                        registration_limit=new_limit,
                        current_registration_count=0,
                        amount=new_amount,
                        currency=self.plan_catalog.currency,
                        current_period_start=now,
                        current_period_end=now + timedelta(days=self.period_days),
                        created_at=now,
                        updated_at=now,
                    )
                )

            await self.uow.commit()

        except Exception:
            await self.uow.rollback()
            raise

        logger.info(
            f"Organization {organization_id} upgraded from {current_plan.value} "
            f"to {target_plan.value} (subscription {subscription.id})"
        )

        return Return.ok(
            UpgradeResultDTO(
                subscription_id=subscription.id,
                message=f"Successfully upgraded to {self.plan_catalog.display_name(target_plan)} plan",
                new_plan_tier=target_plan,
                new_limit=new_limit,
            )
        )

    async def _resolve_current(
        self, organization_id: str, for_update: bool = False
    ) -> Tuple[Optional[Subscription], PlanTier]:
        subscription = await self.subscription_repo.get_current(
            organization_id, for_update=for_update
        )

        if subscription is None or subscription.status == SubscriptionStatus.CANCELED:
            return None, PlanTier.FREE

        if subscription.status == SubscriptionStatus.CANCELING:
            raise StateConflictError(
                f"Your subscription is canceling until {subscription.current_period_end:%Y-%m-%d}. "
                f"You can upgrade once the current period ends.",
                code="SUBSCRIPTION_CANCELING",
            )

        return subscription, PlanTier(subscription.plan_tier)

    def _validate(self, current_plan: PlanTier, target_plan: PlanTier) -> None:
        catalog = self.plan_catalog

        if current_plan == target_plan:
            raise StateConflictError(
                f"You are already on the {catalog.display_name(target_plan)} plan",
                code="SAME_PLAN",
            )

        if not self.is_valid_upgrade(current_plan, target_plan):
            raise BillingValidationError(
                f"Cannot downgrade from {catalog.display_name(current_plan)} "
                f"to {catalog.display_name(target_plan)}",
                code="INVALID_UPGRADE",
            )

    def _summary(self, current_plan: PlanTier, target_plan: PlanTier) -> str:
        catalog = self.plan_catalog
        current_name = catalog.display_name(current_plan)
        target_name = catalog.display_name(target_plan)
        new_price = format_cents(catalog.monthly_price(target_plan))

        if current_plan == PlanTier.FREE:
            return f"Upgrade from {current_name} to {target_name} for {new_price}/month"

        current_price = format_cents(catalog.monthly_price(current_plan))
        return f"Upgrade from {current_name} ({current_price}/mo) to {target_name} ({new_price}/mo)"
