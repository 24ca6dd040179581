"""ProvisionSubscription Use Case

Pre-provisions a subscription row for an organization at signup.
"""

import logging
from datetime import datetime, timedelta
from billing_core.libs.result import Result, Return, Error
from billing_core.app.services.unit_of_work import UnitOfWork
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.plan import PlanCatalog
from billing_core.domain.subscription import Subscription, SubscriptionStatus
from .dtos import ProvisionSubscriptionCommandDTO, SubscriptionResponseDTO
from .plan_upgrade import DEFAULT_PERIOD_DAYS

logger = logging.getLogger(__name__)


def to_subscription_dto(subscription: Subscription) -> SubscriptionResponseDTO:
    return SubscriptionResponseDTO(
        subscription_id=subscription.id,
        organization_id=subscription.organization_id,
        plan_tier=subscription.plan_tier,
        status=subscription.status,
        registration_limit=subscription.registration_limit,
        current_registration_count=subscription.current_registration_count or 0,
        amount=subscription.amount,
        currency=subscription.currency,
        current_period_start=subscription.current_period_start,
        current_period_end=subscription.current_period_end,
    )


class ProvisionSubscription:
    """
    Use Case: Create the first subscription row for an organization

    Business Rules:
    1. Limit and amount come from the plan catalog
    2. Counter starts at 0, period is period_days long from now
    3. Rejected when the organization already has an active or canceling
       row (at most one non-terminal row per organization)
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

    async def execute(self, command: ProvisionSubscriptionCommandDTO) -> Result[SubscriptionResponseDTO]:
        try:
            existing = await self.subscription_repo.get_current(
                command.organization_id, for_update=True
            )
            if existing is not None and existing.status != SubscriptionStatus.CANCELED:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_EXISTS",
                        message=f"Organization {command.organization_id} already has a subscription",
                        reason=f"subscription_id={existing.id}, status={SubscriptionStatus(existing.status).value}",
                    )
                )

            now = datetime.utcnow()
            subscription = await self.subscription_repo.create(
                Subscription(
                    organization_id=command.organization_id,
                    plan_tier=command.plan_tier,
                    status=SubscriptionStatus.ACTIVE,
                    registration_limit=self.plan_catalog.registration_limit(command.plan_tier),
                    current_registration_count=0,
                    amount=self.plan_catalog.monthly_price(command.plan_tier),
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
            f"Provisioned {command.plan_tier.value} subscription {subscription.id} "
            f"for organization {command.organization_id}"
        )
        return Return.ok(to_subscription_dto(subscription))
