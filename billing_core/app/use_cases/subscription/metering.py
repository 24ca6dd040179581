"""Resolve how an organization's registrations are metered"""

from billing_core.app.repositories.registration_repository import RegistrationRepository
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.plan import PlanCatalog
from billing_core.domain.subscription import SubscriptionStatus
from billing_core.domain.usage import ImplicitFreeUsage, MeteredUsage, TrackedUsage


async def resolve_metered_usage(
    organization_id: str,
    subscription_repo: SubscriptionRepository,
    registration_repo: RegistrationRepository,
    plan_catalog: PlanCatalog,
    for_update: bool = False,
) -> MeteredUsage:
    """
    Active subscription row -> TrackedUsage; otherwise the implicit free
    tier with a live count of registration records.
    """
    subscription = await subscription_repo.get_current(
        organization_id, status=SubscriptionStatus.ACTIVE, for_update=for_update
    )
    if subscription is not None:
        return TrackedUsage(subscription=subscription)

    live_count = await registration_repo.count_by_organization(organization_id)
    return ImplicitFreeUsage(live_count=live_count, limit=plan_catalog.free_limit)
