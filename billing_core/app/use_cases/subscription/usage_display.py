"""UsageDisplay Use Case

UI-ready usage metrics for an organization.
"""

from billing_core.app.repositories.registration_repository import RegistrationRepository
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.plan import PlanCatalog
from billing_core.domain.usage import (
    MeteredUsage,
    calculate_usage_percentage,
    calculate_usage_status,
    remaining_registrations,
)
from .dtos import UsageDisplayDTO
from .metering import resolve_metered_usage


def build_usage_display(usage: MeteredUsage) -> UsageDisplayDTO:
    percentage = calculate_usage_percentage(usage.current_count, usage.limit)
    return UsageDisplayDTO(
        current_count=usage.current_count,
        limit=usage.limit,
        percentage=percentage,
        plan_tier=usage.plan_tier,
        status=calculate_usage_status(percentage),
        remaining=remaining_registrations(usage.current_count, usage.limit),
    )


class UsageDisplay:
    """
    Use Case: Usage percentage and status bucket for the dashboard

    Same data source resolution as UsageLimitChecker. The percentage is not
    capped, so legacy overage data can show more than 100.
    """

    def __init__(
        self,
        subscription_repo: SubscriptionRepository,
        registration_repo: RegistrationRepository,
        plan_catalog: PlanCatalog,
    ):
        self.subscription_repo = subscription_repo
        self.registration_repo = registration_repo
        self.plan_catalog = plan_catalog

    async def get_usage_display(self, organization_id: str) -> UsageDisplayDTO:
        usage = await resolve_metered_usage(
            organization_id,
            self.subscription_repo,
            self.registration_repo,
            self.plan_catalog,
        )
        return build_usage_display(usage)
