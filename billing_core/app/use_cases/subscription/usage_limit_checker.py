"""UsageLimitChecker Use Case

Decides whether an organization may record one more registration.
"""

import logging
from billing_core.app.repositories.registration_repository import RegistrationRepository
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.plan import PlanCatalog
from billing_core.domain.usage import ImplicitFreeUsage, MeteredUsage, remaining_registrations
from .dtos import UsageLimitResultDTO
from .metering import resolve_metered_usage

logger = logging.getLogger(__name__)

DEFAULT_UPGRADE_URL = "/pricing"


def evaluate_usage_limit(usage: MeteredUsage, upgrade_url: str = DEFAULT_UPGRADE_URL) -> UsageLimitResultDTO:
    """Pure limit decision: allowed iff current_count < limit"""
    current_count = usage.current_count
    limit = usage.limit
    allowed = current_count < limit

    result = UsageLimitResultDTO(
        allowed=allowed,
        current_count=current_count,
        limit=limit,
        remaining=remaining_registrations(current_count, limit),
        plan_tier=usage.plan_tier,
    )

    if not allowed:
        if isinstance(usage, ImplicitFreeUsage):
            plan_phrase = "The free plan"
        else:
            plan_phrase = f"Your {usage.plan_tier.value} plan"
        result.message = (
            f"Registration limit reached. {plan_phrase} allows {limit} registrations. "
            f"Please upgrade to continue."
        )
        result.upgrade_url = upgrade_url

    return result


class UsageLimitChecker:
    """
    Use Case: Check the registration limit before a registration is persisted

    Business Rules:
    1. Active subscription row: its tier, limit and cached counter
    2. No active row: implicit free tier, live count of registrations
    3. allowed iff count < limit (strict)

    The check is read-only. RecordRegistration performs the check and the
    increment atomically.
    """

    def __init__(
        self,
        subscription_repo: SubscriptionRepository,
        registration_repo: RegistrationRepository,
        plan_catalog: PlanCatalog,
        upgrade_url: str = DEFAULT_UPGRADE_URL,
    ):
        self.subscription_repo = subscription_repo
        self.registration_repo = registration_repo
        self.plan_catalog = plan_catalog
        self.upgrade_url = upgrade_url

    async def can_register(self, organization_id: str) -> UsageLimitResultDTO:
        usage = await resolve_metered_usage(
            organization_id,
            self.subscription_repo,
            self.registration_repo,
            self.plan_catalog,
        )
        result = evaluate_usage_limit(usage, self.upgrade_url)

        if not result.allowed:
            logger.info(
                f"Registration limit reached for organization {organization_id}: "
                f"{result.current_count}/{result.limit} ({result.plan_tier.value})"
            )

        return result
