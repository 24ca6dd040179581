"""RecordRegistration Use Case

Admits one registration: limit check, registration insert and counter
increment in a single transaction.
"""

import logging
from billing_core.libs.result import Result, Return, Error
from billing_core.app.services.unit_of_work import UnitOfWork
from billing_core.app.repositories.registration_repository import RegistrationRepository
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.plan import PlanCatalog
from billing_core.domain.registration import Registration
from billing_core.domain.usage import TrackedUsage, remaining_registrations
from .dtos import RecordRegistrationCommandDTO, RegistrationResponseDTO
from .metering import resolve_metered_usage
from .usage_limit_checker import DEFAULT_UPGRADE_URL, evaluate_usage_limit

logger = logging.getLogger(__name__)

LIMIT_REACHED = "REGISTRATION_LIMIT_REACHED"


class RecordRegistration:
    """
    Use Case: Record a registration if the organization is under its limit

    Business Rules:
    1. Same admission rule as UsageLimitChecker (count < limit)
    2. Admission is serialized per organization before anything is read
    3. Tracked subscriptions: the row is locked (SELECT FOR UPDATE) and the
       counter is raised with a conditional increment; zero affected rows
       means the limit was reached
    4. Implicit free tier: the live registration count is the counter
    5. Nothing is written when the registration is rejected

    Flow:
    1. Take the per-organization admission lock
    2. Resolve metered usage with the subscription row locked
    3. Evaluate the limit
    4. Insert the registration record
    5. Conditionally increment the counter (tracked only)
    6. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        registration_repo: RegistrationRepository,
        plan_catalog: PlanCatalog,
        upgrade_url: str = DEFAULT_UPGRADE_URL,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.registration_repo = registration_repo
        self.plan_catalog = plan_catalog
        self.upgrade_url = upgrade_url

    async def execute(self, command: RecordRegistrationCommandDTO) -> Result[RegistrationResponseDTO]:
        try:
            await self.registration_repo.lock_organization(command.organization_id)

            usage = await resolve_metered_usage(
                command.organization_id,
                self.subscription_repo,
                self.registration_repo,
                self.plan_catalog,
                for_update=True,
            )

            check = evaluate_usage_limit(usage, self.upgrade_url)
            if not check.allowed:
                await self.uow.rollback()
                logger.info(
                    f"Rejected registration for organization {command.organization_id}: "
                    f"{check.current_count}/{check.limit}"
                )
                return Return.err(self._limit_error(check.message, check.current_count, check.limit))

            registration = await self.registration_repo.create(
                Registration(
                    organization_id=command.organization_id,
                    qr_code_set_id=command.qr_code_set_id,
                )
            )

            if isinstance(usage, TrackedUsage):
                incremented = await self.subscription_repo.increment_registration_count(
                    usage.subscription_id
                )
                if not incremented:
                    await self.uow.rollback()
                    return Return.err(
                        self._limit_error(
                            f"Registration limit reached. Your {usage.plan_tier.value} plan allows "
                            f"{usage.limit} registrations. Please upgrade to continue.",
                            usage.limit,
                            usage.limit,
                        )
                    )

            await self.uow.commit()

        except Exception:
            await self.uow.rollback()
            raise

        current_count = check.current_count + 1
        return Return.ok(
            RegistrationResponseDTO(
                registration_id=registration.id,
                organization_id=command.organization_id,
                plan_tier=usage.plan_tier,
                current_count=current_count,
                limit=usage.limit,
                remaining=remaining_registrations(current_count, usage.limit),
                registered_at=registration.registered_at,
            )
        )

    def _limit_error(self, message: str, current_count: int, limit: int) -> Error:
        return Error(
            code=LIMIT_REACHED,
            message=message,
            reason=f"current={current_count}, limit={limit}",
        )
