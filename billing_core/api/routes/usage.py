"""Usage API Routes

Registration limit checks, usage metrics and registration admission.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from billing_core.api.error import ClientError, status_code_for
from billing_core.api.schemas.subscription_request import RegistrationRequestSchema
from billing_core.app.use_cases.subscription import (
    RecordRegistration,
    UsageDisplay,
    UsageLimitChecker,
)
from billing_core.app.use_cases.subscription.dtos import (
    RecordRegistrationCommandDTO,
    RegistrationResponseDTO,
    UsageDisplayDTO,
    UsageLimitResultDTO,
)
from billing_core.adapter.repositories import (
    SqlAlchemyRegistrationRepository,
    SqlAlchemySubscriptionRepository,
)
from billing_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from billing_core.depends import get_config, get_plan_catalog, get_session
from billing_core.domain.plan import PlanCatalog

router = APIRouter(prefix="/billing/organizations/{organization_id}", tags=["Usage"])


@router.get("/usage", response_model=UsageDisplayDTO)
async def get_usage(
    organization_id: str,
    session: AsyncSession = Depends(get_session),
    plan_catalog: PlanCatalog = Depends(get_plan_catalog),
):
    """
    Usage metrics for the dashboard usage bar.

    **Returns:**
    - 200: current count, limit, rounded percentage, status bucket
      (ok / warning / critical) and remaining registrations
    """
    use_case = UsageDisplay(
        SqlAlchemySubscriptionRepository(session),
        SqlAlchemyRegistrationRepository(session),
        plan_catalog,
    )
    return await use_case.get_usage_display(organization_id)


@router.get("/usage/can-register", response_model=UsageLimitResultDTO)
async def can_register(
    organization_id: str,
    session: AsyncSession = Depends(get_session),
    plan_catalog: PlanCatalog = Depends(get_plan_catalog),
    config=Depends(get_config),
):
    """
    Read-only check whether one more registration would be admitted.

    Blocked checks still return 200 with `allowed: false`, a message and the
    upgrade URL.
    """
    use_case = UsageLimitChecker(
        SqlAlchemySubscriptionRepository(session),
        SqlAlchemyRegistrationRepository(session),
        plan_catalog,
        upgrade_url=config.UPGRADE_URL,
    )
    return await use_case.can_register(organization_id)


@router.post(
    "/registrations",
    response_model=RegistrationResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        402: {
            "description": "Registration limit reached",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "REGISTRATION_LIMIT_REACHED",
                            "message": "Registration limit reached. The free plan allows 100 registrations. Please upgrade to continue."
                        },
                        "upgrade_url": "/pricing"
                    }
                }
            }
        }
    }
)
async def record_registration(
    organization_id: str,
    request: RegistrationRequestSchema,
    session: AsyncSession = Depends(get_session),
    plan_catalog: PlanCatalog = Depends(get_plan_catalog),
    config=Depends(get_config),
):
    """
    Admit one registration if the organization is under its plan limit.

    **Returns:**
    - 201: registration recorded, counter incremented
    - 402: limit reached, nothing written
    """
    uow = SqlAlchemyUnitOfWork(session)
    use_case = RecordRegistration(
        uow,
        SqlAlchemySubscriptionRepository(session),
        SqlAlchemyRegistrationRepository(session),
        plan_catalog,
        upgrade_url=config.UPGRADE_URL,
    )

    command = RecordRegistrationCommandDTO(
        organization_id=organization_id,
        qr_code_set_id=request.qr_code_set_id,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(
            result.error,
            status_code=status_code_for(result.error),
            extra={"upgrade_url": config.UPGRADE_URL},
        )

    return result.value
