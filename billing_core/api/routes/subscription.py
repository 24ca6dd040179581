"""Subscription API Routes

Provisioning, upgrade preview/execute and cancel preview/execute.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from billing_core.api.error import ClientError, status_code_for
from billing_core.api.schemas.subscription_request import (
    CancelRequestSchema,
    ProvisionRequestSchema,
    UpgradeRequestSchema,
)
from billing_core.app.use_cases.subscription import (
    PlanUpgrade,
    ProvisionSubscription,
    SubscriptionCancel,
)
from billing_core.app.use_cases.subscription.dtos import (
    CancelPreviewDTO,
    CancelResultDTO,
    ProvisionSubscriptionCommandDTO,
    SubscriptionResponseDTO,
    UpgradePreviewDTO,
    UpgradeResultDTO,
)
from billing_core.adapter.repositories import SqlAlchemySubscriptionRepository
from billing_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from billing_core.depends import get_config, get_plan_catalog, get_session
from billing_core.domain.errors import BillingValidationError
from billing_core.domain.plan import PlanCatalog, PlanTier
from billing_core.libs.result import Error

router = APIRouter(
    prefix="/billing/organizations/{organization_id}/subscription", tags=["Subscription"]
)


def _plan_upgrade(session: AsyncSession, plan_catalog: PlanCatalog, config) -> PlanUpgrade:
    return PlanUpgrade(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySubscriptionRepository(session),
        plan_catalog,
        period_days=config.SUBSCRIPTION_PERIOD_DAYS,
    )


def _subscription_cancel(session: AsyncSession, plan_catalog: PlanCatalog) -> SubscriptionCancel:
    return SubscriptionCancel(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySubscriptionRepository(session),
        plan_catalog,
    )


@router.post("", response_model=SubscriptionResponseDTO, status_code=status.HTTP_201_CREATED)
async def provision_subscription(
    organization_id: str,
    request: ProvisionRequestSchema,
    session: AsyncSession = Depends(get_session),
    plan_catalog: PlanCatalog = Depends(get_plan_catalog),
    config=Depends(get_config),
):
    """
    Pre-provision a subscription at signup (free tier by default).

    **Returns:**
    - 201: subscription created
    - 409: organization already has an active or canceling subscription
    """
    use_case = ProvisionSubscription(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySubscriptionRepository(session),
        plan_catalog,
        period_days=config.SUBSCRIPTION_PERIOD_DAYS,
    )
    command = ProvisionSubscriptionCommandDTO(
        organization_id=organization_id, plan_tier=request.plan_tier
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error, status_code=status_code_for(result.error))

    return result.value


@router.get("/upgrade", response_model=UpgradePreviewDTO)
async def preview_upgrade(
    organization_id: str,
    plan: PlanTier = Query(..., description="Target plan tier"),
    session: AsyncSession = Depends(get_session),
    plan_catalog: PlanCatalog = Depends(get_plan_catalog),
    config=Depends(get_config),
):
    """
    Preview pricing and limit changes of an upgrade.

    **Returns:**
    - 200: preview with prices in cents and a human-readable summary
    - 400: downgrade or free target
    - 409: already on the plan, or subscription is canceling
    """
    if plan == PlanTier.FREE:
        raise BillingValidationError("Cannot upgrade to the free plan", code="INVALID_UPGRADE")

    use_case = _plan_upgrade(session, plan_catalog, config)
    return await use_case.preview_upgrade(organization_id, plan)


@router.post("/upgrade", response_model=UpgradeResultDTO)
async def execute_upgrade(
    organization_id: str,
    request: UpgradeRequestSchema,
    session: AsyncSession = Depends(get_session),
    plan_catalog: PlanCatalog = Depends(get_plan_catalog),
    config=Depends(get_config),
):
    """
    Upgrade immediately. A full month of the target price is due now.
    """
    use_case = _plan_upgrade(session, plan_catalog, config)
    result = await use_case.execute_upgrade(organization_id, request.plan)

    if result.is_err():
        raise ClientError(result.error, status_code=status_code_for(result.error))

    return result.value


@router.get("/cancel", response_model=CancelPreviewDTO)
async def preview_cancel(
    organization_id: str,
    session: AsyncSession = Depends(get_session),
    plan_catalog: PlanCatalog = Depends(get_plan_catalog),
):
    """
    Preview access end date and data impact of cancelling.

    **Returns:**
    - 200: preview
    - 400: no active paid subscription to cancel
    """
    use_case = _subscription_cancel(session, plan_catalog)

    if not await use_case.can_cancel(organization_id):
        raise ClientError(
            Error(code="CANNOT_CANCEL", message="No active paid subscription to cancel"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    return await use_case.preview_cancel(organization_id)


@router.post("/cancel", response_model=CancelResultDTO)
async def execute_cancel(
    organization_id: str,
    request: CancelRequestSchema,
    session: AsyncSession = Depends(get_session),
    plan_catalog: PlanCatalog = Depends(get_plan_catalog),
):
    """
    Cancel at period end. The subscription moves to canceling and keeps
    access until current_period_end.
    """
    use_case = _subscription_cancel(session, plan_catalog)
    reason = request.reason.value if request.reason else None
    result = await use_case.execute_cancel(organization_id, reason)

    if result.is_err():
        raise ClientError(result.error, status_code=status_code_for(result.error))

    return result.value
