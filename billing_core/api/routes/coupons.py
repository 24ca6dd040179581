"""Coupon API Routes

Validation, discount calculation and redemption tracking for promotional
codes.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from billing_core.api.schemas.coupon_request import (
    ApplyCouponRequestSchema,
    ApplyCouponResponseSchema,
    TrackRedemptionRequestSchema,
    ValidateCouponRequestSchema,
)
from billing_core.app.use_cases.coupons import (
    CouponEngine,
    CouponValidationDTO,
    RedemptionResponseDTO,
    TrackCouponUsageCommandDTO,
)
from billing_core.adapter.repositories import (
    SqlAlchemyCouponRedemptionRepository,
    SqlAlchemyCouponRepository,
)
from billing_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from billing_core.depends import get_session
from billing_core.domain.coupon import normalize_code

router = APIRouter(prefix="/billing/coupons", tags=["Coupons"])


def _coupon_engine(session: AsyncSession) -> CouponEngine:
    return CouponEngine(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyCouponRepository(session),
        SqlAlchemyCouponRedemptionRepository(session),
    )


@router.post("/validate", response_model=CouponValidationDTO)
async def validate_coupon(
    request: ValidateCouponRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Check a coupon code. Invalid codes return 200 with `valid: false` and the
    reason.
    """
    return await _coupon_engine(session).validate_coupon(request.code)


@router.post("/apply", response_model=ApplyCouponResponseSchema)
async def apply_coupon(
    request: ApplyCouponRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Compute the discounted charge for a plan.

    **Returns:**
    - 200: discounted amount (never below $1.00 unless the coupon is a full
      discount)
    - 404: unknown code
    - 400: inactive, expired, exhausted or not applicable to the plan
    """
    discounted_amount = await _coupon_engine(session).apply_coupon(
        request.code, request.amount, request.plan_tier
    )

    return ApplyCouponResponseSchema(
        code=normalize_code(request.code),
        plan_tier=request.plan_tier,
        original_amount=request.amount,
        discounted_amount=discounted_amount,
        discount_applied=request.amount - discounted_amount,
    )


@router.post(
    "/redemptions",
    response_model=RedemptionResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def track_redemption(
    request: TrackRedemptionRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Record a redemption after a successful charge and count one use.

    **Returns:**
    - 201: redemption recorded
    - 404: unknown code
    - 400: the coupon ran out of uses concurrently, nothing recorded
    """
    command = TrackCouponUsageCommandDTO(
        code=request.code,
        user_id=request.user_id,
        organization_id=request.organization_id,
        subscription_id=request.subscription_id,
        original_amount=request.original_amount,
        discount_applied=request.discount_applied,
    )
    return await _coupon_engine(session).track_coupon_usage(command)
