"""CouponEngine Use Case

Validates coupon codes, computes discounted amounts and records
redemptions.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from billing_core.app.services.unit_of_work import UnitOfWork
from billing_core.app.repositories.coupon_repository import CouponRepository
from billing_core.app.repositories.coupon_redemption_repository import CouponRedemptionRepository
from billing_core.domain.coupon import Coupon, DiscountType, normalize_code
from billing_core.domain.coupon_redemption import CouponRedemption
from billing_core.domain.errors import BillingError, CouponNotFoundError, CouponValidationError
from .dtos import (
    CouponDiscountDTO,
    CouponValidationDTO,
    RedemptionResponseDTO,
    TrackCouponUsageCommandDTO,
)

logger = logging.getLogger(__name__)

# Lowest charge after a partial discount, in minor units ($1.00)
MINIMUM_CHARGE_CENTS = 100
FULL_DISCOUNT_VALUE = Decimal(100)


def check_coupon(coupon: Optional[Coupon], now: datetime) -> Optional[BillingError]:
    """Return the reason a coupon cannot be used, or None if it is usable"""
    if coupon is None:
        return CouponNotFoundError()
    if not coupon.active:
        return CouponValidationError("Coupon is inactive", code="COUPON_INACTIVE")
    if coupon.is_expired(now):
        return CouponValidationError("Coupon has expired", code="COUPON_EXPIRED")
    if coupon.is_exhausted():
        return CouponValidationError("Coupon has reached maximum uses", code="COUPON_EXHAUSTED")
    return None


def discount_amount(coupon: Coupon, amount: int) -> int:
    """
    Discounted charge in minor units

    The floor is 0 when the discount value is >= 100 and 100 otherwise. The
    rule looks at the raw value for both discount types, so a fixed coupon
    worth 100 cents or more also gets the 0 floor. The result never exceeds
    the original amount.
    """
    value = Decimal(coupon.discount_value)
    original = Decimal(amount)

    if DiscountType(coupon.discount_type) == DiscountType.PERCENTAGE:
        discounted = original * (1 - value / 100)
    else:
        discounted = original - value

    discounted_cents = int(discounted.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    floor = 0 if value >= FULL_DISCOUNT_VALUE else MINIMUM_CHARGE_CENTS
    return min(amount, max(discounted_cents, floor))


class CouponEngine:
    """
    Use Case: Coupon validation, application and redemption tracking

    Business Rules:
    1. Codes are case-insensitive (trimmed, upper-cased)
    2. Usable only while active, not expired and not exhausted
    3. Plan restrictions apply when applicable_plans is set
    4. Redemption insert and use-count increment happen in one transaction;
       the increment is conditional on max_uses
    """

    def __init__(
        self,
        uow: UnitOfWork,
        coupon_repo: CouponRepository,
        redemption_repo: CouponRedemptionRepository,
    ):
        self.uow = uow
        self.coupon_repo = coupon_repo
        self.redemption_repo = redemption_repo

    async def validate_coupon(self, code: str, now: Optional[datetime] = None) -> CouponValidationDTO:
        now = now or datetime.utcnow()
        coupon = await self.coupon_repo.get_by_code(normalize_code(code))

        problem = check_coupon(coupon, now)
        if problem is not None:
            return CouponValidationDTO(valid=False, error=problem.message, error_code=problem.code)

        return CouponValidationDTO(
            valid=True,
            discount=CouponDiscountDTO(
                type=coupon.discount_type,
                value=coupon.discount_value,
                currency=coupon.currency,
            ),
        )

    async def apply_coupon(
        self, code: str, amount: int, plan_tier: str, now: Optional[datetime] = None
    ) -> int:
        """
        Compute the discounted amount for a charge

        Raises:
            CouponNotFoundError: unknown code
            CouponValidationError: inactive, expired, exhausted or not
                applicable to plan_tier
        """
        now = now or datetime.utcnow()
        coupon = await self.coupon_repo.get_by_code(normalize_code(code))

        problem = check_coupon(coupon, now)
        if problem is not None:
            raise problem

        if not coupon.applies_to(plan_tier):
            raise CouponValidationError(
                "Coupon not applicable to this plan", code="COUPON_NOT_APPLICABLE"
            )

        return discount_amount(coupon, amount)

    async def track_coupon_usage(self, command: TrackCouponUsageCommandDTO) -> RedemptionResponseDTO:
        """
        Record one redemption and add one use to the coupon

        Raises:
            CouponNotFoundError: unknown code
            CouponValidationError: COUPON_EXHAUSTED when max_uses was reached
                concurrently; nothing is written
        """
        coupon = await self.coupon_repo.get_by_code(normalize_code(command.code))
        if coupon is None:
            raise CouponNotFoundError()

        try:
            redemption = await self.redemption_repo.create(
                CouponRedemption(
                    coupon_id=coupon.id,
                    user_id=command.user_id,
                    organization_id=command.organization_id,
                    subscription_id=command.subscription_id,
                    original_amount=command.original_amount,
                    discount_applied=command.discount_applied,
                    final_amount=command.original_amount - command.discount_applied,
                )
            )

            incremented = await self.coupon_repo.increment_uses(coupon.id)
            if not incremented:
                raise CouponValidationError(
                    "Coupon has reached maximum uses", code="COUPON_EXHAUSTED"
                )

            await self.uow.commit()

        except Exception:
            await self.uow.rollback()
            raise

        logger.info(
            f"Coupon {coupon.code} redeemed by user {command.user_id} "
            f"(organization {command.organization_id}): "
            f"{command.original_amount} -> {redemption.final_amount}"
        )

        return RedemptionResponseDTO(
            redemption_id=redemption.id,
            coupon_id=coupon.id,
            code=coupon.code,
            user_id=redemption.user_id,
            organization_id=redemption.organization_id,
            subscription_id=redemption.subscription_id,
            original_amount=redemption.original_amount,
            discount_applied=redemption.discount_applied,
            final_amount=redemption.final_amount,
            redeemed_at=redemption.redeemed_at,
        )
