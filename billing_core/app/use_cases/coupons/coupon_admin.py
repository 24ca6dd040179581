"""CouponAdmin Use Case

Create, read, update, deactivate and list coupons.
"""

import logging
from datetime import datetime
from typing import List, Optional
from billing_core.app.services.unit_of_work import UnitOfWork
from billing_core.app.repositories.coupon_repository import CouponRepository
from billing_core.domain.coupon import Coupon, DiscountType, normalize_code
from billing_core.domain.errors import BillingValidationError, CouponNotFoundError
from .dtos import CouponDTO, CreateCouponCommandDTO, UpdateCouponCommandDTO

logger = logging.getLogger(__name__)

MAX_PERCENTAGE = 100


def to_coupon_dto(coupon: Coupon) -> CouponDTO:
    return CouponDTO(
        coupon_id=coupon.id,
        code=coupon.code,
        discount_type=coupon.discount_type,
        discount_value=coupon.discount_value,
        currency=coupon.currency,
        active=coupon.active,
        max_uses=coupon.max_uses,
        current_uses=coupon.current_uses,
        expires_at=coupon.expires_at,
        applicable_plans=coupon.applicable_plans,
        created_by=coupon.created_by,
        created_at=coupon.created_at,
        updated_at=coupon.updated_at,
    )


def _plan_values(plans) -> Optional[List[str]]:
    if plans is None:
        return None
    return [str(getattr(plan, "value", plan)) for plan in plans]


class CouponAdmin:
    def __init__(self, uow: UnitOfWork, coupon_repo: CouponRepository):
        self.uow = uow
        self.coupon_repo = coupon_repo

    async def create_coupon(self, command: CreateCouponCommandDTO) -> CouponDTO:
        """
        Create a coupon with a normalized code, zero uses, active

        Raises:
            BillingValidationError: INVALID_COUPON for a duplicate code or a
                percentage above 100
        """
        code = normalize_code(command.code)

        if command.discount_type == DiscountType.PERCENTAGE and command.discount_value > MAX_PERCENTAGE:
            raise BillingValidationError(
                "Percentage discount cannot exceed 100", code="INVALID_COUPON"
            )

        if await self.coupon_repo.get_by_code(code) is not None:
            raise BillingValidationError(
                f"Coupon code {code} already exists", code="INVALID_COUPON"
            )

        now = datetime.utcnow()
        try:
            coupon = await self.coupon_repo.create(
                Coupon(
                    code=code,
                    discount_type=command.discount_type,
                    discount_value=command.discount_value,
                    currency=command.currency.upper(),
                    active=True,
                    max_uses=command.max_uses,
                    current_uses=0,
                    expires_at=command.expires_at,
                    applicable_plans=_plan_values(command.applicable_plans),
                    created_by=command.created_by,
                    created_at=now,
                    updated_at=now,
                )
            )
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Created coupon {coupon.code} (id={coupon.id})")
        return to_coupon_dto(coupon)

    async def get_coupon(self, coupon_id: int) -> Optional[CouponDTO]:
        coupon = await self.coupon_repo.get_by_id(coupon_id)
        return to_coupon_dto(coupon) if coupon else None

    async def get_coupon_by_code(self, code: str) -> Optional[CouponDTO]:
        coupon = await self.coupon_repo.get_by_code(normalize_code(code))
        return to_coupon_dto(coupon) if coupon else None

    async def update_coupon(self, coupon_id: int, command: UpdateCouponCommandDTO) -> CouponDTO:
        """
        Apply the fields set on the command

        Raises:
            CouponNotFoundError: unknown id
            BillingValidationError: INVALID_COUPON for a percentage above 100
                or max_uses below the uses already counted
        """
        coupon = await self.coupon_repo.get_by_id(coupon_id)
        if coupon is None:
            raise CouponNotFoundError(f"Coupon with ID {coupon_id} not found")

        updates = command.model_dump(exclude_unset=True)

        if (
            "discount_value" in updates
            and DiscountType(coupon.discount_type) == DiscountType.PERCENTAGE
            and updates["discount_value"] > MAX_PERCENTAGE
        ):
            raise BillingValidationError(
                "Percentage discount cannot exceed 100", code="INVALID_COUPON"
            )

        max_uses = updates.get("max_uses")
        if max_uses is not None and max_uses < coupon.current_uses:
            raise BillingValidationError(
                f"max_uses cannot be lower than current uses ({coupon.current_uses})",
                code="INVALID_COUPON",
            )

        if "applicable_plans" in updates:
            updates["applicable_plans"] = _plan_values(command.applicable_plans)

        try:
            for field, value in updates.items():
                setattr(coupon, field, value)
            coupon.updated_at = datetime.utcnow()
            coupon = await self.coupon_repo.update(coupon)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        return to_coupon_dto(coupon)

    async def deactivate_coupon(self, coupon_id: int) -> CouponDTO:
        coupon = await self.update_coupon(coupon_id, UpdateCouponCommandDTO(active=False))
        logger.info(f"Deactivated coupon {coupon.code}")
        return coupon

    async def list_coupons(
        self, active: Optional[bool] = None, created_by: Optional[str] = None
    ) -> List[CouponDTO]:
        coupons = await self.coupon_repo.list(active=active, created_by=created_by)
        return [to_coupon_dto(coupon) for coupon in coupons]
