"""Coupon Admin API Routes"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from billing_core.app.use_cases.coupons import (
    CouponAdmin,
    CouponAnalytics,
    CouponAnalyticsDTO,
    CouponDTO,
    CreateCouponCommandDTO,
    UpdateCouponCommandDTO,
)
from billing_core.adapter.repositories import (
    SqlAlchemyCouponRedemptionRepository,
    SqlAlchemyCouponRepository,
)
from billing_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from billing_core.depends import get_session
from billing_core.domain.errors import CouponNotFoundError

router = APIRouter(prefix="/billing/admin/coupons", tags=["Coupon Admin"])


def _coupon_admin(session: AsyncSession) -> CouponAdmin:
    return CouponAdmin(SqlAlchemyUnitOfWork(session), SqlAlchemyCouponRepository(session))


@router.post("", response_model=CouponDTO, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    request: CreateCouponCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    """Create a coupon. Codes are stored upper-cased and must be unique."""
    return await _coupon_admin(session).create_coupon(request)


@router.get("", response_model=List[CouponDTO])
async def list_coupons(
    active: Optional[bool] = Query(default=None),
    created_by: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    return await _coupon_admin(session).list_coupons(active=active, created_by=created_by)


# Registered before /{coupon_id} so "analytics" is not parsed as an id
@router.get("/analytics", response_model=CouponAnalyticsDTO)
async def coupon_analytics(
    coupon_id: Optional[int] = Query(default=None),
    session: AsyncSession = Depends(get_session),
):
    """
    Redemption totals, average discount, redemptions per coupon and the top
    10 users. Scoped to one coupon when coupon_id is given.
    """
    use_case = CouponAnalytics(SqlAlchemyCouponRedemptionRepository(session))
    return await use_case.get_coupon_analytics(coupon_id)


@router.get("/code/{code}", response_model=CouponDTO)
async def get_coupon_by_code(code: str, session: AsyncSession = Depends(get_session)):
    """Look up a coupon by code, case-insensitive."""
    coupon = await _coupon_admin(session).get_coupon_by_code(code)
    if coupon is None:
        raise CouponNotFoundError()
    return coupon


@router.get("/{coupon_id}", response_model=CouponDTO)
async def get_coupon(coupon_id: int, session: AsyncSession = Depends(get_session)):
    coupon = await _coupon_admin(session).get_coupon(coupon_id)
    if coupon is None:
        raise CouponNotFoundError()
    return coupon


@router.patch("/{coupon_id}", response_model=CouponDTO)
async def update_coupon(
    coupon_id: int,
    request: UpdateCouponCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    """Apply only the fields present in the body."""
    return await _coupon_admin(session).update_coupon(coupon_id, request)


@router.delete("/{coupon_id}", response_model=CouponDTO)
async def deactivate_coupon(coupon_id: int, session: AsyncSession = Depends(get_session)):
    """Coupons are never deleted, only deactivated."""
    return await _coupon_admin(session).deactivate_coupon(coupon_id)
