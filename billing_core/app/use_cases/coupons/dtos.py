"""Data Transfer Objects for Coupon Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from billing_core.domain.base import to_naive_utc
from billing_core.domain.coupon import DiscountType
from billing_core.domain.plan import PlanTier


class CouponDiscountDTO(BaseModel):
    type: DiscountType
    value: Decimal
    currency: str


class CouponValidationDTO(BaseModel):
    """
    Response DTO for coupon validation

    error is one of the user-facing messages; error_code is its stable code.
    """

    valid: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    discount: Optional[CouponDiscountDTO] = None

    class Config:
        json_schema_extra = {
            "example": {
                "valid": True,
                "error": None,
                "error_code": None,
                "discount": {"type": "percentage", "value": "25.00", "currency": "USD"}
            }
        }


class TrackCouponUsageCommandDTO(BaseModel):
    """Command DTO for recording a successful discounted charge"""

    code: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    organization_id: str = Field(..., min_length=1)
    subscription_id: Optional[int] = Field(default=None)
    original_amount: int = Field(..., ge=0, description="Cents")
    discount_applied: int = Field(..., ge=0, description="Cents")


class RedemptionResponseDTO(BaseModel):
    redemption_id: int
    coupon_id: int
    code: str
    user_id: str
    organization_id: str
    subscription_id: Optional[int] = None
    original_amount: int
    discount_applied: int
    final_amount: int
    redeemed_at: datetime


class CreateCouponCommandDTO(BaseModel):
    """
    Command DTO for creating a coupon

    The code is normalized (trimmed, upper-case); uses start at 0 and the
    coupon starts active.
    """

    code: str = Field(..., min_length=1, max_length=64)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    max_uses: Optional[int] = Field(default=None, gt=0)
    expires_at: Optional[datetime] = None
    applicable_plans: Optional[List[PlanTier]] = None
    created_by: Optional[str] = None

    @field_validator("expires_at")
    @classmethod
    def normalize_expires_at(cls, v):
        return to_naive_utc(v)

    class Config:
        json_schema_extra = {
            "example": {
                "code": "launch25",
                "discount_type": "percentage",
                "discount_value": "25",
                "currency": "USD",
                "max_uses": 100,
                "expires_at": "2025-12-31T23:59:59Z",
                "applicable_plans": ["standard", "enterprise"],
                "created_by": "admin@example.com"
            }
        }


class UpdateCouponCommandDTO(BaseModel):
    """
    Only fields that are set are applied

    discount_value and active may be omitted but not cleared; a null
    max_uses, expires_at or applicable_plans removes that restriction.
    """

    discount_value: Optional[Decimal] = Field(default=None, gt=0)
    max_uses: Optional[int] = Field(default=None, gt=0)
    expires_at: Optional[datetime] = None
    applicable_plans: Optional[List[PlanTier]] = None
    active: Optional[bool] = None

    @field_validator("discount_value", "active")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("expires_at")
    @classmethod
    def normalize_expires_at(cls, v):
        return to_naive_utc(v)


class CouponDTO(BaseModel):
    coupon_id: int
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    currency: str
    active: bool
    max_uses: Optional[int] = None
    current_uses: int
    expires_at: Optional[datetime] = None
    applicable_plans: Optional[List[str]] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TopUserDTO(BaseModel):
    user_id: str
    redemptions: int
    total_discount: int


class CouponAnalyticsDTO(BaseModel):
    """Aggregate redemption metrics for one coupon or all coupons"""

    total_redemptions: int
    total_discount_given: int
    average_discount: float
    redemption_rate: float = Field(..., description="Redemptions per coupon in scope")
    top_users: List[TopUserDTO] = Field(default_factory=list)
