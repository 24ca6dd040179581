"""Request and response schemas for coupon endpoints"""

from typing import Optional
from pydantic import BaseModel, Field

from billing_core.domain.plan import PlanTier


class ValidateCouponRequestSchema(BaseModel):
    code: str = Field(..., min_length=1, description="Coupon code, case-insensitive")


class ApplyCouponRequestSchema(BaseModel):
    """
    Request schema for previewing a discounted charge

    Used for POST /billing/coupons/apply.
    """

    code: str = Field(..., min_length=1, description="Coupon code, case-insensitive")
    amount: int = Field(..., ge=0, description="Original amount in cents")
    plan_tier: PlanTier = Field(..., description="Plan tier being charged")

    class Config:
        json_schema_extra = {
            "example": {
                "code": "SAVE20",
                "amount": 1900,
                "plan_tier": "standard"
            }
        }


class ApplyCouponResponseSchema(BaseModel):
    code: str
    plan_tier: PlanTier
    original_amount: int
    discounted_amount: int
    discount_applied: int


class TrackRedemptionRequestSchema(BaseModel):
    """
    Request schema for recording a coupon redemption

    Used for POST /billing/coupons/redemptions after a successful charge.
    """

    code: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    organization_id: str = Field(..., min_length=1)
    subscription_id: Optional[int] = Field(default=None)
    original_amount: int = Field(..., ge=0, description="Cents")
    discount_applied: int = Field(..., ge=0, description="Cents")
