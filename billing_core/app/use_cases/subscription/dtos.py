"""Data Transfer Objects for Subscription Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from billing_core.domain.plan import PlanTier
from billing_core.domain.subscription import SubscriptionStatus
from billing_core.domain.usage import UsageStatus


class CancelReason(str, Enum):
    """Reasons offered when cancelling"""
    TOO_EXPENSIVE = "too_expensive"
    NOT_USING = "not_using"
    MISSING_FEATURES = "missing_features"
    SWITCHING_SERVICE = "switching_service"
    OTHER = "other"


class UsageLimitResultDTO(BaseModel):
    """
    Response DTO for the registration limit check

    message and upgrade_url are only set when allowed is False.
    """

    allowed: bool = Field(..., description="Whether one more registration is allowed")
    current_count: int = Field(..., description="Registrations counted so far")
    limit: int = Field(..., description="Registration limit of the plan")
    remaining: int = Field(..., description="max(0, limit - current_count)")
    plan_tier: PlanTier = Field(..., description="Plan tier the check ran against")
    message: Optional[str] = Field(default=None, description="Why the registration is blocked")
    upgrade_url: Optional[str] = Field(default=None, description="Where to upgrade")

    class Config:
        json_schema_extra = {
            "example": {
                "allowed": False,
                "current_count": 100,
                "limit": 100,
                "remaining": 0,
                "plan_tier": "free",
                "message": "Registration limit reached. The free plan allows 100 registrations. Please upgrade to continue.",
                "upgrade_url": "/pricing"
            }
        }


class UsageDisplayDTO(BaseModel):
    """Response DTO for UI usage metrics"""

    current_count: int
    limit: int
    percentage: int = Field(..., description="Rounded percentage, may exceed 100")
    plan_tier: PlanTier
    status: UsageStatus
    remaining: int

    class Config:
        json_schema_extra = {
            "example": {
                "current_count": 4100,
                "limit": 5000,
                "percentage": 82,
                "plan_tier": "standard",
                "status": "warning",
                "remaining": 900
            }
        }


class RecordRegistrationCommandDTO(BaseModel):
    """Command DTO for admitting one registration"""

    organization_id: str = Field(..., min_length=1, description="Organization identifier")
    qr_code_set_id: Optional[str] = Field(default=None, description="Form / QR code set")


class RegistrationResponseDTO(BaseModel):
    registration_id: int
    organization_id: str
    plan_tier: PlanTier
    current_count: int = Field(..., description="Registrations counted after this one")
    limit: int
    remaining: int
    registered_at: datetime


class UpgradePreviewDTO(BaseModel):
    """Response DTO for an upgrade preview"""

    current_plan: PlanTier
    current_plan_name: str
    current_limit: int
    target_plan: PlanTier
    target_plan_name: str
    target_limit: int
    current_monthly_price: int = Field(..., description="Cents")
    new_monthly_price: int = Field(..., description="Cents")
    price_difference: int = Field(..., description="Cents")
    amount_due_now: int = Field(..., description="Cents; a full month, no proration")
    effective_immediately: bool = True
    summary: str

    class Config:
        json_schema_extra = {
            "example": {
                "current_plan": "free",
                "current_plan_name": "Free",
                "current_limit": 100,
                "target_plan": "standard",
                "target_plan_name": "Standard",
                "target_limit": 5000,
                "current_monthly_price": 0,
                "new_monthly_price": 1900,
                "price_difference": 1900,
                "amount_due_now": 1900,
                "effective_immediately": True,
                "summary": "Upgrade from Free to Standard for $19.00/month"
            }
        }


class UpgradeResultDTO(BaseModel):
    subscription_id: int
    message: str
    new_plan_tier: PlanTier
    new_limit: int


class CancelPreviewDTO(BaseModel):
    """Response DTO for a cancellation preview"""

    current_plan: PlanTier
    current_plan_name: str
    current_limit: int
    current_registration_count: int
    access_until: datetime
    days_remaining: int
    will_exceed_free_limit: bool
    registrations_over_free_limit: int
    refund_amount: int = Field(default=0, description="Refunds are not modeled")
    summary: str


class CancelResultDTO(BaseModel):
    subscription_id: int
    message: str
    access_until: datetime


class ProvisionSubscriptionCommandDTO(BaseModel):
    """Command DTO for pre-provisioning a subscription at signup"""

    organization_id: str = Field(..., min_length=1)
    plan_tier: PlanTier = Field(default=PlanTier.FREE)


class SubscriptionResponseDTO(BaseModel):
    subscription_id: int
    organization_id: str
    plan_tier: PlanTier
    status: SubscriptionStatus
    registration_limit: int
    current_registration_count: int
    amount: int
    currency: str
    current_period_start: datetime
    current_period_end: datetime


class FinalizationResultDTO(BaseModel):
    """Summary of one finalizer sweep"""

    total: int = Field(..., description="Expired cancellations found")
    finalized: int = Field(..., description="Rows moved to canceled")
    finalized_subscription_ids: List[int] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    run_at: datetime
    execution_time_ms: int
