"""Request schemas for subscription and usage endpoints

Pydantic models for validating incoming HTTP requests.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from billing_core.app.use_cases.subscription.dtos import CancelReason
from billing_core.domain.plan import PlanTier


class RegistrationRequestSchema(BaseModel):
    """
    Request schema for recording a registration

    Used for POST /billing/organizations/{organization_id}/registrations.
    """

    qr_code_set_id: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Form / QR code set the registration came from"
    )


class ProvisionRequestSchema(BaseModel):
    plan_tier: PlanTier = Field(default=PlanTier.FREE, description="Initial plan tier")


class UpgradeRequestSchema(BaseModel):
    """
    Request schema for executing an upgrade

    The free tier is never a valid upgrade target.
    """

    plan: PlanTier = Field(..., description="Target plan tier (standard or enterprise)")

    @field_validator("plan")
    @classmethod
    def validate_plan(cls, v):
        if v == PlanTier.FREE:
            raise ValueError("Cannot upgrade to the free plan")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "plan": "standard"
            }
        }


class CancelRequestSchema(BaseModel):
    reason: Optional[CancelReason] = Field(
        default=None,
        description="Why the organization is cancelling"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "reason": "too_expensive"
            }
        }
