"""Subscription Domain Entity

One row per billing period per organization. Tracks plan tier, registration
usage and the cancellation lifecycle.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, CheckConstraint, Integer, String
from billing_core.domain.base import BaseModel, BigIntPK, UTCDateTime
from billing_core.domain.plan import PlanTier


class SubscriptionStatus(str, Enum):
    """Subscription status types"""
    ACTIVE = "active"
    CANCELING = "canceling"  # Cancellation requested, access until period end
    CANCELED = "canceled"    # Terminal, set only by the finalizer


class Subscription(BaseModel, table=True):
    """
    Subscription - Organization plan tier and registration usage

    Domain Rules:
    - registration_limit and amount are the catalog values for plan_tier
      at creation/upgrade time
    - current_registration_count is only incremented by the registration
      path; an upgrade preserves it, a new row starts at 0
    - Status transitions: active -> canceling -> canceled
    - canceling -> canceled happens only in the finalizer, after
      current_period_end has passed
    - The most recent row by current_period_start is authoritative
    - Rows are never hard-deleted
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index('ix_subscriptions_organization_start', 'organization_id', 'current_period_start'),
        Index('ix_subscriptions_status_period_end', 'status', 'current_period_end'),
        CheckConstraint('registration_limit >= 0', name='registration_limit_non_negative'),
        CheckConstraint('current_registration_count >= 0', name='registration_count_non_negative'),
        CheckConstraint('amount >= 0', name='amount_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
        description="Unique subscription identifier (auto-increment)"
    )

    organization_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Organization (tenant) identifier"
    )

    plan_tier: PlanTier = Field(
        description="Plan tier (free, standard, enterprise)"
    )

    status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        description="Subscription status (active, canceling, canceled)"
    )

    registration_limit: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Registrations allowed in the period"
    )

    current_registration_count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Registrations recorded so far"
    )

    amount: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Monthly charge in minor currency units (cents)"
    )

    currency: str = Field(
        default="USD",
        sa_column=Column(String(3), nullable=False, default="USD"),
        description="Currency code (ISO 4217)"
    )

    current_period_start: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        description="Billing period start (also the row's start date)"
    )

    current_period_end: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        description="Billing period end; canceling rows keep access until then"
    )

    cancellation_reason: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Optional reason given when cancelling"
    )

    cancelled_at: Optional[datetime] = Field(
        sa_column=Column(UTCDateTime, nullable=True),
        default=None,
        description="When cancellation was requested"
    )

    created_at: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        default_factory=datetime.utcnow,
        description="Subscription creation timestamp"
    )

    updated_at: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "organization_id": "org_abc123",
                "plan_tier": "standard",
                "status": "active",
                "registration_limit": 5000,
                "current_registration_count": 120,
                "amount": 1900,
                "currency": "USD",
                "current_period_start": "2025-01-01T00:00:00Z",
                "current_period_end": "2025-01-31T00:00:00Z",
                "cancellation_reason": None,
                "cancelled_at": None,
            }
        }
