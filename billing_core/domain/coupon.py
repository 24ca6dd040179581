"""Coupon Domain Entity

A discount definition: percentage or fixed amount, with optional usage cap,
expiry and plan restrictions.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Boolean, CheckConstraint, Integer, JSON, Numeric, String
from billing_core.domain.base import BaseModel, BigIntPK, UTCDateTime


class DiscountType(str, Enum):
    """Coupon discount kinds"""
    PERCENTAGE = "percentage"  # discount_value is 0-100
    FIXED = "fixed"            # discount_value is in minor currency units


def normalize_code(code: str) -> str:
    return code.strip().upper()


class Coupon(BaseModel, table=True):
    """
    Coupon - Promotional discount definition

    Domain Rules:
    - code is unique, stored trimmed and upper-case
    - current_uses never exceeds max_uses when max_uses is set
    - Usable only while active, not expired and not exhausted
    - applicable_plans = None means every plan
    """

    __tablename__ = "coupons"
    __table_args__ = (
        Index('ix_coupons_active', 'active'),
        CheckConstraint('discount_value > 0', name='discount_value_positive'),
        CheckConstraint('current_uses >= 0', name='current_uses_non_negative'),
        CheckConstraint(
            'max_uses IS NULL OR current_uses <= max_uses',
            name='current_uses_within_max'
        ),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
        description="Unique coupon identifier (auto-increment)"
    )

    code: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True),
        description="Coupon code (normalized upper-case)"
    )

    discount_type: DiscountType = Field(
        description="Discount kind (percentage, fixed)"
    )

    discount_value: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Percentage (0-100) or fixed amount in cents"
    )

    currency: str = Field(
        default="USD",
        sa_column=Column(String(3), nullable=False, default="USD"),
        description="Currency code (ISO 4217)"
    )

    active: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, default=True),
        description="Whether the coupon can be redeemed"
    )

    max_uses: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, nullable=True),
        description="Maximum redemptions (None = unlimited)"
    )

    current_uses: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Redemptions so far"
    )

    expires_at: Optional[datetime] = Field(
        sa_column=Column(UTCDateTime, nullable=True),
        default=None,
        description="Expiry timestamp (None = never expires)"
    )

    applicable_plans: Optional[List[str]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Plan tiers the coupon applies to (None = all)"
    )

    created_by: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Admin who created the coupon"
    )

    created_at: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        default_factory=datetime.utcnow,
        description="Coupon creation timestamp"
    )

    updated_at: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    def is_exhausted(self) -> bool:
        if not self.max_uses:
            return False
        return self.current_uses >= self.max_uses

    def applies_to(self, plan_tier: str) -> bool:
        if not self.applicable_plans:
            return True
        return getattr(plan_tier, "value", plan_tier) in self.applicable_plans

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "code": "LAUNCH25",
                "discount_type": "percentage",
                "discount_value": "25.00",
                "currency": "USD",
                "active": True,
                "max_uses": 100,
                "current_uses": 3,
                "expires_at": "2025-12-31T23:59:59Z",
                "applicable_plans": ["standard", "enterprise"],
                "created_by": "admin@example.com",
            }
        }
