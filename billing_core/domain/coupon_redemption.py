"""Coupon Redemption Domain Entity

Immutable record of one successful coupon application.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, ForeignKey, String
from billing_core.domain.base import BaseModel, BigIntPK, UTCDateTime


class CouponRedemption(BaseModel, table=True):
    """
    Coupon Redemption - Append-only audit of discounted charges

    Domain Rules:
    - Created exactly once per successful discounted charge
    - Never updated or deleted
    - final_amount = original_amount - discount_applied
    """

    __tablename__ = "coupon_redemptions"
    __table_args__ = (
        Index('ix_coupon_redemptions_coupon_id', 'coupon_id'),
        Index('ix_coupon_redemptions_user_id', 'user_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntPK, primary_key=True, autoincrement=True),
        description="Unique redemption identifier (auto-increment)"
    )

    coupon_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("coupons.id"), nullable=False),
        description="Foreign key to Coupon"
    )

    user_id: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="User who redeemed the coupon"
    )

    organization_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Organization the charge belongs to"
    )

    subscription_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
        description="Subscription the charge was for"
    )

    original_amount: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Charge before discount (cents)"
    )

    discount_applied: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Discount given (cents)"
    )

    final_amount: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Charge after discount (cents)"
    )

    redeemed_at: datetime = Field(
        sa_column=Column(UTCDateTime, nullable=False),
        default_factory=datetime.utcnow,
        description="Redemption timestamp (immutable)"
    )
