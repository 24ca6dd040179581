from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from unittest.mock import AsyncMock, MagicMock

from billing_core.domain.coupon import Coupon, DiscountType
from billing_core.domain.plan import PlanCatalog, PlanTier
from billing_core.domain.subscription import Subscription, SubscriptionStatus


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def plan_catalog():
    """Default plan catalogue (free 100 / standard 5000 / enterprise 50000)"""
    return PlanCatalog.build()


@pytest.fixture
def make_subscription():
    """Factory for Subscription entities; defaults to an active standard row"""

    def _make(**overrides):
        now = datetime.utcnow()
        data = dict(
            id=1,
            organization_id="org_123",
            plan_tier=PlanTier.STANDARD,
            status=SubscriptionStatus.ACTIVE,
            registration_limit=5000,
            current_registration_count=120,
            amount=1900,
            currency="USD",
            current_period_start=now - timedelta(days=10),
            current_period_end=now + timedelta(days=20),
            created_at=now,
            updated_at=now,
        )
        data.update(overrides)
        return Subscription(**data)

    return _make


@pytest.fixture
def make_coupon():
    """Factory for Coupon entities; defaults to an active 20% coupon"""

    def _make(**overrides):
        now = datetime.utcnow()
        data = dict(
            id=1,
            code="SAVE20",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("20"),
            currency="USD",
            active=True,
            max_uses=None,
            current_uses=0,
            expires_at=None,
            applicable_plans=None,
            created_by="admin@example.com",
            created_at=now,
            updated_at=now,
        )
        data.update(overrides)
        return Coupon(**data)

    return _make
