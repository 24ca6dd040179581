"""Unit tests for CouponEngine use case

Tests cover:
- Validation results for unknown, inactive, expired, exhausted coupons
- Case-insensitive code lookup
- Discount application and plan restrictions
- Redemption tracking with the conditional use increment
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from billing_core.app.use_cases.coupons import CouponEngine, TrackCouponUsageCommandDTO
from billing_core.domain.coupon import DiscountType
from billing_core.domain.coupon_redemption import CouponRedemption
from billing_core.domain.errors import CouponNotFoundError, CouponValidationError
from billing_core.domain.plan import PlanTier


@pytest.fixture
def mock_coupon_repo():
    return MagicMock()


@pytest.fixture
def mock_redemption_repo():
    repo = MagicMock()

    async def create(redemption):
        redemption.id = 500
        return redemption

    repo.create = AsyncMock(side_effect=create)
    return repo


@pytest.fixture
def engine(mock_uow, mock_coupon_repo, mock_redemption_repo):
    return CouponEngine(
        uow=mock_uow,
        coupon_repo=mock_coupon_repo,
        redemption_repo=mock_redemption_repo,
    )


@pytest.fixture
def track_command():
    return TrackCouponUsageCommandDTO(
        code="save20",
        user_id="user_1",
        organization_id="org_123",
        subscription_id=5,
        original_amount=1900,
        discount_applied=380,
    )


@pytest.mark.asyncio
class TestValidateCoupon:
    async def test_valid_coupon(self, engine, mock_coupon_repo, make_coupon):
        # Arrange
        mock_coupon_repo.get_by_code = AsyncMock(return_value=make_coupon())

        # Act
        result = await engine.validate_coupon("  save20 ")

        # Assert
        assert result.valid is True
        assert result.error is None
        assert result.discount.type == DiscountType.PERCENTAGE
        assert result.discount.value == Decimal("20")
        assert result.discount.currency == "USD"
        mock_coupon_repo.get_by_code.assert_called_once_with("SAVE20")

    async def test_unknown_coupon(self, engine, mock_coupon_repo):
        mock_coupon_repo.get_by_code = AsyncMock(return_value=None)

        result = await engine.validate_coupon("NOPE")

        assert result.valid is False
        assert result.error == "Coupon not found"
        assert result.error_code == "COUPON_NOT_FOUND"
        assert result.discount is None

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"active": False}, "Coupon is inactive"),
            ({"expires_at": datetime.utcnow() - timedelta(days=1)}, "Coupon has expired"),
            ({"max_uses": 10, "current_uses": 10}, "Coupon has reached maximum uses"),
        ],
    )
    async def test_unusable_coupon(self, engine, mock_coupon_repo, make_coupon, overrides, message):
        mock_coupon_repo.get_by_code = AsyncMock(return_value=make_coupon(**overrides))

        result = await engine.validate_coupon("SAVE20")

        assert result.valid is False
        assert result.error == message


@pytest.mark.asyncio
class TestApplyCoupon:
    async def test_returns_discounted_amount(self, engine, mock_coupon_repo, make_coupon):
        mock_coupon_repo.get_by_code = AsyncMock(return_value=make_coupon())

        amount = await engine.apply_coupon("save20", 1900, PlanTier.STANDARD)

        assert amount == 1520

    async def test_plan_restriction(self, engine, mock_coupon_repo, make_coupon):
        """
        Given: A coupon restricted to enterprise
        When: Applied to a standard charge
        Then: COUPON_NOT_APPLICABLE is raised
        """
        # Arrange
        mock_coupon_repo.get_by_code = AsyncMock(
            return_value=make_coupon(applicable_plans=["enterprise"])
        )

        # Act & Assert
        with pytest.raises(CouponValidationError) as exc_info:
            await engine.apply_coupon("SAVE20", 1900, PlanTier.STANDARD)

        assert exc_info.value.code == "COUPON_NOT_APPLICABLE"
        assert exc_info.value.message == "Coupon not applicable to this plan"

    async def test_unknown_coupon_raises(self, engine, mock_coupon_repo):
        mock_coupon_repo.get_by_code = AsyncMock(return_value=None)

        with pytest.raises(CouponNotFoundError):
            await engine.apply_coupon("NOPE", 1900, PlanTier.STANDARD)

    async def test_expired_coupon_raises(self, engine, mock_coupon_repo, make_coupon):
        mock_coupon_repo.get_by_code = AsyncMock(
            return_value=make_coupon(expires_at=datetime.utcnow() - timedelta(minutes=1))
        )

        with pytest.raises(CouponValidationError) as exc_info:
            await engine.apply_coupon("SAVE20", 1900, PlanTier.STANDARD)

        assert exc_info.value.code == "COUPON_EXPIRED"


@pytest.mark.asyncio
class TestTrackCouponUsage:
    async def test_records_redemption_and_increments(
        self, engine, mock_uow, mock_coupon_repo, mock_redemption_repo, make_coupon, track_command
    ):
        """
        Given: A usable coupon
        When: A redemption is tracked
        Then: Redemption stored with final amount, use count incremented, committed
        """
        # Arrange
        mock_coupon_repo.get_by_code = AsyncMock(return_value=make_coupon(id=3))
        mock_coupon_repo.increment_uses = AsyncMock(return_value=True)

        # Act
        response = await engine.track_coupon_usage(track_command)

        # Assert
        assert response.redemption_id == 500
        assert response.coupon_id == 3
        assert response.code == "SAVE20"
        assert response.final_amount == 1520

        created = mock_redemption_repo.create.call_args[0][0]
        assert isinstance(created, CouponRedemption)
        assert created.coupon_id == 3
        assert created.user_id == "user_1"
        assert created.final_amount == 1520
        mock_coupon_repo.increment_uses.assert_called_once_with(3)
        mock_uow.commit.assert_called_once()

    async def test_exhausted_during_redemption_writes_nothing(
        self, engine, mock_uow, mock_coupon_repo, make_coupon, track_command
    ):
        """
        Given: The conditional increment affects no row (max uses reached)
        When: A redemption is tracked
        Then: COUPON_EXHAUSTED is raised and the redemption is rolled back
        """
        # Arrange
        mock_coupon_repo.get_by_code = AsyncMock(return_value=make_coupon(max_uses=1, current_uses=0))
        mock_coupon_repo.increment_uses = AsyncMock(return_value=False)

        # Act & Assert
        with pytest.raises(CouponValidationError) as exc_info:
            await engine.track_coupon_usage(track_command)

        assert exc_info.value.code == "COUPON_EXHAUSTED"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()

    async def test_unknown_coupon_raises(self, engine, mock_coupon_repo, mock_redemption_repo, track_command):
        mock_coupon_repo.get_by_code = AsyncMock(return_value=None)

        with pytest.raises(CouponNotFoundError):
            await engine.track_coupon_usage(track_command)

        mock_redemption_repo.create.assert_not_called()
