"""Unit tests for RecordRegistration use case

Tests cover:
- Admission and conditional increment on a tracked subscription
- Rejection at the limit without writing anything
- Lost race on the conditional increment
- Implicit free tier admission
- Infrastructure errors roll back and propagate
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from billing_core.app.use_cases.subscription import RecordRegistration
from billing_core.app.use_cases.subscription.dtos import RecordRegistrationCommandDTO
from billing_core.app.use_cases.subscription.record_registration import LIMIT_REACHED
from billing_core.domain.plan import PlanTier
from billing_core.domain.registration import Registration
from billing_core.domain.subscription import SubscriptionStatus


@pytest.fixture
def mock_subscription_repo():
    return MagicMock()


@pytest.fixture
def mock_registration_repo():
    repo = MagicMock()

    async def create(registration):
        registration.id = 77
        registration.registered_at = datetime(2025, 1, 15, 12, 0, 0)
        return registration

    repo.create = AsyncMock(side_effect=create)
    repo.lock_organization = AsyncMock()
    return repo


@pytest.fixture
def record_registration(mock_uow, mock_subscription_repo, mock_registration_repo, plan_catalog):
    return RecordRegistration(
        uow=mock_uow,
        subscription_repo=mock_subscription_repo,
        registration_repo=mock_registration_repo,
        plan_catalog=plan_catalog,
    )


@pytest.fixture
def command():
    return RecordRegistrationCommandDTO(organization_id="org_123", qr_code_set_id="qr_1")


@pytest.mark.asyncio
class TestRecordRegistrationTracked:
    """Organizations with an active subscription row"""

    async def test_records_and_increments(
        self, record_registration, mock_uow, mock_subscription_repo,
        mock_registration_repo, make_subscription, command
    ):
        """
        Given: Standard subscription with 10 of 5000 registrations
        When: A registration is recorded
        Then: Registration inserted, counter incremented, committed
        """
        # Arrange
        mock_subscription_repo.get_current = AsyncMock(
            return_value=make_subscription(id=5, current_registration_count=10)
        )
        mock_subscription_repo.increment_registration_count = AsyncMock(return_value=True)

        # Act
        result = await record_registration.execute(command)

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.registration_id == 77
        assert response.plan_tier == PlanTier.STANDARD
        assert response.current_count == 11
        assert response.limit == 5000
        assert response.remaining == 4989

        mock_subscription_repo.get_current.assert_called_once_with(
            "org_123", status=SubscriptionStatus.ACTIVE, for_update=True
        )
        created = mock_registration_repo.create.call_args[0][0]
        assert isinstance(created, Registration)
        assert created.organization_id == "org_123"
        assert created.qr_code_set_id == "qr_1"
        mock_subscription_repo.increment_registration_count.assert_called_once_with(5)
        mock_uow.commit.assert_called_once()

    async def test_rejects_at_limit_without_writing(
        self, record_registration, mock_uow, mock_subscription_repo,
        mock_registration_repo, make_subscription, command
    ):
        """
        Given: Standard subscription at 5000 of 5000
        When: A registration is recorded
        Then: Error result, nothing inserted, nothing committed
        """
        # Arrange
        mock_subscription_repo.get_current = AsyncMock(
            return_value=make_subscription(current_registration_count=5000)
        )
        mock_subscription_repo.increment_registration_count = AsyncMock()

        # Act
        result = await record_registration.execute(command)

        # Assert
        assert result.is_err()
        assert result.error.code == LIMIT_REACHED
        assert "Your standard plan allows 5000 registrations" in result.error.message
        mock_registration_repo.create.assert_not_called()
        mock_subscription_repo.increment_registration_count.assert_not_called()
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called()

    async def test_lost_increment_race_rolls_back(
        self, record_registration, mock_uow, mock_subscription_repo,
        make_subscription, command
    ):
        """
        Given: The check passes but the conditional increment affects no row
        When: A registration is recorded
        Then: Limit error, registration insert rolled back
        """
        # Arrange
        mock_subscription_repo.get_current = AsyncMock(
            return_value=make_subscription(current_registration_count=4999)
        )
        mock_subscription_repo.increment_registration_count = AsyncMock(return_value=False)

        # Act
        result = await record_registration.execute(command)

        # Assert
        assert result.is_err()
        assert result.error.code == LIMIT_REACHED
        mock_uow.commit.assert_not_called()
        mock_uow.rollback.assert_called()


@pytest.mark.asyncio
class TestRecordRegistrationImplicitFree:
    """Organizations without an active subscription row"""

    async def test_records_against_live_count(
        self, record_registration, mock_uow, mock_subscription_repo,
        mock_registration_repo, command
    ):
        # Arrange
        mock_subscription_repo.get_current = AsyncMock(return_value=None)
        mock_subscription_repo.increment_registration_count = AsyncMock()
        mock_registration_repo.count_by_organization = AsyncMock(return_value=42)

        # Act
        result = await record_registration.execute(command)

        # Assert
        assert result.is_ok()
        assert result.value.plan_tier == PlanTier.FREE
        assert result.value.current_count == 43
        assert result.value.remaining == 57
        mock_subscription_repo.increment_registration_count.assert_not_called()
        mock_uow.commit.assert_called_once()

    async def test_rejects_at_free_limit(
        self, record_registration, mock_subscription_repo, mock_registration_repo, command
    ):
        # Arrange
        mock_subscription_repo.get_current = AsyncMock(return_value=None)
        mock_registration_repo.count_by_organization = AsyncMock(return_value=100)

        # Act
        result = await record_registration.execute(command)

        # Assert
        assert result.is_err()
        assert result.error.message.startswith("Registration limit reached. The free plan allows 100")
        mock_registration_repo.create.assert_not_called()

    async def test_locks_organization_before_counting(
        self, record_registration, mock_subscription_repo, mock_registration_repo, command
    ):
        """
        Given: An organization without a subscription row
        When: A registration is recorded
        Then: The organization is locked before the live count is read
        """
        # Arrange
        calls = []
        mock_registration_repo.lock_organization = AsyncMock(
            side_effect=lambda organization_id: calls.append(("lock", organization_id))
        )
        mock_subscription_repo.get_current = AsyncMock(return_value=None)
        mock_registration_repo.count_by_organization = AsyncMock(
            side_effect=lambda organization_id: calls.append(("count", organization_id)) or 10
        )

        # Act
        result = await record_registration.execute(command)

        # Assert
        assert result.is_ok()
        assert calls == [("lock", "org_123"), ("count", "org_123")]


@pytest.mark.asyncio
class TestRecordRegistrationErrors:
    async def test_database_error_rolls_back_and_raises(
        self, record_registration, mock_uow, mock_subscription_repo,
        mock_registration_repo, make_subscription, command
    ):
        # Arrange
        mock_subscription_repo.get_current = AsyncMock(
            return_value=make_subscription(current_registration_count=10)
        )
        mock_registration_repo.create = AsyncMock(side_effect=RuntimeError("connection lost"))

        # Act & Assert
        with pytest.raises(RuntimeError, match="connection lost"):
            await record_registration.execute(command)

        mock_uow.rollback.assert_called()
        mock_uow.commit.assert_not_called()
