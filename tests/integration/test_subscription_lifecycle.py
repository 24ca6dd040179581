"""Integration tests for the subscription lifecycle

Tests cover:
- Upgrade keeps the registration counter on the existing row
- Upgrade without a row starts a new period
- Cancel moves the row to canceling, finalizer moves it to canceled
- Finalizer sweeps are idempotent and skip rows still in their period
"""

import pytest
from datetime import datetime, timedelta

from billing_core.adapter.repositories import SqlAlchemySubscriptionRepository
from billing_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from billing_core.app.use_cases.subscription import (
    PlanUpgrade,
    SubscriptionCancel,
    SubscriptionFinalizer,
)
from billing_core.domain.plan import PlanCatalog, PlanTier
from billing_core.domain.subscription import SubscriptionStatus


@pytest.fixture
def subscription_repo(db_session):
    return SqlAlchemySubscriptionRepository(db_session)


@pytest.fixture
def uow(db_session):
    return SqlAlchemyUnitOfWork(db_session)


@pytest.mark.asyncio
class TestUpgradeIntegration:
    async def test_upgrade_preserves_counter(self, uow, subscription_repo, seed_subscription):
        """
        Given: An active standard subscription with 4200 registrations
        When: Upgrading to enterprise
        Then: Same row, new limit and amount, counter unchanged
        """
        # Arrange
        subscription = await seed_subscription(current_registration_count=4200)
        use_case = PlanUpgrade(uow, subscription_repo, PlanCatalog.build())

        # Act
        result = await use_case.execute_upgrade("org_integration", PlanTier.ENTERPRISE)

        # Assert
        assert result.is_ok()
        assert result.value.subscription_id == subscription.id

        reloaded = await subscription_repo.get_by_id(subscription.id)
        assert reloaded.plan_tier == PlanTier.ENTERPRISE
        assert reloaded.registration_limit == 50000
        assert reloaded.amount == 9900
        assert reloaded.current_registration_count == 4200

    async def test_upgrade_without_row_creates_subscription(self, uow, subscription_repo):
        # Arrange
        use_case = PlanUpgrade(uow, subscription_repo, PlanCatalog.build(), period_days=30)

        # Act
        result = await use_case.execute_upgrade("org_fresh", PlanTier.STANDARD)

        # Assert
        assert result.is_ok()
        created = await subscription_repo.get_current("org_fresh")
        assert created.id == result.value.subscription_id
        assert created.current_registration_count == 0
        assert created.status == SubscriptionStatus.ACTIVE
        assert (created.current_period_end - created.current_period_start) == timedelta(days=30)


@pytest.mark.asyncio
class TestCancelAndFinalizeIntegration:
    async def test_cancel_then_finalize(self, uow, subscription_repo, seed_subscription):
        """
        Given: An active standard subscription
        When: It is cancelled and the finalizer runs after period end
        Then: canceling first, canceled after the sweep
        """
        # Arrange
        subscription = await seed_subscription()
        cancel = SubscriptionCancel(uow, subscription_repo, PlanCatalog.build())
        finalizer = SubscriptionFinalizer(uow, subscription_repo)

        # Act
        cancel_result = await cancel.execute_cancel("org_integration", "too_expensive")
        mid_period = await finalizer.finalize_expired(datetime.utcnow())
        after_period = await finalizer.finalize_expired(
            subscription.current_period_end + timedelta(hours=1)
        )

        # Assert
        assert cancel_result.is_ok()
        assert mid_period.total == 0
        assert after_period.finalized_subscription_ids == [subscription.id]

        reloaded = await subscription_repo.get_by_id(subscription.id)
        assert reloaded.status == SubscriptionStatus.CANCELED
        assert reloaded.cancellation_reason == "too_expensive"
        assert reloaded.cancelled_at is not None

    async def test_finalizer_is_idempotent(self, uow, subscription_repo, seed_subscription):
        """
        Given: Two expired canceling rows and an active row past its period end
        When: The sweep runs twice
        Then: The first run finalizes both canceling rows, the second finds nothing
        """
        # Arrange
        now = datetime.utcnow()
        past = now - timedelta(days=1)
        first = await seed_subscription(
            organization_id="org_a", status=SubscriptionStatus.CANCELING,
            current_period_start=past - timedelta(days=30), current_period_end=past,
        )
        second = await seed_subscription(
            organization_id="org_b", status=SubscriptionStatus.CANCELING,
            current_period_start=past - timedelta(days=29),
            current_period_end=past + timedelta(hours=1),
        )
        active = await seed_subscription(
            organization_id="org_c",
            current_period_start=past - timedelta(days=30), current_period_end=past,
        )
        finalizer = SubscriptionFinalizer(uow, subscription_repo)

        # Act
        first_run = await finalizer.finalize_expired(now)
        second_run = await finalizer.finalize_expired(now)

        # Assert
        assert first_run.total == 2
        assert first_run.finalized_subscription_ids == [first.id, second.id]
        assert first_run.errors == []
        assert second_run.total == 0

        untouched = await subscription_repo.get_by_id(active.id)
        assert untouched.status == SubscriptionStatus.ACTIVE

    async def test_mark_canceled_only_from_canceling(self, subscription_repo, seed_subscription):
        # Arrange
        subscription = await seed_subscription()

        # Act
        changed = await subscription_repo.mark_canceled(subscription.id, datetime.utcnow())

        # Assert
        assert changed is False
