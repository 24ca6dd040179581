"""Integration tests for RecordRegistration use case

Tests cover:
- Tracked subscription: registration insert and counter increment commit together
- Rejection at the limit writes nothing
- Conditional increment refuses to pass the limit
- Implicit free tier counts live registration records
- Concurrent admissions on the implicit free tier never pass the limit
"""

import asyncio
import pytest

from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from billing_core.adapter.repositories import (
    SqlAlchemyRegistrationRepository,
    SqlAlchemySubscriptionRepository,
)
from billing_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from billing_core.app.use_cases.subscription.dtos import RecordRegistrationCommandDTO
from billing_core.app.use_cases.subscription.record_registration import RecordRegistration
from billing_core.domain.plan import PlanCatalog, PlanTier
from billing_core.domain.registration import Registration


def _use_case(db_session: AsyncSession) -> RecordRegistration:
    return RecordRegistration(
        SqlAlchemyUnitOfWork(db_session),
        SqlAlchemySubscriptionRepository(db_session),
        SqlAlchemyRegistrationRepository(db_session),
        PlanCatalog.build(),
    )


@pytest.mark.asyncio
class TestRecordRegistrationIntegration:
    """Integration tests with real database"""

    async def test_registration_increments_tracked_counter(self, db_session, seed_subscription):
        """
        Given: An active standard subscription with 10 registrations
        When: One registration is recorded
        Then: A registration row exists and the counter is 11
        """
        # Arrange
        subscription = await seed_subscription(current_registration_count=10)

        # Act
        result = await _use_case(db_session).execute(
            RecordRegistrationCommandDTO(organization_id="org_integration", qr_code_set_id="qr_1")
        )

        # Assert
        assert result.is_ok()
        assert result.value.current_count == 11
        assert result.value.remaining == 4989

        reloaded = await SqlAlchemySubscriptionRepository(db_session).get_by_id(subscription.id)
        assert reloaded.current_registration_count == 11

        count = await SqlAlchemyRegistrationRepository(db_session).count_by_organization(
            "org_integration"
        )
        assert count == 1

    async def test_rejection_at_limit_writes_nothing(self, db_session, seed_subscription):
        """
        Given: A subscription whose counter equals its limit
        When: A registration is attempted
        Then: REGISTRATION_LIMIT_REACHED and no rows change
        """
        # Arrange
        subscription = await seed_subscription(registration_limit=2, current_registration_count=2)

        # Act
        result = await _use_case(db_session).execute(
            RecordRegistrationCommandDTO(organization_id="org_integration")
        )

        # Assert
        assert result.is_err()
        assert result.error.code == "REGISTRATION_LIMIT_REACHED"

        reloaded = await SqlAlchemySubscriptionRepository(db_session).get_by_id(subscription.id)
        assert reloaded.current_registration_count == 2

        count = await SqlAlchemyRegistrationRepository(db_session).count_by_organization(
            "org_integration"
        )
        assert count == 0

    async def test_conditional_increment_stops_at_limit(self, db_session, seed_subscription):
        """
        Given: A subscription one below its limit
        When: The counter is incremented twice
        Then: The first succeeds, the second affects no row
        """
        # Arrange
        subscription = await seed_subscription(registration_limit=3, current_registration_count=2)
        repo = SqlAlchemySubscriptionRepository(db_session)

        # Act
        first = await repo.increment_registration_count(subscription.id)
        second = await repo.increment_registration_count(subscription.id)
        await db_session.commit()

        # Assert
        assert first is True
        assert second is False
        reloaded = await repo.get_by_id(subscription.id)
        assert reloaded.current_registration_count == 3

    async def test_implicit_free_tier_counts_records(self, db_session):
        """
        Given: No subscription row and 100 registration records
        When: Another registration is attempted
        Then: Rejected against the free limit of 100
        """
        # Arrange
        db_session.add_all(
            [Registration(organization_id="org_no_row") for _ in range(100)]
        )
        await db_session.commit()

        # Act
        result = await _use_case(db_session).execute(
            RecordRegistrationCommandDTO(organization_id="org_no_row")
        )

        # Assert
        assert result.is_err()
        assert result.error.code == "REGISTRATION_LIMIT_REACHED"
        assert result.error.reason == "current=100, limit=100"

    async def test_implicit_free_tier_admits_below_limit(self, db_session):
        # Act
        result = await _use_case(db_session).execute(
            RecordRegistrationCommandDTO(organization_id="org_new")
        )

        # Assert
        assert result.is_ok()
        assert result.value.plan_tier == PlanTier.FREE
        assert result.value.current_count == 1
        assert result.value.remaining == 99

    async def test_concurrent_free_tier_admissions_stop_at_limit(self, engine, db_session):
        """
        Given: No subscription row and 99 registration records
        When: Two registrations are recorded concurrently in separate sessions
        Then: Exactly one is admitted and the live count ends at 100
        """
        # Arrange
        db_session.add_all(
            [Registration(organization_id="org_race") for _ in range(99)]
        )
        await db_session.commit()

        Session = sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        async def register():
            async with Session() as session:
                return await _use_case(session).execute(
                    RecordRegistrationCommandDTO(organization_id="org_race")
                )

        # Act
        results = await asyncio.gather(register(), register())

        # Assert
        assert sorted(result.is_ok() for result in results) == [False, True]
        rejected = next(result for result in results if result.is_err())
        assert rejected.error.code == "REGISTRATION_LIMIT_REACHED"

        count = await SqlAlchemyRegistrationRepository(db_session).count_by_organization(
            "org_race"
        )
        assert count == 100
