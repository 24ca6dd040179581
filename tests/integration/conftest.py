from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from billing_core.depends import get_config, get_session
from billing_core.domain.plan import PlanTier
from billing_core.domain.subscription import Subscription, SubscriptionStatus

CRON_SECRET = "integration-cron-secret"


class IntegrationConfig(ApplicationConfig):
    CRON_SECRET = CRON_SECRET
    FINALIZER_NOTIFICATION_WEBHOOK = None
    ENABLE_SENTRY = 0


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create a fresh SQLite test database per test"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'billing_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def app(db_session):
    """Create the application with database session and config overrides"""
    from billing_core.api.app import create_app

    app = create_app(IntegrationConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_config] = lambda: IntegrationConfig
    return app


@pytest_asyncio.fixture
async def client(app):
    """Create test client over ASGI transport"""
    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def seed_subscription(db_session):
    """Insert a subscription row; defaults to an active standard plan"""

    async def _seed(**overrides) -> Subscription:
        now = datetime.utcnow()
        data = dict(
            organization_id="org_integration",
            plan_tier=PlanTier.STANDARD,
            status=SubscriptionStatus.ACTIVE,
            registration_limit=5000,
            current_registration_count=0,
            amount=1900,
            currency="USD",
            current_period_start=now - timedelta(days=10),
            current_period_end=now + timedelta(days=20),
            created_at=now,
            updated_at=now,
        )
        data.update(overrides)
        subscription = Subscription(**data)
        db_session.add(subscription)
        await db_session.commit()
        await db_session.refresh(subscription)
        return subscription

    return _seed


@pytest.fixture
def cron_secret():
    return CRON_SECRET
