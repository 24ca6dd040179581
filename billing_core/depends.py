from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from billing_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from billing_core.domain.plan import PlanCatalog

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

_plan_catalog = PlanCatalog.from_config(ApplicationConfig)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_plan_catalog() -> PlanCatalog:
    return _plan_catalog


async def create_tables():
    """Create missing tables, used for local SQLite runs"""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def get_config():
    return ApplicationConfig
