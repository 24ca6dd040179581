"""SQLAlchemy Registration Repository Implementation"""

from sqlalchemy import func, text
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from billing_core.app.repositories.registration_repository import RegistrationRepository
from billing_core.domain.registration import Registration


class SqlAlchemyRegistrationRepository(RegistrationRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, registration: Registration) -> Registration:
        self.session.add(registration)
        await self.session.flush()
        await self.session.refresh(registration)
        return registration

    async def count_by_organization(self, organization_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Registration)
            .where(Registration.organization_id == organization_id)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one() or 0)

    async def lock_organization(self, organization_id: str) -> None:
        """
        PostgreSQL: transaction-scoped advisory lock keyed by organization.
        SQLite: take the database write lock up front; a write statement
        matching no rows is enough to hold it until commit or rollback.
        """
        dialect = self.session.get_bind().dialect.name

        if dialect == "postgresql":
            await self.session.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:organization_id))"),
                params={"organization_id": organization_id},
            )
        elif dialect == "sqlite":
            await self.session.execute(
                text("UPDATE registrations SET organization_id = organization_id WHERE 0")
            )
