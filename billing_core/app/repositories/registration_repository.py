"""Registration Repository Interface"""

from abc import ABC, abstractmethod
from billing_core.domain.registration import Registration


class RegistrationRepository(ABC):
    @abstractmethod
    async def create(self, registration: Registration) -> Registration:
        pass

    @abstractmethod
    async def count_by_organization(self, organization_id: str) -> int:
        """
        Count live registration records for an organization

        Used for the implicit free tier, where no cached counter exists.
        """
        pass

    @abstractmethod
    async def lock_organization(self, organization_id: str) -> None:
        """
        Serialize registration admission for one organization until the
        current transaction ends

        Required on the implicit free tier, where there is no subscription
        row to lock and the admission decision rests on a live count.
        """
        pass
