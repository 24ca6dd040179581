"""Subscription Repository Interface

Defines the contract for subscription persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List
from billing_core.domain.subscription import Subscription, SubscriptionStatus


class SubscriptionRepository(ABC):
    """
    Repository interface for Subscription persistence

    An organization may have several historical rows; the most recent by
    current_period_start is authoritative.
    """

    @abstractmethod
    async def get_current(
        self,
        organization_id: str,
        status: Optional[SubscriptionStatus] = None,
        for_update: bool = False,
    ) -> Optional[Subscription]:
        """
        Retrieve the most recent subscription for an organization

        Args:
            organization_id: Organization identifier
            status: Optional filter by status (e.g., ACTIVE)
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Most recently started Subscription if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        pass

    @abstractmethod
    async def create(self, subscription: Subscription) -> Subscription:
        """
        Create a new subscription

        Returns:
            Created Subscription with generated ID
        """
        pass

    @abstractmethod
    async def update(self, subscription: Subscription) -> Subscription:
        """
        Persist every field of an existing subscription in one flush
        """
        pass

    @abstractmethod
    async def increment_registration_count(self, subscription_id: int) -> bool:
        """
        Atomically add one registration if the row is active and under its limit

        Args:
            subscription_id: Subscription ID

        Returns:
            True if the counter was incremented, False if the limit was reached
            or the row is no longer active
        """
        pass

    @abstractmethod
    async def find_expired_cancellations(self, now: datetime) -> List[Subscription]:
        """
        Retrieve canceling subscriptions whose period ended before now

        Returns:
            Subscriptions ordered by current_period_end ascending
        """
        pass

    @abstractmethod
    async def mark_canceled(self, subscription_id: int, now: datetime) -> bool:
        """
        Move a canceling subscription to canceled

        Returns:
            True if the row changed, False if it was not canceling
        """
        pass
