"""Notification Service Interface

Defines the contract for announcing subscription lifecycle events.
"""

from abc import ABC, abstractmethod
from billing_core.domain.subscription import Subscription


class NotificationService(ABC):
    """
    Abstract notification service for subscription events

    Implementations can send notifications via:
    - Logging
    - Webhook (HTTP POST)
    """

    @abstractmethod
    async def send_cancellation_finalized(self, subscription: Subscription) -> bool:
        """
        Announce that a subscription moved from canceling to canceled

        Args:
            subscription: The finalized subscription

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass
