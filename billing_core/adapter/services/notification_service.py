"""Notification Service Implementations

Provides concrete implementations for announcing finalized cancellations.
"""

import logging
from typing import Optional
import httpx
from billing_core.app.services.notification_service import NotificationService
from billing_core.domain.subscription import Subscription

logger = logging.getLogger(__name__)


def _enum_value(value) -> str:
    return getattr(value, "value", value)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs finalized cancellations

    Useful for development and testing, or as a fallback.
    """

    async def send_cancellation_finalized(self, subscription: Subscription) -> bool:
        logger.info(
            f"[CANCELLATION FINALIZED] Organization: {subscription.organization_id}, "
            f"Subscription: {subscription.id}, "
            f"Plan: {_enum_value(subscription.plan_tier)}, "
            f"Period end: {subscription.current_period_end.isoformat()}, "
            f"Reason: {subscription.cancellation_reason}"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that posts finalized cancellations to an HTTP webhook

    Sends JSON payload to configured webhook URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST events to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_cancellation_finalized(self, subscription: Subscription) -> bool:
        """
        Send the finalized cancellation via webhook

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {
            "type": "subscription.cancellation_finalized",
            "subscription_id": subscription.id,
            "organization_id": subscription.organization_id,
            "plan_tier": _enum_value(subscription.plan_tier),
            "status": _enum_value(subscription.status),
            "cancellation_reason": subscription.cancellation_reason,
            "cancelled_at": subscription.cancelled_at.isoformat() if subscription.cancelled_at else None,
            "current_period_end": subscription.current_period_end.isoformat(),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(
                    f"Webhook notification sent for subscription {subscription.id} to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(
                f"Failed to send webhook notification for subscription {subscription.id}: {e}"
            )
            return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Returns True if at least one service delivered.
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send_cancellation_finalized(self, subscription: Subscription) -> bool:
        success = False
        for service in self.services:
            try:
                if await service.send_cancellation_finalized(subscription):
                    success = True
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
        return success


def create_notification_service(webhook_url: Optional[str] = None) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(WebhookNotificationService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
