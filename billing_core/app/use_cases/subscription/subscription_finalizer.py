"""SubscriptionFinalizer Use Case

Converts expired canceling subscriptions to canceled. Invoked repeatedly on
a schedule; re-running is a no-op because only canceling rows are selected
and updated.
"""

import logging
import time
from datetime import datetime
from typing import List, Optional
from billing_core.app.services.notification_service import NotificationService
from billing_core.app.services.unit_of_work import UnitOfWork
from billing_core.app.repositories.subscription_repository import SubscriptionRepository
from billing_core.domain.subscription import Subscription, SubscriptionStatus
from .dtos import FinalizationResultDTO

logger = logging.getLogger(__name__)


def _snapshot(subscription: Subscription) -> Subscription:
    """Detached copy that is safe to read after the session rolls back"""
    return Subscription(**subscription.model_dump())


class SubscriptionFinalizer:
    """
    Use Case: Close cancellations whose billing period has ended

    Business Rules:
    1. Only canceling rows with current_period_end < now are selected
    2. The transition is a conditional update on status = canceling
    3. A failing row is logged and skipped, the sweep continues
    4. Notification failures never undo a finalization
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        notification_service: Optional[NotificationService] = None,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.notification_service = notification_service

    async def find_expired_cancellations(self, now: datetime) -> List[Subscription]:
        """Canceling rows with current_period_end < now, oldest period end first"""
        return await self.subscription_repo.find_expired_cancellations(now)

    async def finalize_cancellation(self, subscription_id: int, now: datetime) -> bool:
        """
        Set a canceling subscription to canceled

        Returns:
            True if the row moved to canceled, False if it was not canceling
        """
        try:
            changed = await self.subscription_repo.mark_canceled(subscription_id, now)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        if changed:
            logger.info(f"Finalized cancellation of subscription {subscription_id}")
        else:
            logger.debug(f"Subscription {subscription_id} was not canceling, nothing to finalize")

        return changed

    async def finalize_expired(self, now: Optional[datetime] = None) -> FinalizationResultDTO:
        """
        Run one sweep over all expired cancellations

        Args:
            now: Reference time (defaults to utcnow)

        Returns:
            FinalizationResultDTO with counts, finalized ids and per-row errors
        """
        start_time = time.time()
        now = now or datetime.utcnow()

        expired = await self.find_expired_cancellations(now)
        # Snapshot rows up front, a rollback expires every instance in the session
        targets = [(subscription.id, _snapshot(subscription)) for subscription in expired]

        finalized_ids: List[int] = []
        errors: List[str] = []

        for subscription_id, subscription in targets:
            try:
                changed = await self.finalize_cancellation(subscription_id, now)
            except Exception as e:
                logger.error(f"Failed to finalize subscription {subscription_id}: {e}")
                errors.append(f"Subscription {subscription_id}: {e}")
                continue

            if not changed:
                continue

            finalized_ids.append(subscription_id)
            subscription.status = SubscriptionStatus.CANCELED
            subscription.updated_at = now

            if self.notification_service is not None:
                await self._notify(subscription)

        execution_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            f"Finalization sweep complete: {len(finalized_ids)}/{len(targets)} "
            f"finalized, {len(errors)} errors in {execution_time_ms}ms"
        )

        return FinalizationResultDTO(
            total=len(targets),
            finalized=len(finalized_ids),
            finalized_subscription_ids=finalized_ids,
            errors=errors,
            run_at=now,
            execution_time_ms=execution_time_ms,
        )

    async def _notify(self, subscription: Subscription) -> None:
        try:
            sent = await self.notification_service.send_cancellation_finalized(subscription)
        except Exception as e:
            logger.error(f"Notification for subscription {subscription.id} failed: {e}")
            return

        if not sent:
            logger.warning(f"Notification for subscription {subscription.id} was not delivered")
