"""Cancellation Finalizer Background Worker

Periodically moves canceling subscriptions whose billing period has ended to
canceled. Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from billing_core.adapter.repositories import SqlAlchemySubscriptionRepository
from billing_core.adapter.services import SqlAlchemyUnitOfWork, create_notification_service
from billing_core.app.services.notification_service import NotificationService
from billing_core.app.use_cases.subscription import FinalizationResultDTO, SubscriptionFinalizer

logger = logging.getLogger(__name__)


class CancellationFinalizerWorker:
    """
    Background worker for finalizing cancellations

    Features:
    - Finds canceling subscriptions past current_period_end
    - Finalizes each one independently, a failing row does not stop the sweep
    - Announces finalized cancellations (log and optional webhook)
    - Can run once or continuously (default: hourly)

    Usage:
        # Run once
        worker = CancellationFinalizerWorker()
        result = await worker.run_once()

        # Run continuously
        worker = CancellationFinalizerWorker()
        await worker.run_forever(interval_seconds=3600)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            notification_service: Defaults to logging, plus the configured
                FINALIZER_NOTIFICATION_WEBHOOK if any
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI

        if notification_service is None:
            webhook_url = getattr(ApplicationConfig, "FINALIZER_NOTIFICATION_WEBHOOK", None)
            notification_service = create_notification_service(webhook_url)
        self.notification_service = notification_service

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("CancellationFinalizerWorker initialized")

    async def run_once(self, now: Optional[datetime] = None) -> FinalizationResultDTO:
        """
        Run one finalization sweep

        Args:
            now: Reference time (defaults to utcnow)

        Returns:
            FinalizationResultDTO with sweep results
        """
        now = now or datetime.utcnow()

        if not getattr(ApplicationConfig, "FINALIZER_ENABLED", True):
            logger.info("Cancellation finalizer is disabled, skipping")
            return FinalizationResultDTO(
                total=0,
                finalized=0,
                finalized_subscription_ids=[],
                errors=[],
                run_at=now,
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = SubscriptionFinalizer(
                uow=SqlAlchemyUnitOfWork(session),
                subscription_repo=SqlAlchemySubscriptionRepository(session),
                notification_service=self.notification_service,
            )

            result = await use_case.finalize_expired(now)

            if result.errors:
                logger.error(f"ALERT: {len(result.errors)} cancellations failed to finalize")
                for error in result.errors:
                    logger.error(f"  - {error}")

            return result

    async def run_forever(self, interval_seconds: int = 3600):
        """
        Run the sweep continuously at the specified interval

        Args:
            interval_seconds: Seconds between sweeps (default: 1 hour)
        """
        logger.info(
            f"Starting continuous cancellation finalizer with {interval_seconds}s interval"
        )

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Finalizer cycle complete. "
                    f"Finalized {result.finalized}/{result.total} cancellations "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Finalizer cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("CancellationFinalizerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m billing_core.worker.cancellation_finalizer

        # Run continuously (default interval from FINALIZER_INTERVAL_SECONDS)
        python -m billing_core.worker.cancellation_finalizer --continuous

        # Run continuously with custom interval (in seconds)
        python -m billing_core.worker.cancellation_finalizer --continuous --interval 600
    """
    import argparse

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Cancellation Finalizer Worker")
    parser.add_argument(
        "--continuous", action="store_true", help="Run continuously instead of once"
    )
    parser.add_argument(
        "--interval", type=int,
        default=getattr(ApplicationConfig, "FINALIZER_INTERVAL_SECONDS", 3600),
        help="Interval between runs in seconds (default: 3600 = 1 hour)"
    )
    args = parser.parse_args()

    worker = CancellationFinalizerWorker()

    try:
        if args.continuous:
            await worker.run_forever(interval_seconds=args.interval)
        else:
            result = await worker.run_once()
            print("Finalization complete:")
            print(f"  Expired cancellations: {result.total}")
            print(f"  Finalized: {result.finalized}")
            print(f"  Errors: {len(result.errors)}")
            print(f"  Execution time: {result.execution_time_ms}ms")
            for error in result.errors:
                print(f"  - {error}")
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
