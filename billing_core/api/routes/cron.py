"""Cron API Routes

Entry point for an external scheduler to run the cancellation finalizer.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header, status
from sqlmodel.ext.asyncio.session import AsyncSession

from billing_core.api.error import ClientError
from billing_core.app.use_cases.subscription import SubscriptionFinalizer
from billing_core.app.use_cases.subscription.dtos import FinalizationResultDTO
from billing_core.adapter.repositories import SqlAlchemySubscriptionRepository
from billing_core.adapter.services import SqlAlchemyUnitOfWork, create_notification_service
from billing_core.depends import get_config, get_session
from billing_core.libs.result import Error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing/cron", tags=["Cron"])


def verify_cron_secret(authorization: Optional[str], secret: Optional[str]) -> None:
    if not secret:
        logger.error("CRON_SECRET is not configured, refusing to run cron job")
        raise ClientError(
            Error(code="CRON_NOT_CONFIGURED", message="Cron secret not configured"),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if authorization != f"Bearer {secret}":
        raise ClientError(
            Error(code="UNAUTHORIZED", message="Unauthorized"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


@router.post("/finalize-cancellations", response_model=FinalizationResultDTO)
async def finalize_cancellations(
    authorization: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Run one finalizer sweep: every canceling subscription whose period has
    ended moves to canceled.

    Requires `Authorization: Bearer <CRON_SECRET>`.
    """
    verify_cron_secret(authorization, config.CRON_SECRET)

    use_case = SubscriptionFinalizer(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySubscriptionRepository(session),
        notification_service=create_notification_service(config.FINALIZER_NOTIFICATION_WEBHOOK),
    )
    return await use_case.finalize_expired()
