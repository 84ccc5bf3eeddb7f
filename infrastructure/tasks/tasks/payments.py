"""
Payment reconciliation task.

Completes pending payments whose webhook was lost and whose client never
confirmed. Uses the same conditional update as confirm and webhook, so it
can race either of them safely.
"""
from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Optional

from celery import shared_task

from application.services.payment_service import PaymentApplicationService
from core.config import settings
from core.logging_config import get_logger
from infrastructure.database import engine
from infrastructure.external.payments import get_payment_gateway
from infrastructure.tasks.utils.base_task import BaseTask
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


logger = get_logger(__name__)


async def reconcile_pending_payments(
    older_than_minutes: Optional[int] = None,
    limit: Optional[int] = None,
    *,
    service: Optional[PaymentApplicationService] = None,
) -> int:
    older_than = timedelta(minutes=older_than_minutes or settings.reconcile.pending_after_minutes)
    batch = limit or settings.reconcile.batch_size
    owned = service is None
    if service is None:
        service = PaymentApplicationService(uow_factory=SQLAlchemyUnitOfWork, gateway=get_payment_gateway())
    try:
        return await service.reconcile_pending(
            older_than, batch, max_age=timedelta(hours=settings.reconcile.max_age_hours)
        )
    finally:
        if owned:
            await service.aclose()
            # connections are bound to this run's event loop
            await engine.dispose()


@shared_task(
    name="payments.reconcile_pending",
    base=BaseTask,
    bind=True,
    max_retries=3,
    default_retry_delay=30,
)
def task_reconcile_pending(self, older_than_minutes: Optional[int] = None, limit: Optional[int] = None):
    try:
        completed = asyncio.run(reconcile_pending_payments(older_than_minutes, limit))
    except Exception as exc:  # pragma: no cover
        logger.error("payment_reconcile_failed", error=str(exc))
        raise self.retry(exc=exc)
    logger.info("payment_reconcile_task_done", completed=completed)
    return {"completed": completed}
