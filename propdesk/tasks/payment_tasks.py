"""Scheduled payment housekeeping."""

from __future__ import annotations

import logging

from propdesk.database.db import get_db_session
from propdesk.services.payment_service import PaymentService
from propdesk.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="payments.mark_overdue")
def mark_overdue_payments() -> dict:
    """Flip pending payments past their due date to ``vencido``."""
    with get_db_session() as db:
        overdue = PaymentService(db).get_overdue_payments()
        payment_ids = [payment.id for payment in overdue]
    logger.info(
        "tasks.payments.mark_overdue.completed",
        extra={"event": "tasks.payments.mark_overdue.completed", "count": len(payment_ids)},
    )
    return {"count": len(payment_ids), "payment_ids": payment_ids}
