"""Payment service for rent collection workflows."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from propdesk.core.enums import (
    CONTRACT_ACTIVE,
    PAYMENT_OVERDUE,
    PAYMENT_PAID,
    PAYMENT_PENDING,
    PaymentMethod,
    PaymentStatus,
    values_of,
)
from propdesk.core.exceptions import DatabaseError, ValidationError
from propdesk.database.models import Contract, Payment
from propdesk.schemas.payments import PAYMENT_SORT_FIELDS, PaymentFilters
from propdesk.services.base_service import BaseService
from propdesk.services.notification_service import NotificationService
from propdesk.services.query_builder import (
    Page,
    Pagination,
    Sort,
    apply_pagination,
    apply_sort,
    contains_text,
    count_rows,
    match_any,
)
from propdesk.utils.formatting import format_short_date, plain_number
from propdesk.utils.validators import normalize_search

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_SORT = Sort("due_date", "asc")
TENANT_PAYMENT_SORT = Sort("due_date", "desc")

# Statuses that void a recorded settlement.
_CLEARING_STATUSES = {PaymentStatus.CANCELLED.value, PAYMENT_PENDING}


def _payment_options():
    return (
        joinedload(Payment.contract).joinedload(Contract.property),
        joinedload(Payment.tenant),
    )


def _matches_search(payment: Payment, needle: str) -> bool:
    tenant = payment.tenant
    prop = payment.contract.property if payment.contract else None
    return (
        contains_text(tenant.full_name if tenant else None, needle)
        or contains_text(prop.title if prop else None, needle)
        or contains_text(prop.address if prop else None, needle)
    )


class PaymentService(BaseService):
    """Service for payment listing, registration and overdue tracking."""

    def __init__(self, db=None, notifications: NotificationService | None = None) -> None:
        super().__init__(db)
        self.notifications = notifications or NotificationService(self.db)

    def _filtered_query(self, filters: PaymentFilters):
        query = self.db.query(Payment)
        if filters.status:
            query = match_any(query, Payment.status, filters.status)
        if filters.contract_id:
            query = query.filter(Payment.contract_id == filters.contract_id)
        if filters.tenant_id:
            query = query.filter(Payment.tenant_id == filters.tenant_id)
        if filters.period_month is not None:
            query = query.filter(Payment.period_month == filters.period_month)
        if filters.period_year is not None:
            query = query.filter(Payment.period_year == filters.period_year)
        if filters.from_date:
            query = query.filter(Payment.due_date >= filters.from_date)
        if filters.to_date:
            query = query.filter(Payment.due_date <= filters.to_date)
        return query

    def fetch_payments(
        self,
        filters: PaymentFilters | None = None,
        sort: Sort | None = None,
        pagination: Pagination | None = None,
    ) -> Page[Payment]:
        filters = filters or PaymentFilters()
        query = apply_sort(self._filtered_query(filters), Payment, sort, PAYMENT_SORT_FIELDS, DEFAULT_PAYMENT_SORT)
        try:
            total = count_rows(query)
            rows = apply_pagination(query.options(*_payment_options()), pagination).all()
        except SQLAlchemyError:
            logger.exception("payments.fetch.failed", extra={"event": "payments.fetch.failed"})
            return Page(items=[], total=0)

        needle = normalize_search(filters.search)
        if needle:
            rows = [payment for payment in rows if _matches_search(payment, needle)]
        return Page(items=rows, total=total)

    def fetch_tenant_payments(
        self,
        user_id: str | None,
        filters: PaymentFilters | None = None,
        sort: Sort | None = None,
    ) -> Page[Payment]:
        """Payments of one tenant, latest due date first unless sorted otherwise."""
        if not user_id:
            return Page(items=[], total=0)
        scoped = (filters or PaymentFilters()).model_copy(update={"tenant_id": user_id})
        return self.fetch_payments(scoped, sort or TENANT_PAYMENT_SORT)

    def fetch_payment(self, payment_id: str) -> Payment | None:
        try:
            return (
                self.db.query(Payment)
                .options(*_payment_options())
                .filter(Payment.id == payment_id)
                .first()
            )
        except SQLAlchemyError:
            logger.exception("payments.fetch_one.failed", extra={"event": "payments.fetch_one.failed", "payment_id": payment_id})
            return None

    def fetch_active_contracts(self) -> list[Contract]:
        try:
            return (
                self.db.query(Contract)
                .options(joinedload(Contract.tenant), joinedload(Contract.property))
                .filter(Contract.status == CONTRACT_ACTIVE)
                .order_by(Contract.created_at.desc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("payments.active_contracts.failed", extra={"event": "payments.active_contracts.failed"})
            return []

    def create_payment(self, data: dict[str, Any]) -> Payment:
        """Create a pending payment and notify its tenant."""
        payment = Payment(
            contract_id=data["contract_id"],
            tenant_id=data["tenant_id"],
            amount=data["amount"],
            currency=data.get("currency") or "ARS",
            due_date=data["due_date"],
            period_month=data["period_month"],
            period_year=data["period_year"],
            status=PAYMENT_PENDING,
            notes=data.get("notes") or None,
            late_fee=0,
        )
        self.db.add(payment)
        try:
            self.commit()
        except DatabaseError:
            logger.exception("payments.create.failed", extra={"event": "payments.create.failed"})
            raise

        self.notifications.notify_user(
            user_id=payment.tenant_id,
            type="payment",
            title="Nuevo pago creado",
            message=(
                f"Se ha creado un nuevo pago de {plain_number(payment.amount or 0)} {payment.currency} "
                f"con vencimiento el {format_short_date(payment.due_date)}"
            ),
            entity_type="payment",
            entity_id=payment.id,
        )
        logger.info("payments.created", extra={"event": "payments.created", "payment_id": payment.id})
        return self.fetch_payment(payment.id) or payment

    def register_payment(
        self,
        payment_id: str,
        payment_method: str,
        payment_date: date | None = None,
        receipt_number: str | None = None,
        notes: str | None = None,
    ) -> Payment | None:
        """Record a settlement and tell every admin about it."""
        if payment_method not in values_of(PaymentMethod):
            raise ValidationError(f"Unsupported payment method: {payment_method}")
        payment = self.fetch_payment(payment_id)
        if payment is None:
            return None

        payment.status = PAYMENT_PAID
        payment.payment_method = payment_method
        payment.payment_date = payment_date or self._today()
        payment.receipt_number = receipt_number or None
        payment.notes = notes or None
        payment.updated_at = self._utcnow_naive()
        self.commit()

        tenant_name = (payment.tenant.full_name if payment.tenant else None) or "Un inquilino"
        self.notifications.notify_admins(
            type="payment",
            title="Nuevo pago registrado",
            message=f"{tenant_name} ha pagado un pago - {plain_number(payment.amount or 0)} {payment.currency or 'ARS'}",
            entity_type="payment",
            entity_id=payment.id,
        )
        logger.info("payments.registered", extra={"event": "payments.registered", "payment_id": payment_id})
        return self.fetch_payment(payment_id)

    def update_payment_status(self, payment_id: str, status: str) -> Payment | None:
        if status not in values_of(PaymentStatus):
            raise ValidationError(f"Unsupported payment status: {status}")
        payment = self.db.get(Payment, payment_id)
        if payment is None:
            return None

        payment.status = status
        payment.updated_at = self._utcnow_naive()
        if status in _CLEARING_STATUSES:
            payment.payment_date = None
            payment.payment_method = None
            payment.receipt_number = None
        self.commit()
        return self.fetch_payment(payment_id)

    def get_payment_stats(self, period_year: int | None = None, period_month: int | None = None) -> dict[str, float | int]:
        """Totals and counts per pending/paid/overdue, optionally for one billing period.

        When only one of year or month is given the other defaults to the
        current one.
        """
        stats: dict[str, float | int] = {
            "total_pending": 0,
            "total_paid": 0,
            "total_overdue": 0,
            "count_pending": 0,
            "count_paid": 0,
            "count_overdue": 0,
        }
        query = self.db.query(Payment.status, Payment.amount)
        if period_year or period_month:
            today = self._today()
            query = query.filter(
                Payment.period_year == (period_year or today.year),
                Payment.period_month == (period_month or today.month),
            )
        try:
            rows = query.all()
        except SQLAlchemyError:
            logger.exception("payments.stats.failed", extra={"event": "payments.stats.failed"})
            return stats

        buckets = {PAYMENT_PENDING: "pending", PAYMENT_PAID: "paid", PAYMENT_OVERDUE: "overdue"}
        for status, amount in rows:
            bucket = buckets.get(status)
            if bucket is None:
                continue
            stats[f"total_{bucket}"] += amount or 0
            stats[f"count_{bucket}"] += 1
        return stats

    def get_upcoming_payments(self, days_ahead: int = 7) -> list[Payment]:
        today = self._today()
        try:
            return (
                self.db.query(Payment)
                .options(*_payment_options())
                .filter(
                    Payment.status == PAYMENT_PENDING,
                    Payment.due_date >= today,
                    Payment.due_date <= today + timedelta(days=days_ahead),
                )
                .order_by(Payment.due_date.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("payments.upcoming.failed", extra={"event": "payments.upcoming.failed"})
            return []

    def get_overdue_payments(self) -> list[Payment]:
        """Pending payments past their due date, flipped to ``vencido``."""
        try:
            overdue = (
                self.db.query(Payment)
                .options(*_payment_options())
                .filter(Payment.status == PAYMENT_PENDING, Payment.due_date < self._today())
                .order_by(Payment.due_date.asc())
                .all()
            )
            now = self._utcnow_naive()
            for payment in overdue:
                payment.status = PAYMENT_OVERDUE
                payment.updated_at = now
            if overdue:
                self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("payments.overdue.failed", extra={"event": "payments.overdue.failed"})
            return []

        if overdue:
            logger.info("payments.overdue.marked", extra={"event": "payments.overdue.marked", "count": len(overdue)})
        return overdue

    def get_next_tenant_payment(self, user_id: str | None) -> Payment | None:
        if not user_id:
            return None
        try:
            return (
                self.db.query(Payment)
                .options(*_payment_options())
                .filter(
                    Payment.tenant_id == user_id,
                    Payment.status.in_([PAYMENT_PENDING, PAYMENT_OVERDUE]),
                )
                .order_by(Payment.due_date.asc())
                .first()
            )
        except SQLAlchemyError:
            logger.exception("payments.next.failed", extra={"event": "payments.next.failed", "user_id": user_id})
            return None
