"""Financial reports: revenue history, month summary and latest transactions."""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from propdesk.core.enums import PAYMENT_PAID, PAYMENT_PENDING, PropertyStatus
from propdesk.database.models import Payment, Property
from propdesk.schemas.stats import ReportData, ReportSummary, RevenuePoint, Transaction
from propdesk.services.base_service import BaseService
from propdesk.services.query_builder import count_where, sum_column
from propdesk.utils.dates import add_months, as_datetime, month_key, month_keys_between, month_start

logger = logging.getLogger(__name__)


class ReportService(BaseService):
    """Report figures computed from paid and pending payments."""

    def fetch_revenue_history(self, start: date | None = None, end: date | None = None) -> list[RevenuePoint]:
        """Paid amounts per ``YYYY-MM``; every month in range appears, even when empty.

        Defaults to the twelve months up to today.
        """
        today = self._today()
        end = end or today
        start = start or add_months(as_datetime(today), -12).date()
        buckets = {key: 0.0 for key in month_keys_between(start, end)}
        try:
            rows = (
                self.db.query(Payment.payment_date, Payment.amount)
                .filter(
                    Payment.status == PAYMENT_PAID,
                    Payment.payment_date >= start,
                    Payment.payment_date <= end,
                )
                .order_by(Payment.payment_date.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("reports.revenue.failed", extra={"event": "reports.revenue.failed"})
            return []

        for payment_date, amount in rows:
            key = month_key(payment_date)
            if key in buckets:
                buckets[key] += amount or 0
        return [RevenuePoint(month=key, amount=amount) for key, amount in buckets.items()]

    def fetch_report_summary(self) -> ReportSummary:
        this_month = month_start(self._utcnow_naive())
        last_month = add_months(this_month, -1)
        try:
            current_revenue = sum_column(
                self.db, Payment.amount, Payment.status == PAYMENT_PAID, Payment.payment_date >= this_month.date()
            )
            last_revenue = sum_column(
                self.db,
                Payment.amount,
                Payment.status == PAYMENT_PAID,
                Payment.payment_date >= last_month.date(),
                Payment.payment_date < this_month.date(),
            )
            active_properties = count_where(self.db, Property, Property.status == PropertyStatus.RENTED.value)
            pending_count = count_where(self.db, Payment, Payment.status == PAYMENT_PENDING)
            pending_amount = sum_column(self.db, Payment.amount, Payment.status == PAYMENT_PENDING)
        except SQLAlchemyError:
            logger.exception("reports.summary.failed", extra={"event": "reports.summary.failed"})
            return ReportSummary()

        revenue_change = (current_revenue - last_revenue) / last_revenue * 100 if last_revenue else 0
        return ReportSummary(
            total_revenue=current_revenue,
            revenue_change=revenue_change,
            active_properties=active_properties,
            pending_payments=pending_count,
            pending_amount=pending_amount,
        )

    def fetch_recent_transactions(self, limit: int = 10) -> list[Transaction]:
        try:
            payments = (
                self.db.query(Payment)
                .options(joinedload(Payment.tenant))
                .order_by(Payment.payment_date.desc().nulls_last(), Payment.created_at.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError:
            logger.exception("reports.transactions.failed", extra={"event": "reports.transactions.failed"})
            return []

        return [
            Transaction(
                id=payment.id,
                payment_date=payment.payment_date,
                status=payment.status,
                email=(payment.tenant.email if payment.tenant else None) or "N/A",
                tenant_name=payment.tenant.full_name if payment.tenant else None,
                amount=payment.amount,
                currency=payment.currency,
            )
            for payment in payments
        ]

    def load_report_data(self, start: date | None = None, end: date | None = None) -> ReportData:
        return ReportData(
            revenue_history=self.fetch_revenue_history(start, end),
            summary=self.fetch_report_summary(),
            recent_transactions=self.fetch_recent_transactions(),
        )
