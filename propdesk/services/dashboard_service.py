"""Admin dashboard: recent activity feed and headline stats."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from propdesk.core.enums import OCCUPIED_PROPERTY_STATUSES, PAYMENT_PAID, ROLE_TENANT
from propdesk.database.models import Contract, MaintenanceRequest, Payment, Profile, Property
from propdesk.schemas.stats import Activity, DashboardData, StatCard
from propdesk.services.base_service import BaseService
from propdesk.services.query_builder import count_where, sum_column
from propdesk.utils.dates import add_months, as_datetime, month_start
from propdesk.utils.formatting import format_currency, format_relative_time, percent_change, percent_of, signed_percent

logger = logging.getLogger(__name__)

UNKNOWN_PROPERTY = "Propiedad desconocida"
UNNAMED_USER = "Usuario sin nombre"
SOURCE_LIMIT = 5


def _stat_card(title: str, value: str, change: int, icon: str) -> StatCard:
    return StatCard(
        title=title,
        value=value,
        change=signed_percent(change),
        change_type="positive" if change >= 0 else "negative",
        icon=icon,
    )


class DashboardService(BaseService):
    """Aggregates several tables into the admin dashboard view."""

    def _activity(self, key: str, action: str, place: str, moment: datetime, icon: str, kind: str, now: datetime) -> Activity:
        return Activity(
            id=key,
            action=action,
            property=place,
            time=format_relative_time(moment, now),
            icon=icon,
            type=kind,
            occurred_at=moment,
        )

    def fetch_recent_activity(self, limit: int = 5) -> list[Activity]:
        """Merge the latest contracts, payments, maintenance requests and tenants, newest first."""
        now = self._utcnow_naive()
        activities: list[Activity] = []
        try:
            contracts = (
                self.db.query(Contract)
                .options(joinedload(Contract.property))
                .order_by(Contract.updated_at.desc())
                .limit(SOURCE_LIMIT)
                .all()
            )
            for contract in contracts:
                is_new = contract.created_at == contract.updated_at
                activities.append(
                    self._activity(
                        f"contract-{contract.id}",
                        "Nuevo contrato firmado" if is_new else "Contrato renovado",
                        (contract.property.address if contract.property else None) or UNKNOWN_PROPERTY,
                        contract.updated_at,
                        "i-lucide-file-signature",
                        "contract",
                        now,
                    )
                )

            payments = (
                self.db.query(Payment)
                .options(joinedload(Payment.contract).joinedload(Contract.property))
                .filter(Payment.status == PAYMENT_PAID, Payment.payment_date.isnot(None))
                .order_by(Payment.payment_date.desc())
                .limit(SOURCE_LIMIT)
                .all()
            )
            for payment in payments:
                prop = payment.contract.property if payment.contract else None
                activities.append(
                    self._activity(
                        f"payment-{payment.id}",
                        "Pago recibido",
                        (prop.address if prop else None) or UNKNOWN_PROPERTY,
                        as_datetime(payment.payment_date or payment.created_at),
                        "i-lucide-credit-card",
                        "payment",
                        now,
                    )
                )

            requests = (
                self.db.query(MaintenanceRequest)
                .options(joinedload(MaintenanceRequest.property))
                .order_by(MaintenanceRequest.created_at.desc())
                .limit(SOURCE_LIMIT)
                .all()
            )
            for request in requests:
                activities.append(
                    self._activity(
                        f"maintenance-{request.id}",
                        "Solicitud de mantenimiento",
                        (request.property.address if request.property else None) or UNKNOWN_PROPERTY,
                        request.created_at,
                        "i-lucide-wrench",
                        "maintenance",
                        now,
                    )
                )

            tenants = (
                self.db.query(Profile)
                .filter(Profile.role == ROLE_TENANT)
                .order_by(Profile.created_at.desc())
                .limit(SOURCE_LIMIT)
                .all()
            )
            for tenant in tenants:
                activities.append(
                    self._activity(
                        f"tenant-{tenant.id}",
                        "Nuevo inquilino registrado",
                        tenant.full_name or UNNAMED_USER,
                        tenant.created_at,
                        "i-lucide-user-plus",
                        "tenant",
                        now,
                    )
                )
        except SQLAlchemyError:
            logger.exception("dashboard.activity.failed", extra={"event": "dashboard.activity.failed"})
            return []

        activities.sort(key=lambda activity: activity.occurred_at, reverse=True)
        return activities[:limit]

    def fetch_stats(self) -> list[StatCard]:
        """Headline counters, each compared with where it stood a month ago."""
        now = self._utcnow_naive()
        last_month = add_months(now, -1)
        this_month = month_start(now)
        previous_month = add_months(this_month, -1)
        try:
            total_properties = count_where(self.db, Property)
            properties_last_month = count_where(self.db, Property, Property.created_at < last_month)

            tenant_criteria = (Profile.role == ROLE_TENANT, Profile.is_active.is_(True))
            active_tenants = count_where(self.db, Profile, *tenant_criteria)
            tenants_last_month = count_where(self.db, Profile, *tenant_criteria, Profile.created_at < last_month)

            income = sum_column(
                self.db, Payment.amount, Payment.status == PAYMENT_PAID, Payment.payment_date >= this_month.date()
            )
            last_income = sum_column(
                self.db,
                Payment.amount,
                Payment.status == PAYMENT_PAID,
                Payment.payment_date >= previous_month.date(),
                Payment.payment_date < this_month.date(),
            )

            occupied = count_where(self.db, Property, Property.status.in_(OCCUPIED_PROPERTY_STATUSES))
            occupied_last_month = count_where(
                self.db,
                Property,
                Property.status.in_(OCCUPIED_PROPERTY_STATUSES),
                Property.updated_at < last_month,
            )
        except SQLAlchemyError:
            logger.exception("dashboard.stats.failed", extra={"event": "dashboard.stats.failed"})
            return []

        occupancy_rate = percent_of(occupied, total_properties)
        last_occupancy = percent_of(occupied_last_month, properties_last_month)
        occupancy_change = occupancy_rate - last_occupancy if last_occupancy > 0 else 0

        return [
            _stat_card(
                "Total Propiedades",
                str(total_properties),
                percent_change(total_properties, properties_last_month),
                "i-lucide-building-2",
            ),
            _stat_card(
                "Inquilinos Activos",
                str(active_tenants),
                percent_change(active_tenants, tenants_last_month),
                "i-lucide-users",
            ),
            _stat_card(
                "Ingresos Mensuales",
                format_currency(income),
                percent_change(income, last_income),
                "i-lucide-dollar-sign",
            ),
            _stat_card(
                "Tasa de Ocupación",
                f"{occupancy_rate}%",
                occupancy_change,
                "i-lucide-percent",
            ),
        ]

    def fetch_dashboard_data(self) -> DashboardData:
        return DashboardData(activities=self.fetch_recent_activity(SOURCE_LIMIT), stats=self.fetch_stats())
