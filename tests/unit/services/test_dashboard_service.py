from __future__ import annotations

from datetime import datetime, timedelta, timezone

from propdesk.database.models import MaintenanceRequest
from propdesk.services.dashboard_service import DashboardService


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _stats_by_title(cards):
    return {card.title: card for card in cards}


def test_activity_feed_merges_sources_newest_first(session, seed):
    now = _utcnow()
    tenant = seed.tenant(full_name="Nueva Inquilina")
    prop = seed.property(address="Av. Santa Fe 100")
    renewed = seed.contract(prop, tenant, created_at=now - timedelta(days=40), updated_at=now - timedelta(hours=2))
    payment = seed.payment(renewed, status="pagado", payment_date=(now - timedelta(days=3)).date())
    session.add(MaintenanceRequest(property_id=prop.id, tenant_id=tenant.id, title="Caldera", created_at=now - timedelta(minutes=5)))
    session.commit()

    activities = DashboardService(db=session).fetch_recent_activity()

    assert [activity.type for activity in activities] == ["tenant", "maintenance", "contract", "payment"]
    by_type = {activity.type: activity for activity in activities}
    assert by_type["contract"].action == "Contrato renovado"
    assert by_type["contract"].property == "Av. Santa Fe 100"
    assert by_type["contract"].time == "Hace 2 horas"
    assert by_type["payment"].id == f"payment-{payment.id}"
    assert by_type["payment"].action == "Pago recibido"
    assert by_type["payment"].time == "Hace 3 días"
    assert by_type["maintenance"].time == "Hace 5 minutos"
    assert by_type["tenant"].property == "Nueva Inquilina"
    assert by_type["tenant"].time == "Ahora mismo"


def test_new_contract_reads_as_signed(session, seed):
    seed.contract(seed.property(), seed.tenant())

    activities = DashboardService(db=session).fetch_recent_activity()

    contract_activity = next(activity for activity in activities if activity.type == "contract")
    assert contract_activity.action == "Nuevo contrato firmado"


def test_activity_feed_is_capped(session, seed):
    for index in range(7):
        seed.tenant(full_name=f"Inquilino {index}")

    activities = DashboardService(db=session).fetch_recent_activity(limit=5)

    assert len(activities) == 5


def test_unnamed_tenant_gets_placeholder(session, seed):
    seed.tenant(full_name=None)
    activities = DashboardService(db=session).fetch_recent_activity()
    assert activities[0].property == "Usuario sin nombre"


def test_property_and_occupancy_cards_compare_with_last_month(session, seed):
    old = _utcnow() - timedelta(days=60)
    seed.property(status="alquilada", created_at=old, updated_at=old)
    seed.property()
    seed.property()

    cards = _stats_by_title(DashboardService(db=session).fetch_stats())

    assert cards["Total Propiedades"].value == "3"
    assert cards["Total Propiedades"].change == "+200%"
    assert cards["Total Propiedades"].change_type == "positive"
    assert cards["Tasa de Ocupación"].value == "33%"
    assert cards["Tasa de Ocupación"].change == "-67%"
    assert cards["Tasa de Ocupación"].change_type == "negative"


def test_income_card_compares_paid_months(session, seed):
    today = _utcnow().date()
    this_month = today.replace(day=1)
    previous_month = (this_month - timedelta(days=1)).replace(day=1)
    contract = seed.contract(seed.property(), seed.tenant())
    seed.payment(contract, amount=1000, status="pagado", payment_date=today)
    seed.payment(contract, amount=500, status="pagado", payment_date=previous_month)
    seed.payment(contract, amount=9999, status="pendiente")

    cards = _stats_by_title(DashboardService(db=session).fetch_stats())

    assert cards["Ingresos Mensuales"].value == "$ 1.000"
    assert cards["Ingresos Mensuales"].change == "+100%"
    assert cards["Inquilinos Activos"].value == "1"
    assert cards["Inquilinos Activos"].change == "+0%"


def test_dashboard_data_bundles_both_views(session, seed):
    seed.property()
    data = DashboardService(db=session).fetch_dashboard_data()
    assert len(data.stats) == 4
    assert data.activities == []
