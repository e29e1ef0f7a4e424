from __future__ import annotations

from datetime import date, timedelta

import pytest

from propdesk.core.exceptions import ValidationError
from propdesk.database.models import Notification, Payment
from propdesk.schemas.payments import PaymentFilters, PaymentResponse
from propdesk.services.payment_service import PaymentService
from propdesk.services.query_builder import Sort


def _lease(seed, tenant_name="Lucía Gómez"):
    tenant = seed.tenant(full_name=tenant_name)
    contract = seed.contract(seed.property(), tenant, monthly_rent=150000)
    return tenant, contract


def test_create_payment_starts_pending_and_notifies_tenant(session, seed):
    tenant, contract = _lease(seed)
    payment = PaymentService(db=session).create_payment(
        {
            "contract_id": contract.id,
            "tenant_id": tenant.id,
            "amount": 150000,
            "currency": "ARS",
            "due_date": date(2025, 3, 5),
            "period_month": 3,
            "period_year": 2025,
        }
    )

    assert payment.status == "pendiente"
    assert payment.late_fee == 0
    notification = session.query(Notification).filter(Notification.user_id == tenant.id).one()
    assert notification.title == "Nuevo pago creado"
    assert notification.message == "Se ha creado un nuevo pago de 150000 ARS con vencimiento el 5/3/2025"
    assert notification.entity_id == payment.id


def test_register_payment_marks_paid_and_notifies_admins(session, seed):
    admins = [seed.admin(), seed.admin()]
    _, contract = _lease(seed, tenant_name="Martín")
    payment = seed.payment(contract, amount=1500.5, currency="USD")

    registered = PaymentService(db=session).register_payment(
        payment.id, "transferencia", receipt_number="R-1"
    )

    assert registered.status == "pagado"
    assert registered.payment_date is not None
    assert registered.receipt_number == "R-1"
    notes = session.query(Notification).filter(Notification.title == "Nuevo pago registrado").all()
    assert {note.user_id for note in notes} == {admin.id for admin in admins}
    assert notes[0].message == "Martín ha pagado un pago - 1500.5 USD"


def test_register_payment_rejects_unknown_method(session, seed):
    _, contract = _lease(seed)
    payment = seed.payment(contract)
    with pytest.raises(ValidationError):
        PaymentService(db=session).register_payment(payment.id, "cheque")


def test_register_missing_payment_returns_none(session):
    assert PaymentService(db=session).register_payment("missing", "efectivo") is None


def test_resetting_status_clears_settlement_details(session, seed):
    _, contract = _lease(seed)
    payment = seed.payment(
        contract, status="pagado", payment_date=date.today(), payment_method="efectivo", receipt_number="R-9"
    )

    updated = PaymentService(db=session).update_payment_status(payment.id, "pendiente")

    assert updated.status == "pendiente"
    assert updated.payment_date is None
    assert updated.payment_method is None
    assert updated.receipt_number is None


def test_overdue_sweep_flips_only_past_due_pending(session, seed):
    _, contract = _lease(seed)
    late = seed.payment(contract, due_date=date.today() - timedelta(days=3))
    seed.payment(contract, due_date=date.today() + timedelta(days=3))
    seed.payment(contract, due_date=date.today() - timedelta(days=30), status="pagado")

    overdue = PaymentService(db=session).get_overdue_payments()

    assert [payment.id for payment in overdue] == [late.id]
    session.expire_all()
    assert session.get(Payment, late.id).status == "vencido"


def test_stats_bucket_amounts_by_status(session, seed):
    _, contract = _lease(seed)
    seed.payment(contract, amount=100, status="pendiente", period_month=1, period_year=2025)
    seed.payment(contract, amount=200, status="pagado", period_month=1, period_year=2025)
    seed.payment(contract, amount=50, status="vencido", period_month=2, period_year=2025)
    seed.payment(contract, amount=75, status="cancelado", period_month=1, period_year=2025)
    service = PaymentService(db=session)

    assert service.get_payment_stats() == {
        "total_pending": 100,
        "total_paid": 200,
        "total_overdue": 50,
        "count_pending": 1,
        "count_paid": 1,
        "count_overdue": 1,
    }
    january = service.get_payment_stats(period_year=2025, period_month=1)
    assert january["count_overdue"] == 0
    assert january["total_paid"] == 200


def test_tenant_payments_are_scoped_and_latest_first(session, seed):
    tenant, contract = _lease(seed)
    _, other_contract = _lease(seed, tenant_name="Otro")
    seed.payment(contract, due_date=date(2025, 1, 10))
    seed.payment(contract, due_date=date(2025, 2, 10))
    seed.payment(other_contract, due_date=date(2025, 3, 10))
    service = PaymentService(db=session)

    page = service.fetch_tenant_payments(tenant.id)

    assert [payment.due_date for payment in page.items] == [date(2025, 2, 10), date(2025, 1, 10)]
    assert service.fetch_tenant_payments(None).items == []


def test_fetch_payments_defaults_to_due_date_ascending(session, seed):
    _, contract = _lease(seed)
    seed.payment(contract, due_date=date(2025, 5, 1))
    seed.payment(contract, due_date=date(2025, 4, 1))
    service = PaymentService(db=session)

    ascending = service.fetch_payments()
    descending = service.fetch_payments(sort=Sort("due_date", "desc"))

    assert [p.due_date for p in ascending.items] == [date(2025, 4, 1), date(2025, 5, 1)]
    assert [p.due_date for p in descending.items] == [date(2025, 5, 1), date(2025, 4, 1)]


def test_fetch_payments_search_matches_tenant_name(session, seed):
    _, contract = _lease(seed, tenant_name="Carla Ruiz")
    _, other = _lease(seed, tenant_name="Diego Sosa")
    seed.payment(contract)
    seed.payment(other)

    page = PaymentService(db=session).fetch_payments(PaymentFilters(search="carla"))

    assert [payment.tenant.full_name for payment in page.items] == ["Carla Ruiz"]
    assert page.total == 2


def test_upcoming_and_next_payment(session, seed):
    tenant, contract = _lease(seed)
    soon = seed.payment(contract, due_date=date.today() + timedelta(days=2))
    seed.payment(contract, due_date=date.today() + timedelta(days=20))
    service = PaymentService(db=session)

    assert [payment.id for payment in service.get_upcoming_payments(7)] == [soon.id]
    assert service.get_next_tenant_payment(tenant.id).id == soon.id
    assert service.get_next_tenant_payment(None) is None


def test_active_contracts_for_payment_form(session, seed):
    _, active = _lease(seed)
    seed.contract(seed.property(), seed.tenant(), status="pendiente")

    contracts = PaymentService(db=session).fetch_active_contracts()

    assert [contract.id for contract in contracts] == [active.id]


def test_payment_response_carries_period_label(seed):
    contract = seed.contract(seed.property(), seed.tenant())
    payment = seed.payment(contract, period_month=3, period_year=2025)
    assert PaymentResponse.model_validate(payment).period_label == "Marzo 2025"
