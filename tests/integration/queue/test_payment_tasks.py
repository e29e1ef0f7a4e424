from __future__ import annotations

from contextlib import contextmanager
from datetime import date, timedelta

from propdesk.database.models import Payment
from propdesk.tasks import payment_tasks
from propdesk.tasks.celery_app import celery_app


def test_overdue_sweep_is_scheduled_daily():
    schedule = celery_app.conf.beat_schedule
    entry = next(item for item in schedule.values() if item["task"] == "payments.mark_overdue")
    assert entry["schedule"].hour == {3}
    assert entry["schedule"].minute == {0}


def test_overdue_sweep_flips_late_pending_payments(session, seed, monkeypatch):
    @contextmanager
    def _session_scope():
        yield session

    monkeypatch.setattr(payment_tasks, "get_db_session", _session_scope)
    contract = seed.contract(seed.property(), seed.tenant())
    late = seed.payment(contract, due_date=date.today() - timedelta(days=3))
    seed.payment(contract, due_date=date.today() + timedelta(days=3))
    seed.payment(contract, due_date=date.today() - timedelta(days=10), status="pagado")

    result = payment_tasks.mark_overdue_payments.run()

    assert result == {"count": 1, "payment_ids": [late.id]}
    session.expire_all()
    assert session.get(Payment, late.id).status == "vencido"


def test_overdue_sweep_with_nothing_due(session, monkeypatch):
    @contextmanager
    def _session_scope():
        yield session

    monkeypatch.setattr(payment_tasks, "get_db_session", _session_scope)
    assert payment_tasks.mark_overdue_payments.run() == {"count": 0, "payment_ids": []}
