from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError

from propdesk.database.models import Notification
from propdesk.services.notification_service import NotificationService


def _notify(session, user, title, minutes_ago=0, is_read=False):
    row = Notification(
        user_id=user.id,
        type="info",
        title=title,
        message=title,
        is_read=is_read,
        created_at=datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=minutes_ago),
    )
    session.add(row)
    session.commit()
    return row


def test_feed_is_newest_first_and_scoped(session, seed):
    user = seed.admin()
    other = seed.admin()
    _notify(session, user, "vieja", minutes_ago=10)
    _notify(session, user, "nueva", minutes_ago=1)
    _notify(session, other, "ajena")
    service = NotificationService(db=session)

    assert [row.title for row in service.fetch_notifications(user.id)] == ["nueva", "vieja"]
    assert [row.title for row in service.fetch_notifications(user.id, limit=1)] == ["nueva"]
    assert service.fetch_notifications(None) == []


def test_unread_count_and_mark_read(session, seed):
    user = seed.admin()
    first = _notify(session, user, "uno")
    _notify(session, user, "dos")
    _notify(session, user, "tres", is_read=True)
    service = NotificationService(db=session)

    assert service.unread_count(user.id) == 2
    marked = service.mark_as_read(first.id)
    assert marked.is_read is True
    assert marked.read_at is not None
    assert service.unread_count(user.id) == 1

    assert service.mark_all_as_read(user.id) == 1
    assert service.unread_count(user.id) == 0
    assert service.mark_as_read("missing") is None


def test_mark_read_respects_owner(session, seed):
    owner = seed.admin()
    intruder = seed.tenant()
    row = _notify(session, owner, "privada")
    service = NotificationService(db=session)

    assert service.mark_as_read(row.id, user_id=intruder.id) is None
    assert service.mark_as_read(row.id, user_id=owner.id).is_read is True


def test_notify_admins_fans_out_to_every_admin(session, seed):
    admins = [seed.admin(), seed.admin()]
    seed.tenant()

    written = NotificationService(db=session).notify_admins(title="Aviso", message="Hola", type="payment")

    assert written == 2
    rows = session.query(Notification).all()
    assert {row.user_id for row in rows} == {admin.id for admin in admins}
    assert {row.type for row in rows} == {"payment"}


def test_notify_admins_without_admins_writes_nothing(session, seed):
    seed.tenant()
    assert NotificationService(db=session).notify_admins(title="Aviso", message="Hola") == 0


def test_notify_failures_are_logged_not_raised(session, seed, monkeypatch):
    user = seed.tenant()
    service = NotificationService(db=session)

    def _fail():
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(session, "commit", _fail)
    assert service.notify_user(user.id, title="x", message="y") is None
    assert service.notify_admins(title="x", message="y") == 0
