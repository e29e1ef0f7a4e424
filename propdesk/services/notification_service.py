"""In-app notification feed and fan-out helpers."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from propdesk.core.config import get_config
from propdesk.core.enums import ROLE_ADMIN
from propdesk.database.models import Notification, Profile
from propdesk.services.base_service import BaseService

logger = logging.getLogger(__name__)


class NotificationService(BaseService):
    """Per-user notification feed with read tracking."""

    def fetch_notifications(self, user_id: str | None, limit: int | None = None) -> list[Notification]:
        if not user_id:
            return []
        window = limit or get_config().NOTIFICATIONS_LIMIT
        try:
            return (
                self.db.query(Notification)
                .filter(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc())
                .limit(window)
                .all()
            )
        except SQLAlchemyError:
            logger.exception("notifications.fetch.failed", extra={"event": "notifications.fetch.failed", "user_id": user_id})
            return []

    def unread_count(self, user_id: str | None) -> int:
        if not user_id:
            return 0
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

    def mark_as_read(self, notification_id: str, user_id: str | None = None) -> Notification | None:
        """Flag one notification read. With ``user_id`` only that user's own rows match."""
        notification = self.db.get(Notification, notification_id)
        if notification is None or (user_id and notification.user_id != user_id):
            return None
        notification.is_read = True
        notification.read_at = self._utcnow_naive()
        self.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self, user_id: str | None) -> int:
        """Mark every unread notification of ``user_id`` as read; returns how many changed."""
        if not user_id:
            return 0
        updated = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update(
                {Notification.is_read: True, Notification.read_at: self._utcnow_naive()},
                synchronize_session=False,
            )
        )
        self.commit()
        return int(updated or 0)

    def notify_user(
        self,
        user_id: str,
        title: str,
        message: str,
        type: str = "info",
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> Notification | None:
        """Insert one notification. Failures are logged, never raised."""
        try:
            notification = Notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                entity_type=entity_type,
                entity_id=entity_id,
            )
            self.db.add(notification)
            self.db.commit()
            return notification
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("notifications.create.failed", extra={"event": "notifications.create.failed", "user_id": user_id})
            return None

    def notify_admins(
        self,
        title: str,
        message: str,
        type: str = "info",
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> int:
        """Insert one notification per admin profile; returns how many were written."""
        try:
            admin_ids = [row.id for row in self.db.query(Profile.id).filter(Profile.role == ROLE_ADMIN).all()]
            if not admin_ids:
                return 0
            self.db.add_all(
                Notification(
                    user_id=admin_id,
                    type=type,
                    title=title,
                    message=message,
                    entity_type=entity_type,
                    entity_id=entity_id,
                )
                for admin_id in admin_ids
            )
            self.db.commit()
            return len(admin_ids)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("notifications.admins.failed", extra={"event": "notifications.admins.failed"})
            return 0
