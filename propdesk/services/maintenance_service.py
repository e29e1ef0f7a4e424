"""Maintenance requests and their service categories."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from propdesk.core.enums import MaintenancePriority, MaintenanceStatus, values_of
from propdesk.core.exceptions import AuthenticationError, DatabaseError, ValidationError
from propdesk.database.models import MaintenanceCategory, MaintenanceRequest
from propdesk.schemas.maintenance import MaintenanceFilters
from propdesk.services.base_service import BaseService
from propdesk.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("property_id", "title", "priority")


def _request_options():
    return (joinedload(MaintenanceRequest.property), joinedload(MaintenanceRequest.tenant))


class MaintenanceService(BaseService):
    """Service for tenant-reported maintenance requests."""

    def __init__(self, db=None, notifications: NotificationService | None = None) -> None:
        super().__init__(db)
        self.notifications = notifications or NotificationService(self.db)

    def fetch_categories(self) -> list[MaintenanceCategory]:
        try:
            return (
                self.db.query(MaintenanceCategory)
                .filter(MaintenanceCategory.is_active.is_(True))
                .order_by(MaintenanceCategory.name.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("maintenance.categories.failed", extra={"event": "maintenance.categories.failed"})
            return []

    def fetch_requests(self, filters: MaintenanceFilters | None = None) -> list[MaintenanceRequest]:
        filters = filters or MaintenanceFilters()
        query = self.db.query(MaintenanceRequest).options(*_request_options())
        if filters.status:
            query = query.filter(MaintenanceRequest.status == filters.status)
        if filters.property_id:
            query = query.filter(MaintenanceRequest.property_id == filters.property_id)
        if filters.tenant_id:
            query = query.filter(MaintenanceRequest.tenant_id == filters.tenant_id)
        try:
            return query.order_by(MaintenanceRequest.created_at.desc()).all()
        except SQLAlchemyError:
            logger.exception("maintenance.fetch.failed", extra={"event": "maintenance.fetch.failed"})
            return []

    def fetch_request_by_id(self, request_id: str) -> MaintenanceRequest | None:
        try:
            return (
                self.db.query(MaintenanceRequest)
                .options(*_request_options())
                .filter(MaintenanceRequest.id == request_id)
                .first()
            )
        except SQLAlchemyError:
            logger.exception("maintenance.fetch_one.failed", extra={"event": "maintenance.fetch_one.failed", "request_id": request_id})
            return None

    def create_request(self, user_id: str | None, payload: dict[str, Any]) -> MaintenanceRequest:
        """File a request on behalf of ``user_id`` and alert the admins."""
        if not user_id:
            raise AuthenticationError("Usuario no autenticado")
        for field in _REQUIRED_FIELDS:
            if not payload.get(field):
                raise ValidationError(f"{field} es requerido")
        if payload["priority"] not in values_of(MaintenancePriority):
            raise ValidationError(f"Unsupported priority: {payload['priority']}")

        request = MaintenanceRequest(
            property_id=payload["property_id"],
            tenant_id=user_id,
            title=payload["title"],
            description=payload.get("description") or "",
            category=payload.get("category") or None,
            priority=payload["priority"],
            status=MaintenanceStatus.PENDING.value,
            reported_date=self._utcnow_naive(),
        )
        if payload.get("images"):
            request.images = list(payload["images"])
        self.db.add(request)
        try:
            self.commit()
        except DatabaseError:
            logger.exception("maintenance.create.failed", extra={"event": "maintenance.create.failed", "user_id": user_id})
            raise

        self.notifications.notify_admins(
            type="maintenance",
            title="Nueva solicitud de mantenimiento",
            message=f"{payload['title']} - Propiedad: {payload['property_id']}",
            entity_type="maintenance_request",
            entity_id=request.id,
        )
        logger.info("maintenance.created", extra={"event": "maintenance.created", "request_id": request.id})
        return request

    def update_request_status(self, request_id: str, status: str, notes: str | None = None) -> MaintenanceRequest | None:
        if status not in values_of(MaintenanceStatus):
            raise ValidationError(f"Unsupported maintenance status: {status}")
        request = self.db.get(MaintenanceRequest, request_id)
        if request is None:
            return None
        request.status = status
        if notes:
            request.notes = notes
        request.updated_at = self._utcnow_naive()
        self.commit()
        return request
