"""Notification feed endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from propdesk.api.v1._authz import require_user
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.schemas.notifications import NotificationFeed, NotificationResponse
from propdesk.services.notification_service import NotificationService

router = APIRouter(tags=["notifications"])


@router.get("/notifications", response_model=NotificationFeed)
def notification_feed(
    limit: int | None = Query(default=None, ge=1, le=200),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> NotificationFeed:
    user = require_user(authorization, ["notifications.read"], registry=registry)
    service = NotificationService(db)
    items = service.fetch_notifications(user.user_id, limit=limit)
    return NotificationFeed(
        items=[NotificationResponse.model_validate(item) for item in items],
        unread_count=service.unread_count(user.user_id),
    )


@router.post("/notifications/read-all")
def mark_all_read(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    user = require_user(authorization, ["notifications.read"], registry=registry)
    return {"updated": NotificationService(db).mark_all_as_read(user.user_id)}


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> NotificationResponse:
    user = require_user(authorization, ["notifications.read"], registry=registry)
    notification = NotificationService(db).mark_as_read(notification_id, user_id=user.user_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Notification not found: {notification_id}")
    return NotificationResponse.model_validate(notification)
