"""Maintenance request endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from propdesk.api.v1._authz import require_user, require_user_or_owner
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.schemas.maintenance import (
    MaintenanceCategoryResponse,
    MaintenanceCreateRequest,
    MaintenanceFilters,
    MaintenanceResponse,
    MaintenanceStatusUpdateRequest,
    MaintenanceStatusValue,
)
from propdesk.services.maintenance_service import MaintenanceService

router = APIRouter(tags=["maintenance"])


def _not_found(request_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Maintenance request not found: {request_id}")


@router.get("/maintenance/categories")
def list_categories(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    require_user(authorization, [], registry=registry)
    categories = MaintenanceService(db).fetch_categories()
    return [MaintenanceCategoryResponse.model_validate(category).model_dump() for category in categories]


@router.get("/maintenance")
def list_requests(
    request_status: MaintenanceStatusValue | None = Query(default=None, alias="status"),
    property_id: str | None = None,
    tenant_id: str | None = None,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    """Staff see every request; tenants only the ones they filed."""
    user, own_only = require_user_or_owner(authorization, "maintenance.read", "maintenance.read_own", registry=registry)
    filters = MaintenanceFilters(
        status=request_status,
        property_id=property_id,
        tenant_id=user.user_id if own_only else tenant_id,
    )
    requests = MaintenanceService(db).fetch_requests(filters)
    return [MaintenanceResponse.model_validate(request).model_dump(mode="json") for request in requests]


@router.post("/maintenance", response_model=MaintenanceResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: MaintenanceCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> MaintenanceResponse:
    user = require_user(authorization, ["maintenance.create"], registry=registry)
    service = MaintenanceService(db)
    request = service.create_request(user.user_id, payload.model_dump())
    return MaintenanceResponse.model_validate(service.fetch_request_by_id(request.id) or request)


@router.get("/maintenance/{request_id}", response_model=MaintenanceResponse)
def get_request(
    request_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> MaintenanceResponse:
    user, own_only = require_user_or_owner(authorization, "maintenance.read", "maintenance.read_own", registry=registry)
    request = MaintenanceService(db).fetch_request_by_id(request_id)
    if request is None or (own_only and request.tenant_id != user.user_id):
        raise _not_found(request_id)
    return MaintenanceResponse.model_validate(request)


@router.post("/maintenance/{request_id}/status", response_model=MaintenanceResponse)
def update_request_status(
    request_id: str,
    payload: MaintenanceStatusUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> MaintenanceResponse:
    require_user(authorization, ["maintenance.write"], registry=registry)
    request = MaintenanceService(db).update_request_status(request_id, payload.status, payload.notes)
    if request is None:
        raise _not_found(request_id)
    return MaintenanceResponse.model_validate(request)
