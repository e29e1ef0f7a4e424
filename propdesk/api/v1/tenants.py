"""Tenant management endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from propdesk.api.v1._authz import require_user
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.schemas.maintenance import MaintenanceResponse
from propdesk.schemas.payments import PaymentResponse
from propdesk.schemas.tenants import (
    AccountCreated,
    TenantCreateRequest,
    TenantFilters,
    TenantResponse,
    TenantStats,
    TenantUpdateRequest,
)
from propdesk.services.tenant_service import TenantService

router = APIRouter(tags=["tenants"])


@router.get("/tenants")
def list_tenants(
    search: str | None = None,
    contract_status: str = Query(default="all", alias="status"),
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int | None = Query(default=None, ge=0),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["tenants.read"], registry=registry)
    filters = TenantFilters(search=search, status=contract_status, limit=limit, offset=offset)
    tenants, count = TenantService(db).fetch_tenants(filters)
    return {"items": [tenant.model_dump(mode="json") for tenant in tenants], "count": count}


@router.get("/tenants/stats", response_model=TenantStats)
def tenant_stats(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["tenants.read"], registry=registry)
    return TenantService(db).get_tenant_stats()


@router.get("/tenants/{tenant_id}", response_model=TenantResponse)
def get_tenant(
    tenant_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> TenantResponse:
    require_user(authorization, ["tenants.read"], registry=registry)
    return TenantService(db).get_tenant_by_id(tenant_id)


@router.post("/tenants", response_model=AccountCreated, status_code=status.HTTP_201_CREATED)
def create_tenant(
    payload: TenantCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> AccountCreated:
    require_user(authorization, ["tenants.write"], registry=registry)
    return TenantService(db).create_tenant(payload.model_dump())


@router.patch("/tenants/{tenant_id}")
def update_tenant(
    tenant_id: str,
    payload: TenantUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["tenants.write"], registry=registry)
    if not TenantService(db).update_tenant(tenant_id, payload.model_dump(exclude_unset=True)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Tenant not found: {tenant_id}")
    return {"success": True}


@router.delete("/tenants/{tenant_id}")
def deactivate_tenant(
    tenant_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["tenants.write"], registry=registry)
    if not TenantService(db).deactivate_tenant(tenant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Tenant not found: {tenant_id}")
    return {"success": True}


@router.get("/tenants/{tenant_id}/payments")
def tenant_payments(
    tenant_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    require_user(authorization, ["tenants.read", "payments.read"], registry=registry)
    payments = TenantService(db).get_tenant_payments(tenant_id)
    return [PaymentResponse.model_validate(payment).model_dump(mode="json") for payment in payments]


@router.get("/tenants/{tenant_id}/maintenance")
def tenant_maintenance(
    tenant_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    require_user(authorization, ["tenants.read", "maintenance.read"], registry=registry)
    requests = TenantService(db).get_tenant_maintenance_requests(tenant_id)
    return [MaintenanceResponse.model_validate(request).model_dump(mode="json") for request in requests]
