"""Contract management endpoints for API v1."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from propdesk.api.v1._authz import require_user
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.schemas.common import AgentSummary, ProfileSummary, PropertySummary, SortDirection
from propdesk.schemas.contracts import (
    ContractCreateRequest,
    ContractFilters,
    ContractResponse,
    ContractStatusUpdateRequest,
    ContractUpdateRequest,
)
from propdesk.services.contract_service import ContractService
from propdesk.services.query_builder import Pagination, Sort

router = APIRouter(tags=["contracts"])


def _not_found(contract_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Contract not found: {contract_id}")


@router.get("/contracts")
def list_contracts(
    search: str | None = None,
    contract_status: list[str] | None = Query(default=None, alias="status"),
    property_id: str | None = None,
    tenant_id: str | None = None,
    agent_id: str | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    sort: str = "created_at",
    direction: SortDirection = "desc",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["contracts.read"], registry=registry)
    filters = ContractFilters(
        search=search,
        status=contract_status,
        property_id=property_id,
        tenant_id=tenant_id,
        agent_id=agent_id,
        from_date=from_date,
        to_date=to_date,
    )
    result = ContractService(db).fetch_contracts(filters, Sort(sort, direction), Pagination(page, page_size))
    return {
        "items": [ContractResponse.model_validate(contract).model_dump(mode="json") for contract in result.items],
        "total": result.total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/contracts/stats")
def contract_stats(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["contracts.read"], registry=registry)
    return ContractService(db).get_contract_stats()


@router.get("/contracts/expiring")
def expiring_contracts(
    days_ahead: int = Query(default=30, ge=1, le=365),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    require_user(authorization, ["contracts.read"], registry=registry)
    contracts = ContractService(db).get_expiring_contracts(days_ahead)
    return [ContractResponse.model_validate(contract).model_dump(mode="json") for contract in contracts]


@router.get("/contracts/options")
def contract_form_options(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    """Choices for the contract form: free rentals, tenants and agents."""
    require_user(authorization, ["contracts.write"], registry=registry)
    service = ContractService(db)
    return {
        "properties": [PropertySummary.model_validate(prop).model_dump() for prop in service.fetch_available_properties()],
        "tenants": [ProfileSummary.model_validate(tenant).model_dump() for tenant in service.fetch_tenants()],
        "agents": [AgentSummary.model_validate(agent).model_dump() for agent in service.fetch_agents()],
    }


@router.get("/contracts/{contract_id}", response_model=ContractResponse)
def get_contract(
    contract_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> ContractResponse:
    require_user(authorization, ["contracts.read"], registry=registry)
    contract = ContractService(db).fetch_contract(contract_id)
    if contract is None:
        raise _not_found(contract_id)
    return ContractResponse.model_validate(contract)


@router.post("/contracts", response_model=ContractResponse, status_code=status.HTTP_201_CREATED)
def create_contract(
    payload: ContractCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> ContractResponse:
    require_user(authorization, ["contracts.write"], registry=registry)
    contract = ContractService(db).create_contract(payload.model_dump())
    return ContractResponse.model_validate(contract)


@router.patch("/contracts/{contract_id}", response_model=ContractResponse)
def update_contract(
    contract_id: str,
    payload: ContractUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> ContractResponse:
    require_user(authorization, ["contracts.write"], registry=registry)
    contract = ContractService(db).update_contract(contract_id, payload.model_dump(exclude_unset=True))
    if contract is None:
        raise _not_found(contract_id)
    return ContractResponse.model_validate(contract)


@router.post("/contracts/{contract_id}/status", response_model=ContractResponse)
def update_contract_status(
    contract_id: str,
    payload: ContractStatusUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> ContractResponse:
    require_user(authorization, ["contracts.write"], registry=registry)
    contract = ContractService(db).update_contract_status(contract_id, payload.status, payload.property_id)
    if contract is None:
        raise _not_found(contract_id)
    return ContractResponse.model_validate(contract)
