"""Payment endpoints for API v1."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from propdesk.api.v1._authz import require_user, require_user_or_owner
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.schemas.common import SortDirection
from propdesk.schemas.payments import (
    ContractBrief,
    PaymentCreateRequest,
    PaymentFilters,
    PaymentRegisterRequest,
    PaymentResponse,
    PaymentStats,
    PaymentStatusUpdateRequest,
)
from propdesk.services.payment_service import PaymentService
from propdesk.services.query_builder import Pagination, Sort

router = APIRouter(tags=["payments"])


def _not_found(payment_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Payment not found: {payment_id}")


def _dump(payments) -> list[dict]:
    return [PaymentResponse.model_validate(payment).model_dump(mode="json") for payment in payments]


@router.get("/payments")
def list_payments(
    search: str | None = None,
    payment_status: list[str] | None = Query(default=None, alias="status"),
    contract_id: str | None = None,
    tenant_id: str | None = None,
    period_month: int | None = None,
    period_year: int | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    sort: str = "due_date",
    direction: SortDirection = "asc",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["payments.read"], registry=registry)
    filters = PaymentFilters(
        search=search,
        status=payment_status,
        contract_id=contract_id,
        tenant_id=tenant_id,
        period_month=period_month,
        period_year=period_year,
        from_date=from_date,
        to_date=to_date,
    )
    result = PaymentService(db).fetch_payments(filters, Sort(sort, direction), Pagination(page, page_size))
    return {"items": _dump(result.items), "total": result.total, "page": page, "page_size": page_size}


@router.get("/payments/me")
def my_payments(
    payment_status: list[str] | None = Query(default=None, alias="status"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    """Payments of the signed-in tenant, latest due date first."""
    user = require_user(authorization, ["payments.read_own"], registry=registry)
    result = PaymentService(db).fetch_tenant_payments(user.user_id, PaymentFilters(status=payment_status))
    return {"items": _dump(result.items), "total": result.total}


@router.get("/payments/me/next")
def my_next_payment(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict | None:
    user = require_user(authorization, ["payments.read_own"], registry=registry)
    payment = PaymentService(db).get_next_tenant_payment(user.user_id)
    return PaymentResponse.model_validate(payment).model_dump(mode="json") if payment else None


@router.get("/payments/stats", response_model=PaymentStats)
def payment_stats(
    period_year: int | None = None,
    period_month: int | None = Query(default=None, ge=1, le=12),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["payments.read"], registry=registry)
    return PaymentService(db).get_payment_stats(period_year, period_month)


@router.get("/payments/upcoming")
def upcoming_payments(
    days_ahead: int = Query(default=7, ge=1, le=365),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    require_user(authorization, ["payments.read"], registry=registry)
    return _dump(PaymentService(db).get_upcoming_payments(days_ahead))


@router.post("/payments/overdue")
def mark_overdue_payments(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    """Flip pending payments past due to ``vencido`` and return them."""
    require_user(authorization, ["payments.write"], registry=registry)
    return _dump(PaymentService(db).get_overdue_payments())


@router.get("/payments/contracts")
def payable_contracts(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    require_user(authorization, ["payments.write"], registry=registry)
    return [ContractBrief.model_validate(contract).model_dump(mode="json") for contract in PaymentService(db).fetch_active_contracts()]


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> PaymentResponse:
    user, own_only = require_user_or_owner(authorization, "payments.read", "payments.read_own", registry=registry)
    payment = PaymentService(db).fetch_payment(payment_id)
    if payment is None or (own_only and payment.tenant_id != user.user_id):
        raise _not_found(payment_id)
    return PaymentResponse.model_validate(payment)


@router.post("/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    payload: PaymentCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> PaymentResponse:
    require_user(authorization, ["payments.write"], registry=registry)
    return PaymentResponse.model_validate(PaymentService(db).create_payment(payload.model_dump()))


@router.post("/payments/{payment_id}/register", response_model=PaymentResponse)
def register_payment(
    payment_id: str,
    payload: PaymentRegisterRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> PaymentResponse:
    require_user(authorization, ["payments.write"], registry=registry)
    payment = PaymentService(db).register_payment(
        payment_id,
        payload.payment_method,
        payment_date=payload.payment_date,
        receipt_number=payload.receipt_number,
        notes=payload.notes,
    )
    if payment is None:
        raise _not_found(payment_id)
    return PaymentResponse.model_validate(payment)


@router.post("/payments/{payment_id}/status", response_model=PaymentResponse)
def update_payment_status(
    payment_id: str,
    payload: PaymentStatusUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> PaymentResponse:
    require_user(authorization, ["payments.write"], registry=registry)
    payment = PaymentService(db).update_payment_status(payment_id, payload.status)
    if payment is None:
        raise _not_found(payment_id)
    return PaymentResponse.model_validate(payment)
