"""Admin dashboard and financial report endpoints for API v1."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from propdesk.api.v1._authz import require_user
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.schemas.stats import DashboardData, ReportData
from propdesk.services.dashboard_service import DashboardService
from propdesk.services.report_service import ReportService

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardData)
def dashboard(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> DashboardData:
    require_user(authorization, ["dashboard.read"], registry=registry)
    return DashboardService(db).fetch_dashboard_data()


@router.get("/reports", response_model=ReportData)
def reports(
    start: date | None = None,
    end: date | None = None,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> ReportData:
    require_user(authorization, ["reports.read"], registry=registry)
    if start and end and start > end:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="start must not be after end.")
    return ReportService(db).load_report_data(start, end)
