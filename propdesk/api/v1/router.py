"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from propdesk.api.v1 import (
    agents,
    contracts,
    dashboard,
    health,
    maintenance,
    notifications,
    payments,
    properties,
    tenants,
)
from propdesk.core.config import get_config


def get_api_router() -> APIRouter:
    api_router = APIRouter(prefix=get_config().API_PREFIX)
    api_router.include_router(health.router)
    api_router.include_router(properties.router)
    api_router.include_router(contracts.router)
    api_router.include_router(payments.router)
    api_router.include_router(tenants.router)
    api_router.include_router(agents.router)
    api_router.include_router(maintenance.router)
    api_router.include_router(notifications.router)
    api_router.include_router(dashboard.router)
    return api_router
