"""Agent roster endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from propdesk.api.v1._authz import require_user
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.schemas.agents import (
    AgentCreateRequest,
    AgentDetailResponse,
    AgentFilters,
    AgentResponse,
    AgentStats,
    AgentUpdateRequest,
    AgentVerificationRequest,
    CommissionResponse,
)
from propdesk.schemas.properties import PropertyResponse
from propdesk.schemas.tenants import AccountCreated
from propdesk.services.agent_service import AgentService

router = APIRouter(tags=["agents"])


def _not_found(agent_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Agent not found: {agent_id}")


@router.get("/agents")
def list_agents(
    search: str | None = None,
    verified: bool | None = None,
    specialization: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int | None = Query(default=None, ge=0),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["agents.read"], registry=registry)
    filters = AgentFilters(search=search, verified=verified, specialization=specialization, limit=limit, offset=offset)
    agents, count = AgentService(db).fetch_agents(filters)
    return {"items": [AgentResponse.model_validate(agent).model_dump(mode="json") for agent in agents], "count": count}


@router.get("/agents/stats", response_model=AgentStats)
def agent_stats(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["agents.read"], registry=registry)
    return AgentService(db).get_agent_stats()


@router.get("/agents/{agent_id}", response_model=AgentDetailResponse)
def get_agent(
    agent_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> AgentDetailResponse:
    require_user(authorization, ["agents.read"], registry=registry)
    agent = AgentService(db).get_agent_by_id(agent_id)
    if agent is None:
        raise _not_found(agent_id)
    return agent


@router.post("/agents", response_model=AccountCreated, status_code=status.HTTP_201_CREATED)
def create_agent(
    payload: AgentCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> AccountCreated:
    require_user(authorization, ["agents.write"], registry=registry)
    return AgentService(db).create_agent(payload.model_dump())


@router.patch("/agents/{agent_id}")
def update_agent(
    agent_id: str,
    payload: AgentUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["agents.write"], registry=registry)
    if not AgentService(db).update_agent(agent_id, payload.model_dump(exclude_unset=True)):
        raise _not_found(agent_id)
    return {"success": True}


@router.post("/agents/{agent_id}/verification")
def set_agent_verification(
    agent_id: str,
    payload: AgentVerificationRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> dict:
    require_user(authorization, ["agents.write"], registry=registry)
    if not AgentService(db).toggle_agent_verification(agent_id, payload.verified):
        raise _not_found(agent_id)
    return {"success": True, "verified": payload.verified}


@router.get("/agents/{agent_id}/properties")
def agent_properties(
    agent_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    require_user(authorization, ["agents.read"], registry=registry)
    properties = AgentService(db).get_agent_properties(agent_id)
    return [PropertyResponse.model_validate(prop).model_dump(mode="json") for prop in properties]


@router.get("/agents/{agent_id}/commissions")
def agent_commissions(
    agent_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
    registry: RoleCacheRegistry = Depends(get_role_registry),
) -> list[dict]:
    require_user(authorization, ["agents.write"], registry=registry)
    commissions = AgentService(db).get_agent_commissions(agent_id)
    return [CommissionResponse.model_validate(item).model_dump(mode="json") for item in commissions]
