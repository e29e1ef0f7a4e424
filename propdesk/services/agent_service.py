"""Agent service: agent roster, detail counters and onboarding."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import contains_eager, joinedload

from propdesk.auth.provider import AuthProviderClient
from propdesk.core.enums import CONTRACT_ACTIVE, ROLE_AGENT, CommissionStatus
from propdesk.core.exceptions import DatabaseError
from propdesk.database.models import Agent, Commission, Contract, Profile, Property
from propdesk.schemas.agents import AgentDetailResponse, AgentFilters
from propdesk.schemas.tenants import AccountCreated
from propdesk.services.base_service import BaseService
from propdesk.services.query_builder import apply_limit_offset, contains_text, count_where, sum_column, window
from propdesk.utils.validators import is_uuid, normalize_search, temporary_password

logger = logging.getLogger(__name__)

DEFAULT_COMMISSION_RATE = 5.0

_AGENT_UPDATE_FIELDS = ("license_number", "commission_rate", "specialization", "bio", "is_verified")


def _matches_search(agent: Agent, needle: str) -> bool:
    profile = agent.profile
    return (
        contains_text(profile.full_name if profile else None, needle)
        or contains_text(profile.email if profile else None, needle)
        or contains_text(agent.license_number, needle)
    )


class AgentService(BaseService):
    """Service for agent listings, stats and account creation."""

    def __init__(self, db=None, auth_client: AuthProviderClient | None = None) -> None:
        super().__init__(db)
        self._auth_client = auth_client

    @property
    def auth_client(self) -> AuthProviderClient:
        if self._auth_client is None:
            self._auth_client = AuthProviderClient()
        return self._auth_client

    def fetch_agents(self, filters: AgentFilters | None = None) -> tuple[list[Agent], int]:
        """List agents with an active profile, newest first.

        Specialization lives in a JSON list with no portable containment
        operator, so when it is filtered the window is cut after matching.
        Text search runs on the returned window.
        """
        filters = filters or AgentFilters()
        query = (
            self.db.query(Agent)
            .join(Agent.profile)
            .options(contains_eager(Agent.profile))
            .filter(Profile.is_active.is_(True))
            .order_by(Agent.created_at.desc())
        )
        if filters.verified is not None:
            query = query.filter(Agent.is_verified.is_(filters.verified))
        if not filters.specialization:
            query = apply_limit_offset(query, filters.limit, filters.offset)
        try:
            agents = query.all()
        except SQLAlchemyError:
            logger.exception("agents.fetch.failed", extra={"event": "agents.fetch.failed"})
            return [], 0

        if filters.specialization:
            matching = [agent for agent in agents if filters.specialization in (agent.specialization or [])]
            agents = window(matching, filters.limit, filters.offset)
        needle = normalize_search(filters.search)
        if needle:
            agents = [agent for agent in agents if _matches_search(agent, needle)]
        return agents, len(agents)

    def get_agent_by_id(self, agent_id: str) -> AgentDetailResponse | None:
        if not is_uuid(agent_id):
            return None
        try:
            agent = self.db.query(Agent).options(joinedload(Agent.profile)).filter(Agent.id == agent_id).first()
            if agent is None:
                return None
            properties_count = count_where(self.db, Property, Property.agent_id == agent_id)
            active_contracts = count_where(
                self.db, Contract, Contract.agent_id == agent_id, Contract.status == CONTRACT_ACTIVE
            )
            pending_commissions = sum_column(
                self.db,
                Commission.amount,
                Commission.agent_id == agent_id,
                Commission.status == CommissionStatus.PENDING.value,
            )
        except SQLAlchemyError:
            logger.exception("agents.fetch_one.failed", extra={"event": "agents.fetch_one.failed", "agent_id": agent_id})
            return None

        return AgentDetailResponse.model_validate(agent).model_copy(
            update={
                "properties_count": properties_count,
                "active_contracts_count": active_contracts,
                "pending_commissions": pending_commissions,
            }
        )

    def get_agent_stats(self) -> dict[str, int]:
        try:
            total = count_where(self.db, Agent)
            verified = count_where(self.db, Agent, Agent.is_verified.is_(True))
            total_sales, total_rentals = self.db.query(
                func.coalesce(func.sum(Agent.total_sales), 0),
                func.coalesce(func.sum(Agent.total_rentals), 0),
            ).one()
        except SQLAlchemyError:
            logger.exception("agents.stats.failed", extra={"event": "agents.stats.failed"})
            return {"total": 0, "verified": 0, "total_sales": 0, "total_rentals": 0}
        return {
            "total": total,
            "verified": verified,
            "total_sales": int(total_sales),
            "total_rentals": int(total_rentals),
        }

    def create_agent(self, data: dict[str, Any]) -> AccountCreated:
        """Sign the agent up, then write the profile and agent rows."""
        account = self.auth_client.sign_up(
            email=data["email"],
            password=temporary_password(),
            metadata={"full_name": data["full_name"], "role": ROLE_AGENT},
        )
        profile = self.db.get(Profile, account.user_id)
        if profile is None:
            profile = Profile(id=account.user_id, email=account.email)
            self.db.add(profile)
        profile.full_name = data["full_name"]
        profile.phone = data.get("phone") or None
        profile.role = ROLE_AGENT
        profile.updated_at = self._utcnow_naive()

        commission_rate = data.get("commission_rate")
        self.db.add(
            Agent(
                user_id=account.user_id,
                license_number=data.get("license_number") or None,
                commission_rate=DEFAULT_COMMISSION_RATE if commission_rate is None else commission_rate,
                specialization=list(data.get("specialization") or []),
                bio=data.get("bio") or None,
            )
        )
        try:
            self.commit()
        except DatabaseError:
            logger.exception("agents.create.failed", extra={"event": "agents.create.failed", "user_id": account.user_id})
            raise
        logger.info("agents.created", extra={"event": "agents.created", "user_id": account.user_id})
        return AccountCreated(success=True, user_id=account.user_id)

    def update_agent(self, agent_id: str, data: dict[str, Any]) -> bool:
        agent = self.db.get(Agent, agent_id)
        if agent is None:
            return False
        for field in _AGENT_UPDATE_FIELDS:
            if field in data and data[field] is not None:
                setattr(agent, field, data[field])
        agent.updated_at = self._utcnow_naive()
        self.commit()
        return True

    def toggle_agent_verification(self, agent_id: str, verified: bool) -> bool:
        agent = self.db.get(Agent, agent_id)
        if agent is None:
            return False
        agent.is_verified = verified
        agent.updated_at = self._utcnow_naive()
        self.commit()
        logger.info(
            "agents.verification.updated",
            extra={"event": "agents.verification.updated", "agent_id": agent_id, "verified": verified},
        )
        return True

    def get_agent_properties(self, agent_id: str) -> list[Property]:
        if not is_uuid(agent_id):
            return []
        try:
            return (
                self.db.query(Property)
                .filter(Property.agent_id == agent_id)
                .order_by(Property.created_at.desc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("agents.properties.failed", extra={"event": "agents.properties.failed", "agent_id": agent_id})
            return []

    def get_agent_commissions(self, agent_id: str) -> list[Commission]:
        if not is_uuid(agent_id):
            return []
        try:
            return (
                self.db.query(Commission)
                .filter(Commission.agent_id == agent_id)
                .order_by(Commission.created_at.desc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("agents.commissions.failed", extra={"event": "agents.commissions.failed", "agent_id": agent_id})
            return []
