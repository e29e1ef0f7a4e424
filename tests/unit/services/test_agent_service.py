from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from propdesk.auth.provider import SignUpResult
from propdesk.database.models import Agent, Commission, Profile
from propdesk.schemas.agents import AgentFilters, AgentResponse
from propdesk.services.agent_service import AgentService


class _FakeAuthClient:
    def sign_up(self, email, password, metadata=None):
        return SignUpResult(user_id=str(uuid.uuid4()), email=email)


def test_list_agents_filters_in_memory(session, seed):
    seed.agent(
        profile=seed.profile(role="agente", full_name="Sofía Luna"),
        specialization=["alquiler", "venta"],
        is_verified=True,
    )
    seed.agent(profile=seed.profile(role="agente", full_name="Pablo Ríos"), specialization=["venta"])
    seed.agent(profile=seed.profile(role="agente", full_name="Inactivo", is_active=False))
    service = AgentService(db=session)

    everyone, count = service.fetch_agents()
    renters, _ = service.fetch_agents(AgentFilters(specialization="alquiler"))
    verified, _ = service.fetch_agents(AgentFilters(verified=True))
    searched, _ = service.fetch_agents(AgentFilters(search="pablo"))

    assert count == 2
    assert {agent.profile.full_name for agent in everyone} == {"Sofía Luna", "Pablo Ríos"}
    assert [agent.profile.full_name for agent in renters] == ["Sofía Luna"]
    assert [agent.profile.full_name for agent in verified] == ["Sofía Luna"]
    assert [agent.profile.full_name for agent in searched] == ["Pablo Ríos"]


def test_specialization_is_matched_before_the_window(session, seed):
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    for name, specialization, age in (("Old", ["alquiler"], 3), ("Mid", ["venta"], 2), ("New", ["venta"], 1)):
        seed.agent(
            profile=seed.profile(role="agente", full_name=name),
            specialization=specialization,
            created_at=now - timedelta(days=age),
        )
    service = AgentService(db=session)

    renters, count = service.fetch_agents(AgentFilters(specialization="alquiler", limit=2))
    sellers, _ = service.fetch_agents(AgentFilters(specialization="venta", limit=1, offset=1))
    newest, _ = service.fetch_agents(AgentFilters(limit=1))

    assert [agent.profile.full_name for agent in renters] == ["Old"]
    assert count == 1
    assert [agent.profile.full_name for agent in sellers] == ["Mid"]
    assert [agent.profile.full_name for agent in newest] == ["New"]


def test_agent_detail_counts(session, seed):
    agent = seed.agent()
    tenant = seed.tenant()
    prop = seed.property(agent_id=agent.id)
    seed.property(agent_id=agent.id)
    contract = seed.contract(prop, tenant, agent_id=agent.id, status="activo")
    session.add_all(
        [
            Commission(agent_id=agent.id, contract_id=contract.id, amount=1000, status="pendiente"),
            Commission(agent_id=agent.id, contract_id=contract.id, amount=500, status="pendiente"),
            Commission(agent_id=agent.id, contract_id=contract.id, amount=900, status="pagada"),
        ]
    )
    session.commit()

    detail = AgentService(db=session).get_agent_by_id(agent.id)

    assert detail.properties_count == 2
    assert detail.active_contracts_count == 1
    assert detail.pending_commissions == 1500
    assert detail.profile.email.endswith("@example.com")


def test_agent_lookups_reject_malformed_ids(session):
    service = AgentService(db=session)
    assert service.get_agent_by_id("not-a-uuid") is None
    assert service.get_agent_properties("not-a-uuid") == []
    assert service.get_agent_commissions("not-a-uuid") == []
    assert service.get_agent_by_id(str(uuid.uuid4())) is None


def test_agent_stats(session, seed):
    seed.agent(is_verified=True, total_sales=3, total_rentals=5)
    seed.agent(total_sales=1, total_rentals=None)

    stats = AgentService(db=session).get_agent_stats()

    assert stats == {"total": 2, "verified": 1, "total_sales": 4, "total_rentals": 5}


def test_create_agent_writes_profile_and_agent(session):
    result = AgentService(db=session, auth_client=_FakeAuthClient()).create_agent(
        {"email": "agente@example.com", "full_name": "Agente Nuevo", "specialization": ["venta"], "commission_rate": None}
    )

    profile = session.get(Profile, result.user_id)
    agent = session.query(Agent).filter(Agent.user_id == result.user_id).one()
    assert profile.role == "agente"
    assert agent.commission_rate == 5.0
    assert agent.specialization == ["venta"]
    assert agent.is_verified is False


def test_create_agent_keeps_zero_commission(session):
    result = AgentService(db=session, auth_client=_FakeAuthClient()).create_agent(
        {"email": "cero@example.com", "full_name": "Cero", "commission_rate": 0}
    )
    agent = session.query(Agent).filter(Agent.user_id == result.user_id).one()
    assert agent.commission_rate == 0


def test_update_and_verify_agent(session, seed):
    agent = seed.agent(bio="Antes")
    service = AgentService(db=session)

    assert service.update_agent(agent.id, {"bio": "Después", "license_number": None, "rating": 5}) is True
    assert service.toggle_agent_verification(agent.id, True) is True
    assert service.update_agent("missing", {"bio": "x"}) is False
    assert service.toggle_agent_verification("missing", True) is False

    session.expire_all()
    refreshed = session.get(Agent, agent.id)
    assert refreshed.bio == "Después"
    assert refreshed.is_verified is True
    assert refreshed.rating == 0.0


def test_agent_properties_and_commissions(session, seed):
    agent = seed.agent()
    prop = seed.property(agent_id=agent.id)
    seed.property()
    session.add(Commission(agent_id=agent.id, amount=100))
    session.commit()
    service = AgentService(db=session)

    assert [item.id for item in service.get_agent_properties(agent.id)] == [prop.id]
    assert [item.amount for item in service.get_agent_commissions(agent.id)] == [100]


def test_agent_response_labels_known_specializations(seed):
    agent = seed.agent(specialization=["lujo", "venta"])
    assert AgentResponse.model_validate(agent).specialization_labels == ["Propiedades de Lujo", "venta"]
