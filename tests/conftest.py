from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from propdesk.core.enums import ROLE_ADMIN, ROLE_AGENT, ROLE_TENANT
from propdesk.database.db import Base
from propdesk.database.models import Agent, Contract, Payment, Profile, Property


def _build_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return TestingSessionLocal()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Seeder:
    """Row builders with sensible defaults; every helper commits."""

    def __init__(self, session) -> None:
        self.session = session

    def _save(self, row):
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

    def profile(self, role: str = ROLE_TENANT, **fields) -> Profile:
        fields.setdefault("email", f"{role}-{len(self.session.query(Profile).all())}@example.com")
        fields.setdefault("full_name", f"Usuario {role}")
        return self._save(Profile(role=role, **fields))

    def admin(self, **fields) -> Profile:
        return self.profile(role=ROLE_ADMIN, **fields)

    def tenant(self, **fields) -> Profile:
        return self.profile(role=ROLE_TENANT, **fields)

    def agent(self, profile: Profile | None = None, **fields) -> Agent:
        profile = profile or self.profile(role=ROLE_AGENT)
        return self._save(Agent(user_id=profile.id, **fields))

    def property(self, **fields) -> Property:
        fields.setdefault("title", "Departamento céntrico")
        fields.setdefault("address", "Av. Corrientes 1234")
        fields.setdefault("city", "Buenos Aires")
        fields.setdefault("price", 250000)
        fields.setdefault("is_published", True)
        return self._save(Property(**fields))

    def contract(self, prop: Property, tenant: Profile, **fields) -> Contract:
        today = date.today()
        fields.setdefault("contract_number", f"CTR-{today.year}-{len(self.session.query(Contract).all()):04d}")
        fields.setdefault("status", "activo")
        fields.setdefault("start_date", today - timedelta(days=60))
        fields.setdefault("end_date", today + timedelta(days=300))
        fields.setdefault("monthly_rent", 250000)
        return self._save(Contract(property_id=prop.id, tenant_id=tenant.id, **fields))

    def payment(self, contract: Contract, **fields) -> Payment:
        today = date.today()
        fields.setdefault("amount", contract.monthly_rent)
        fields.setdefault("due_date", today + timedelta(days=5))
        fields.setdefault("period_month", today.month)
        fields.setdefault("period_year", today.year)
        fields.setdefault("status", "pendiente")
        return self._save(Payment(contract_id=contract.id, tenant_id=contract.tenant_id, **fields))


@pytest.fixture
def session():
    db = _build_session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def seed(session):
    return Seeder(session)
