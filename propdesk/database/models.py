from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base


def new_uuid() -> str:
    return str(uuid.uuid4())


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def created_timestamp(context) -> datetime:
    """Insert default for updated_at: the row starts out unmodified."""
    return context.get_current_parameters().get("created_at") or utcnow_naive()


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (Index("idx_profiles_role_active", "role", "is_active"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    email = Column(String, nullable=False)
    full_name = Column(String)
    phone = Column(String)
    dni = Column(String)
    address = Column(String)
    avatar_url = Column(String)
    role = Column(String, nullable=False, default="inquilino")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)
    updated_at = Column(DateTime, default=created_timestamp, nullable=False)

    contracts = relationship("Contract", back_populates="tenant", foreign_keys="Contract.tenant_id")


class Agent(Base):
    __tablename__ = "agents"
    __table_args__ = (UniqueConstraint("user_id", name="uq_agents_user_id"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    license_number = Column(String)
    commission_rate = Column(Float, nullable=False, default=5)
    specialization = Column(JSON, nullable=False, default=list)
    bio = Column(Text)
    is_verified = Column(Boolean, nullable=False, default=False)
    rating = Column(Float, default=0.0)
    total_sales = Column(Integer, default=0)
    total_rentals = Column(Integer, default=0)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)
    updated_at = Column(DateTime, default=created_timestamp, nullable=False)

    profile = relationship("Profile")


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        Index("idx_properties_status", "status"),
        Index("idx_properties_agent", "agent_id"),
        Index("idx_properties_published_status", "is_published", "status"),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String, nullable=False)
    description = Column(Text)
    address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    property_type = Column(String, nullable=False, default="departamento")
    operation_type = Column(String, nullable=False, default="alquiler")
    status = Column(String, nullable=False, default="disponible")
    price = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="ARS")
    bedrooms = Column(Integer)
    bathrooms = Column(Integer)
    area_m2 = Column(Float)
    images = Column(JSON, default=list)
    amenities = Column(JSON, default=list)
    agent_id = Column(String(36), ForeignKey("agents.id"))
    owner_id = Column(String(36), ForeignKey("profiles.id"))
    is_featured = Column(Boolean, nullable=False, default=False)
    is_published = Column(Boolean, nullable=False, default=False)
    views_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)
    updated_at = Column(DateTime, default=created_timestamp, nullable=False)

    agent = relationship("Agent")
    owner = relationship("Profile", foreign_keys=[owner_id])
    contracts = relationship("Contract", back_populates="property", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def active_contract(self) -> "Contract | None":
        for contract in self.contracts:
            if contract.status == "activo":
                return contract
        return None


class Contract(Base):
    __tablename__ = "contracts"
    __table_args__ = (
        Index("idx_contracts_status", "status"),
        Index("idx_contracts_tenant", "tenant_id"),
        UniqueConstraint("contract_number", name="uq_contracts_number"),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    contract_number = Column(String)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    tenant_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    agent_id = Column(String(36), ForeignKey("agents.id"))
    status = Column(String, nullable=False, default="pendiente")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    monthly_rent = Column(Float, nullable=False, default=0)
    deposit = Column(Float)
    currency = Column(String(3), nullable=False, default="ARS")
    payment_day = Column(Integer, default=10)
    adjustment_index = Column(String, default="ninguno")
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)
    updated_at = Column(DateTime, default=created_timestamp, nullable=False)

    property = relationship("Property", back_populates="contracts")
    tenant = relationship("Profile", back_populates="contracts", foreign_keys=[tenant_id])
    agent = relationship("Agent")


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index("idx_payments_status_due", "status", "due_date"),
        Index("idx_payments_tenant", "tenant_id"),
        Index("idx_payments_period", "period_year", "period_month"),
    )

    id = Column(String(36), primary_key=True, default=new_uuid)
    contract_id = Column(String(36), ForeignKey("contracts.id"), nullable=False)
    tenant_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    amount = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="ARS")
    due_date = Column(Date, nullable=False)
    payment_date = Column(Date)
    period_month = Column(Integer, nullable=False)
    period_year = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default="pendiente")
    payment_method = Column(String)
    receipt_number = Column(String)
    late_fee = Column(Float, nullable=False, default=0)
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)
    updated_at = Column(DateTime, default=created_timestamp, nullable=False)

    contract = relationship("Contract")
    tenant = relationship("Profile")


class MaintenanceCategory(Base):
    __tablename__ = "maintenance_categories"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    description = Column(Text)
    contact_name = Column(String)
    contact_last_name = Column(String)
    contact_phone = Column(String)
    contact_notes = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"
    __table_args__ = (Index("idx_maintenance_status", "status"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    tenant_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    category = Column(String)
    priority = Column(String, nullable=False, default="media")
    status = Column(String, nullable=False, default="pendiente")
    images = Column(JSON, default=list)
    notes = Column(Text)
    reported_date = Column(DateTime, default=utcnow_naive)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)
    updated_at = Column(DateTime, default=created_timestamp, nullable=False)

    property = relationship("Property")
    tenant = relationship("Profile")


class Commission(Base):
    __tablename__ = "commissions"
    __table_args__ = (Index("idx_commissions_agent_status", "agent_id", "status"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    agent_id = Column(String(36), ForeignKey("agents.id"), nullable=False)
    contract_id = Column(String(36), ForeignKey("contracts.id"))
    amount = Column(Float, nullable=False, default=0)
    status = Column(String, nullable=False, default="pendiente")
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("idx_notifications_user_read", "user_id", "is_read"),)

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    entity_type = Column(String)
    entity_id = Column(String(36))
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)
