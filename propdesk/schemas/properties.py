"""Property request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from propdesk.schemas.common import AgentSummary, ProfileSummary

PropertyTypeValue = Literal["departamento", "casa", "ph", "local", "oficina", "terreno", "cochera"]
OperationTypeValue = Literal["venta", "alquiler", "alquiler_temporal"]
PropertyStatusValue = Literal["disponible", "reservada", "alquilada", "vendida", "en_mantenimiento"]

PROPERTY_SORT_FIELDS = ("created_at", "price", "area_m2", "views_count", "title")


class PropertyFilters(BaseModel):
    search: str | None = None
    property_type: PropertyTypeValue | list[PropertyTypeValue] | None = None
    operation_type: OperationTypeValue | None = None
    status: PropertyStatusValue | list[PropertyStatusValue] | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    city: str | None = None
    agent_id: str | None = None
    is_featured: bool | None = None
    is_published: bool | None = None


class PropertyCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=20000)
    address: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=120)
    property_type: PropertyTypeValue = "departamento"
    operation_type: OperationTypeValue = "alquiler"
    status: PropertyStatusValue = "disponible"
    price: float = Field(default=0, ge=0)
    currency: str = Field(default="ARS", min_length=3, max_length=3)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area_m2: float | None = Field(default=None, ge=0)
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    agent_id: str | None = None
    owner_id: str | None = None
    is_featured: bool = False
    is_published: bool = False


class PropertyUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=20000)
    address: str | None = Field(default=None, min_length=1, max_length=255)
    city: str | None = Field(default=None, min_length=1, max_length=120)
    property_type: PropertyTypeValue | None = None
    operation_type: OperationTypeValue | None = None
    status: PropertyStatusValue | None = None
    price: float | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area_m2: float | None = Field(default=None, ge=0)
    images: list[str] | None = None
    amenities: list[str] | None = None
    agent_id: str | None = None
    owner_id: str | None = None
    is_featured: bool | None = None
    is_published: bool | None = None


class ActiveContractSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    contract_number: str | None = None
    tenant_id: str
    start_date: date
    end_date: date
    monthly_rent: float
    status: str
    tenant: ProfileSummary | None = None


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None = None
    address: str
    city: str
    property_type: str
    operation_type: str
    status: str
    price: float
    currency: str
    bedrooms: int | None = None
    bathrooms: int | None = None
    area_m2: float | None = None
    images: list[str] | None = None
    amenities: list[str] | None = None
    agent_id: str | None = None
    owner_id: str | None = None
    is_featured: bool
    is_published: bool
    views_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PropertyDetailResponse(PropertyResponse):
    agent: AgentSummary | None = None
    owner: ProfileSummary | None = None
    active_contract: ActiveContractSummary | None = None
