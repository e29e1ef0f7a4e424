"""Maintenance request/response schemas for API contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from propdesk.schemas.common import ProfileSummary, PropertySummary

MaintenancePriorityValue = Literal["baja", "media", "alta", "urgente"]
MaintenanceStatusValue = Literal["pendiente", "en_proceso", "completado", "cancelado"]


class MaintenanceFilters(BaseModel):
    status: MaintenanceStatusValue | None = None
    property_id: str | None = None
    tenant_id: str | None = None


class MaintenanceCreateRequest(BaseModel):
    property_id: str = ""
    title: str = ""
    description: str = Field(default="", max_length=10000)
    category: str | None = Field(default=None, max_length=120)
    priority: str = ""
    images: list[str] = Field(default_factory=list)


class MaintenanceStatusUpdateRequest(BaseModel):
    status: MaintenanceStatusValue
    notes: str | None = Field(default=None, max_length=10000)


class MaintenanceCategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    contact_name: str | None = None
    contact_last_name: str | None = None
    contact_phone: str | None = None
    contact_notes: str | None = None
    is_active: bool


class MaintenanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    property_id: str
    tenant_id: str
    title: str
    description: str | None = None
    category: str | None = None
    priority: str
    status: str
    images: list[str] | None = None
    notes: str | None = None
    reported_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    property: PropertySummary | None = None
    tenant: ProfileSummary | None = None
