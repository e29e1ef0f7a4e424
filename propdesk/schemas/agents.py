"""Agent request/response schemas for API contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from propdesk.schemas.common import ProfileSummary

AGENT_SPECIALIZATIONS = {
    "ventas": "Ventas",
    "alquileres": "Alquileres",
    "comercial": "Comercial",
    "residencial": "Residencial",
    "lujo": "Propiedades de Lujo",
    "inversiones": "Inversiones",
}


class AgentFilters(BaseModel):
    search: str | None = None
    verified: bool | None = None
    specialization: str | None = None
    limit: int | None = Field(default=None, ge=1, le=500)
    offset: int | None = Field(default=None, ge=0)


class AgentCreateRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    full_name: str = Field(min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=40)
    license_number: str | None = Field(default=None, max_length=80)
    commission_rate: float | None = Field(default=None, ge=0, le=100)
    specialization: list[str] = Field(default_factory=list)
    bio: str | None = Field(default=None, max_length=5000)


class AgentUpdateRequest(BaseModel):
    license_number: str | None = Field(default=None, max_length=80)
    commission_rate: float | None = Field(default=None, ge=0, le=100)
    specialization: list[str] | None = None
    bio: str | None = Field(default=None, max_length=5000)
    is_verified: bool | None = None


class AgentVerificationRequest(BaseModel):
    verified: bool


class AgentProfile(ProfileSummary):
    avatar_url: str | None = None
    is_active: bool = True


class AgentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    license_number: str | None = None
    commission_rate: float
    specialization: list[str] = Field(default_factory=list)
    bio: str | None = None
    is_verified: bool
    rating: float | None = None
    total_sales: int | None = 0
    total_rentals: int | None = 0
    created_at: datetime | None = None
    profile: AgentProfile | None = None

    @computed_field
    @property
    def specialization_labels(self) -> list[str]:
        return [AGENT_SPECIALIZATIONS.get(value, value) for value in self.specialization]


class AgentDetailResponse(AgentResponse):
    properties_count: int = 0
    active_contracts_count: int = 0
    pending_commissions: float = 0


class AgentStats(BaseModel):
    total: int = 0
    verified: int = 0
    total_sales: int = 0
    total_rentals: int = 0


class CommissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    agent_id: str
    contract_id: str | None = None
    amount: float
    status: str
    created_at: datetime | None = None
