"""Contract request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from propdesk.schemas.common import AgentSummary, ProfileSummary, PropertySummary

ContractStatusValue = Literal["pendiente", "activo", "vencido", "cancelado"]
AdjustmentIndexValue = Literal["ICL", "IPC", "ninguno"]

CONTRACT_SORT_FIELDS = ("start_date", "end_date", "monthly_rent", "created_at")


class ContractFilters(BaseModel):
    search: str | None = None
    status: ContractStatusValue | list[ContractStatusValue] | None = None
    property_id: str | None = None
    tenant_id: str | None = None
    agent_id: str | None = None
    from_date: date | None = None
    to_date: date | None = None


class ContractCreateRequest(BaseModel):
    contract_number: str | None = Field(default=None, max_length=40)
    property_id: str = Field(min_length=1)
    tenant_id: str = Field(min_length=1)
    agent_id: str | None = None
    status: ContractStatusValue = "pendiente"
    start_date: date
    end_date: date
    monthly_rent: float = Field(ge=0)
    deposit: float | None = Field(default=None, ge=0)
    currency: str = Field(default="ARS", min_length=3, max_length=3)
    payment_day: int = Field(default=10, ge=1, le=31)
    adjustment_index: AdjustmentIndexValue = "ninguno"
    notes: str | None = Field(default=None, max_length=10000)

    @model_validator(mode="after")
    def end_after_start(self) -> "ContractCreateRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ContractUpdateRequest(BaseModel):
    agent_id: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    monthly_rent: float | None = Field(default=None, ge=0)
    deposit: float | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    payment_day: int | None = Field(default=None, ge=1, le=31)
    adjustment_index: AdjustmentIndexValue | None = None
    notes: str | None = Field(default=None, max_length=10000)


class ContractStatusUpdateRequest(BaseModel):
    status: ContractStatusValue
    property_id: str | None = None


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    contract_number: str | None = None
    property_id: str
    tenant_id: str
    agent_id: str | None = None
    status: str
    start_date: date
    end_date: date
    monthly_rent: float
    deposit: float | None = None
    currency: str
    payment_day: int | None = None
    adjustment_index: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    property: PropertySummary | None = None
    tenant: ProfileSummary | None = None
    agent: AgentSummary | None = None
