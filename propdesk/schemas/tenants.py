"""Tenant request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from propdesk.schemas.common import PropertySummary


class TenantFilters(BaseModel):
    search: str | None = None
    status: Literal["all", "with_contract", "without_contract"] = "all"
    limit: int | None = Field(default=None, ge=1, le=500)
    offset: int | None = Field(default=None, ge=0)


class TenantCreateRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    full_name: str = Field(min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=40)
    dni: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)


class TenantUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=40)
    dni: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=1000)


class TenantContract(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    contract_number: str | None = None
    property_id: str
    status: str
    start_date: date
    end_date: date
    monthly_rent: float
    deposit: float | None = None
    currency: str
    payment_day: int | None = None
    property: PropertySummary | None = None


class PaymentsSummary(BaseModel):
    total: int = 0
    paid: int = 0
    pending: int = 0
    overdue: int = 0


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None = None
    phone: str | None = None
    dni: str | None = None
    address: str | None = None
    avatar_url: str | None = None
    role: str
    is_active: bool
    created_at: datetime | None = None
    contracts: list[TenantContract] = Field(default_factory=list)
    current_contract: TenantContract | None = None
    payments_summary: PaymentsSummary | None = None


class TenantStats(BaseModel):
    total: int = 0
    with_active_contract: int = 0
    with_pending_payments: int = 0
    new_this_month: int = 0


class AccountCreated(BaseModel):
    success: bool = True
    user_id: str | None = None
