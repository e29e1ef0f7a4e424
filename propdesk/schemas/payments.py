"""Payment request/response schemas for API contracts."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from propdesk.schemas.common import ProfileSummary, PropertySummary
from propdesk.utils.formatting import format_period

PaymentStatusValue = Literal["pendiente", "pagado", "vencido", "cancelado"]
PaymentMethodValue = Literal["efectivo", "transferencia"]

PAYMENT_SORT_FIELDS = ("due_date", "payment_date", "amount", "created_at", "period_year", "period_month")


class PaymentFilters(BaseModel):
    search: str | None = None
    status: PaymentStatusValue | list[PaymentStatusValue] | None = None
    contract_id: str | None = None
    tenant_id: str | None = None
    period_month: int | None = Field(default=None, ge=1, le=12)
    period_year: int | None = Field(default=None, ge=1900)
    from_date: date | None = None
    to_date: date | None = None


class PaymentCreateRequest(BaseModel):
    contract_id: str = Field(min_length=1)
    tenant_id: str = Field(min_length=1)
    amount: float = Field(ge=0)
    currency: str = Field(default="ARS", min_length=3, max_length=3)
    due_date: date
    period_month: int = Field(ge=1, le=12)
    period_year: int = Field(ge=1900)
    notes: str | None = Field(default=None, max_length=10000)


class PaymentRegisterRequest(BaseModel):
    payment_method: PaymentMethodValue
    payment_date: date | None = None
    receipt_number: str | None = Field(default=None, max_length=80)
    notes: str | None = Field(default=None, max_length=10000)


class PaymentStatusUpdateRequest(BaseModel):
    status: PaymentStatusValue


class ContractBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    contract_number: str | None = None
    monthly_rent: float
    start_date: date
    end_date: date
    property: PropertySummary | None = None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    contract_id: str
    tenant_id: str
    amount: float
    currency: str
    due_date: date
    payment_date: date | None = None
    period_month: int
    period_year: int
    status: str
    payment_method: str | None = None
    receipt_number: str | None = None
    late_fee: float = 0
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    contract: ContractBrief | None = None
    tenant: ProfileSummary | None = None

    @computed_field
    @property
    def period_label(self) -> str:
        if not 1 <= self.period_month <= 12:
            return f"{self.period_month}/{self.period_year}"
        return format_period(self.period_month, self.period_year)


class PaymentStats(BaseModel):
    total_pending: float = 0
    total_paid: float = 0
    total_overdue: float = 0
    count_pending: int = 0
    count_paid: int = 0
    count_overdue: int = 0
