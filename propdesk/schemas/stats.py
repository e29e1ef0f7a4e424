"""Dashboard and report view models."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


class Activity(BaseModel):
    id: str
    action: str
    property: str
    time: str
    icon: str
    type: Literal["contract", "payment", "maintenance", "tenant"]
    occurred_at: datetime


class StatCard(BaseModel):
    title: str
    value: str
    change: str
    change_type: Literal["positive", "negative", "neutral"]
    icon: str


class DashboardData(BaseModel):
    activities: list[Activity] = Field(default_factory=list)
    stats: list[StatCard] = Field(default_factory=list)


class RevenuePoint(BaseModel):
    month: str
    amount: float


class ReportSummary(BaseModel):
    total_revenue: float = 0
    revenue_change: float = 0
    active_properties: int = 0
    properties_change: float = 0
    pending_payments: int = 0
    pending_amount: float = 0
    occupancy_rate: float = 0


class Transaction(BaseModel):
    id: str
    payment_date: date | None = None
    status: str
    email: str
    amount: float
    currency: str
    tenant_name: str | None = None


class ReportData(BaseModel):
    revenue_history: list[RevenuePoint] = Field(default_factory=list)
    summary: ReportSummary = Field(default_factory=ReportSummary)
    recent_transactions: list[Transaction] = Field(default_factory=list)
