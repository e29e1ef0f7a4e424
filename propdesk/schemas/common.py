"""Common schema module."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

SortDirection = Literal["asc", "desc"]


class ProfileSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None


class PropertySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    address: str
    city: str | None = None
    images: list[str] | None = None
    operation_type: str | None = None


class AgentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    license_number: str | None = None
    commission_rate: float | None = None
    profile: ProfileSummary | None = None
