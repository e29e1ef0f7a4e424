"""Contract service for lease lifecycle operations."""

from __future__ import annotations

import logging
import random
from datetime import timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from propdesk.core.enums import (
    CONTRACT_ACTIVE,
    RENTAL_OPERATION_TYPES,
    ROLE_TENANT,
    ContractStatus,
    PropertyStatus,
    values_of,
)
from propdesk.core.exceptions import DatabaseError, ValidationError
from propdesk.database.models import Agent, Contract, Profile, Property
from propdesk.schemas.contracts import CONTRACT_SORT_FIELDS, ContractFilters
from propdesk.services.base_service import BaseService
from propdesk.services.query_builder import (
    Page,
    Pagination,
    Sort,
    apply_pagination,
    apply_sort,
    contains_text,
    count_rows,
    match_any,
)
from propdesk.utils.validators import normalize_search

logger = logging.getLogger(__name__)

DEFAULT_CONTRACT_SORT = Sort("created_at", "desc")

_CONTRACT_UPDATE_FIELDS = (
    "agent_id",
    "start_date",
    "end_date",
    "monthly_rent",
    "deposit",
    "currency",
    "payment_day",
    "adjustment_index",
    "notes",
)


def generate_contract_number(year: int) -> str:
    return f"CTR-{year}-{random.randint(0, 9999):04d}"


def _contract_options():
    return (
        joinedload(Contract.property),
        joinedload(Contract.tenant),
        joinedload(Contract.agent).joinedload(Agent.profile),
    )


def _matches_search(contract: Contract, needle: str) -> bool:
    tenant = contract.tenant
    prop = contract.property
    return (
        contains_text(tenant.full_name if tenant else None, needle)
        or contains_text(prop.title if prop else None, needle)
        or contains_text(prop.address if prop else None, needle)
        or contains_text(contract.contract_number, needle)
    )


class ContractService(BaseService):
    """Service for contract CRUD, status transitions and expiry tracking."""

    def _filtered_query(self, filters: ContractFilters):
        query = self.db.query(Contract)
        if filters.status:
            query = match_any(query, Contract.status, filters.status)
        if filters.property_id:
            query = query.filter(Contract.property_id == filters.property_id)
        if filters.tenant_id:
            query = query.filter(Contract.tenant_id == filters.tenant_id)
        if filters.agent_id:
            query = query.filter(Contract.agent_id == filters.agent_id)
        if filters.from_date:
            query = query.filter(Contract.start_date >= filters.from_date)
        if filters.to_date:
            query = query.filter(Contract.end_date <= filters.to_date)
        return query

    def fetch_contracts(
        self,
        filters: ContractFilters | None = None,
        sort: Sort | None = None,
        pagination: Pagination | None = None,
    ) -> Page[Contract]:
        """List contracts with related rows.

        The text search runs over the fetched window (tenant name, property
        title or address, contract number); ``total`` stays the server count.
        """
        filters = filters or ContractFilters()
        query = apply_sort(self._filtered_query(filters), Contract, sort, CONTRACT_SORT_FIELDS, DEFAULT_CONTRACT_SORT)
        try:
            total = count_rows(query)
            rows = apply_pagination(query.options(*_contract_options()), pagination).all()
        except SQLAlchemyError:
            logger.exception("contracts.fetch.failed", extra={"event": "contracts.fetch.failed"})
            return Page(items=[], total=0)

        needle = normalize_search(filters.search)
        if needle:
            rows = [contract for contract in rows if _matches_search(contract, needle)]
        return Page(items=rows, total=total)

    def fetch_contract(self, contract_id: str) -> Contract | None:
        try:
            return (
                self.db.query(Contract)
                .options(*_contract_options())
                .filter(Contract.id == contract_id)
                .first()
            )
        except SQLAlchemyError:
            logger.exception("contracts.fetch_one.failed", extra={"event": "contracts.fetch_one.failed", "contract_id": contract_id})
            return None

    def fetch_available_properties(self) -> list[Property]:
        """Published rentals that can take a new contract."""
        try:
            return (
                self.db.query(Property)
                .filter(
                    Property.operation_type.in_(RENTAL_OPERATION_TYPES),
                    Property.status == PropertyStatus.AVAILABLE.value,
                    Property.is_published.is_(True),
                )
                .order_by(Property.title.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("contracts.available_properties.failed", extra={"event": "contracts.available_properties.failed"})
            return []

    def fetch_tenants(self) -> list[Profile]:
        try:
            return (
                self.db.query(Profile)
                .filter(Profile.role == ROLE_TENANT, Profile.is_active.is_(True))
                .order_by(Profile.full_name.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("contracts.tenants.failed", extra={"event": "contracts.tenants.failed"})
            return []

    def fetch_agents(self) -> list[Agent]:
        try:
            return (
                self.db.query(Agent)
                .options(joinedload(Agent.profile))
                .filter(Agent.is_verified.is_(True))
                .all()
            )
        except SQLAlchemyError:
            logger.exception("contracts.agents.failed", extra={"event": "contracts.agents.failed"})
            return []

    def _set_property_status(self, property_id: str, status: str) -> None:
        self.db.query(Property).filter(Property.id == property_id).update(
            {Property.status: status, Property.updated_at: self._utcnow_naive()},
            synchronize_session=False,
        )

    def create_contract(self, data: dict[str, Any]) -> Contract:
        payload = dict(data)
        if payload.get("start_date") and payload.get("end_date") and payload["end_date"] < payload["start_date"]:
            raise ValidationError("end_date must not be before start_date")
        if not payload.get("contract_number"):
            payload["contract_number"] = generate_contract_number(self._today().year)

        contract = Contract(**payload)
        try:
            self.db.add(contract)
            if contract.status == CONTRACT_ACTIVE and contract.property_id:
                self.db.flush()
                self._set_property_status(contract.property_id, PropertyStatus.RENTED.value)
            self.commit()
        except (SQLAlchemyError, DatabaseError):
            self.rollback()
            logger.exception("contracts.create.failed", extra={"event": "contracts.create.failed"})
            raise

        logger.info(
            "contracts.created",
            extra={"event": "contracts.created", "contract_id": contract.id, "status": contract.status},
        )
        return self.fetch_contract(contract.id) or contract

    def update_contract(self, contract_id: str, updates: dict[str, Any]) -> Contract | None:
        contract = self.db.get(Contract, contract_id)
        if contract is None:
            return None

        for field in _CONTRACT_UPDATE_FIELDS:
            if field in updates:
                setattr(contract, field, updates[field])
        if contract.end_date < contract.start_date:
            self.rollback()
            raise ValidationError("end_date must not be before start_date")
        contract.updated_at = self._utcnow_naive()
        self.commit()
        return self.fetch_contract(contract_id)

    def update_contract_status(self, contract_id: str, status: str, property_id: str | None = None) -> Contract | None:
        """Move a contract to ``status`` and keep its property's availability in step."""
        if status not in values_of(ContractStatus):
            raise ValidationError(f"Unsupported contract status: {status}")
        contract = self.db.get(Contract, contract_id)
        if contract is None:
            return None

        contract.status = status
        contract.updated_at = self._utcnow_naive()
        target_property = property_id or contract.property_id
        if target_property:
            property_status = PropertyStatus.RENTED.value if status == CONTRACT_ACTIVE else PropertyStatus.AVAILABLE.value
            self._set_property_status(target_property, property_status)
        self.commit()
        logger.info(
            "contracts.status.updated",
            extra={"event": "contracts.status.updated", "contract_id": contract_id, "status": status},
        )
        return self.fetch_contract(contract_id)

    def get_contract_stats(self) -> dict[str, float | int]:
        stats: dict[str, float | int] = {
            "total": 0,
            "active": 0,
            "pending": 0,
            "expired": 0,
            "monthly_income": 0,
        }
        try:
            rows = self.db.query(Contract.status, Contract.monthly_rent).all()
        except SQLAlchemyError:
            logger.exception("contracts.stats.failed", extra={"event": "contracts.stats.failed"})
            return stats

        for status, monthly_rent in rows:
            stats["total"] += 1
            if status == CONTRACT_ACTIVE:
                stats["active"] += 1
                stats["monthly_income"] += monthly_rent or 0
            elif status == ContractStatus.PENDING.value:
                stats["pending"] += 1
            elif status == ContractStatus.EXPIRED.value:
                stats["expired"] += 1
        return stats

    def get_expiring_contracts(self, days_ahead: int = 30) -> list[Contract]:
        today = self._today()
        horizon = today + timedelta(days=days_ahead)
        try:
            return (
                self.db.query(Contract)
                .options(*_contract_options())
                .filter(
                    Contract.status == CONTRACT_ACTIVE,
                    Contract.end_date >= today,
                    Contract.end_date <= horizon,
                )
                .order_by(Contract.end_date.asc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("contracts.expiring.failed", extra={"event": "contracts.expiring.failed"})
            return []
