"""Tenant service: tenant profiles, their leases and payment history."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from propdesk.auth.provider import AuthProviderClient
from propdesk.core.enums import CONTRACT_ACTIVE, PAYMENT_OVERDUE, PAYMENT_PAID, PAYMENT_PENDING, ROLE_TENANT
from propdesk.core.exceptions import DatabaseError, NotFoundError
from propdesk.database.models import Contract, MaintenanceRequest, Payment, Profile
from propdesk.schemas.tenants import AccountCreated, PaymentsSummary, TenantContract, TenantFilters, TenantResponse
from propdesk.services.base_service import BaseService
from propdesk.services.query_builder import apply_limit_offset, ilike_any
from propdesk.utils.validators import sanitize_text, temporary_password

logger = logging.getLogger(__name__)

_TENANT_UPDATE_FIELDS = ("full_name", "phone", "dni", "address", "avatar_url")


def _tenant_view(
    profile: Profile,
    contracts: list[Contract],
    current: Contract | None,
    summary: PaymentsSummary | None = None,
) -> TenantResponse:
    return TenantResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        phone=profile.phone,
        dni=profile.dni,
        address=profile.address,
        avatar_url=profile.avatar_url,
        role=profile.role,
        is_active=profile.is_active,
        created_at=profile.created_at,
        contracts=[TenantContract.model_validate(contract) for contract in contracts],
        current_contract=TenantContract.model_validate(current) if current else None,
        payments_summary=summary,
    )


class TenantService(BaseService):
    """Service for tenant listings, account creation and soft deletion."""

    def __init__(self, db=None, auth_client: AuthProviderClient | None = None) -> None:
        super().__init__(db)
        self._auth_client = auth_client

    @property
    def auth_client(self) -> AuthProviderClient:
        if self._auth_client is None:
            self._auth_client = AuthProviderClient()
        return self._auth_client

    def _tenant_query(self):
        return self.db.query(Profile).filter(Profile.role == ROLE_TENANT)

    def fetch_tenants(self, filters: TenantFilters | None = None) -> tuple[list[TenantResponse], int]:
        """Active tenants, newest first, each with its current active contract.

        The contract status filter applies to the fetched window, so ``count``
        is the number of rows returned.
        """
        filters = filters or TenantFilters()
        query = self._tenant_query().filter(Profile.is_active.is_(True)).order_by(Profile.created_at.desc())
        search = sanitize_text(filters.search, max_len=200)
        if search:
            query = query.filter(ilike_any((Profile.full_name, Profile.email, Profile.dni, Profile.phone), search))
        query = apply_limit_offset(query, filters.limit, filters.offset)

        try:
            profiles = query.all()
            tenant_ids = [profile.id for profile in profiles]
            active_contracts = []
            if tenant_ids:
                active_contracts = (
                    self.db.query(Contract)
                    .options(joinedload(Contract.property))
                    .filter(Contract.tenant_id.in_(tenant_ids), Contract.status == CONTRACT_ACTIVE)
                    .all()
                )
        except SQLAlchemyError:
            logger.exception("tenants.fetch.failed", extra={"event": "tenants.fetch.failed"})
            return [], 0

        current_by_tenant: dict[str, Contract] = {}
        for contract in active_contracts:
            current_by_tenant.setdefault(contract.tenant_id, contract)

        tenants = []
        for profile in profiles:
            current = current_by_tenant.get(profile.id)
            tenants.append(_tenant_view(profile, [current] if current else [], current))

        if filters.status == "with_contract":
            tenants = [tenant for tenant in tenants if tenant.current_contract is not None]
        elif filters.status == "without_contract":
            tenants = [tenant for tenant in tenants if tenant.current_contract is None]
        return tenants, len(tenants)

    def get_tenant_by_id(self, tenant_id: str) -> TenantResponse:
        profile = (
            self._tenant_query()
            .options(joinedload(Profile.contracts).joinedload(Contract.property))
            .filter(Profile.id == tenant_id)
            .first()
        )
        if profile is None:
            raise NotFoundError(f"Tenant {tenant_id} not found.")

        statuses = [status for (status,) in self.db.query(Payment.status).filter(Payment.tenant_id == tenant_id).all()]
        summary = PaymentsSummary(
            total=len(statuses),
            paid=statuses.count(PAYMENT_PAID),
            pending=statuses.count(PAYMENT_PENDING),
            overdue=statuses.count(PAYMENT_OVERDUE),
        )
        contracts = list(profile.contracts)
        current = next((contract for contract in contracts if contract.status == CONTRACT_ACTIVE), None)
        return _tenant_view(profile, contracts, current, summary)

    def get_tenant_stats(self) -> dict[str, int]:
        try:
            total = self._tenant_query().filter(Profile.is_active.is_(True)).count()
            with_active_contract = len(
                {tenant_id for (tenant_id,) in self.db.query(Contract.tenant_id).filter(Contract.status == CONTRACT_ACTIVE).all()}
            )
            with_pending_payments = len(
                {
                    tenant_id
                    for (tenant_id,) in self.db.query(Payment.tenant_id)
                    .filter(Payment.status.in_([PAYMENT_PENDING, PAYMENT_OVERDUE]))
                    .all()
                }
            )
            month_start = self._utcnow_naive().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
            new_this_month = (
                self._tenant_query()
                .filter(Profile.is_active.is_(True), Profile.created_at >= month_start)
                .count()
            )
        except SQLAlchemyError:
            logger.exception("tenants.stats.failed", extra={"event": "tenants.stats.failed"})
            return {"total": 0, "with_active_contract": 0, "with_pending_payments": 0, "new_this_month": 0}

        return {
            "total": total,
            "with_active_contract": with_active_contract,
            "with_pending_payments": with_pending_payments,
            "new_this_month": new_this_month,
        }

    def create_tenant(self, data: dict[str, Any]) -> AccountCreated:
        """Sign the tenant up with a temporary password and fill in the profile."""
        account = self.auth_client.sign_up(
            email=data["email"],
            password=temporary_password(),
            metadata={"full_name": data["full_name"], "role": ROLE_TENANT},
        )
        profile = self.db.get(Profile, account.user_id)
        if profile is None:
            profile = Profile(id=account.user_id, email=account.email)
            self.db.add(profile)
        profile.full_name = data["full_name"]
        profile.phone = data.get("phone") or None
        profile.dni = data.get("dni") or None
        profile.address = data.get("address") or None
        profile.role = ROLE_TENANT
        profile.updated_at = self._utcnow_naive()
        try:
            self.commit()
        except DatabaseError:
            logger.exception("tenants.create.failed", extra={"event": "tenants.create.failed", "user_id": account.user_id})
            raise
        logger.info("tenants.created", extra={"event": "tenants.created", "user_id": account.user_id})
        return AccountCreated(success=True, user_id=account.user_id)

    def update_tenant(self, tenant_id: str, data: dict[str, Any]) -> bool:
        values = {getattr(Profile, field): data[field] for field in _TENANT_UPDATE_FIELDS if field in data}
        values[Profile.updated_at] = self._utcnow_naive()
        updated = (
            self._tenant_query()
            .filter(Profile.id == tenant_id)
            .update(values, synchronize_session=False)
        )
        self.commit()
        return bool(updated)

    def deactivate_tenant(self, tenant_id: str) -> bool:
        """Soft delete: the profile stays, flagged inactive."""
        updated = (
            self._tenant_query()
            .filter(Profile.id == tenant_id)
            .update({Profile.is_active: False, Profile.updated_at: self._utcnow_naive()}, synchronize_session=False)
        )
        self.commit()
        if updated:
            logger.info("tenants.deactivated", extra={"event": "tenants.deactivated", "tenant_id": tenant_id})
        return bool(updated)

    def get_tenant_payments(self, tenant_id: str) -> list[Payment]:
        return (
            self.db.query(Payment)
            .options(joinedload(Payment.contract).joinedload(Contract.property))
            .filter(Payment.tenant_id == tenant_id)
            .order_by(Payment.due_date.desc())
            .all()
        )

    def get_tenant_maintenance_requests(self, tenant_id: str) -> list[MaintenanceRequest]:
        return (
            self.db.query(MaintenanceRequest)
            .options(joinedload(MaintenanceRequest.property))
            .filter(MaintenanceRequest.tenant_id == tenant_id)
            .order_by(MaintenanceRequest.created_at.desc())
            .all()
        )
