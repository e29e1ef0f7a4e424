"""Property listing service."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from propdesk.auth.viewer import Viewer
from propdesk.core.enums import PropertyStatus
from propdesk.core.exceptions import DatabaseError
from propdesk.database.models import Agent, Contract, Property
from propdesk.schemas.properties import PROPERTY_SORT_FIELDS, PropertyFilters
from propdesk.services.base_service import BaseService
from propdesk.services.query_builder import (
    Page,
    Pagination,
    Sort,
    apply_pagination,
    apply_sort,
    count_rows,
    ilike_any,
    match_any,
)
from propdesk.utils.validators import sanitize_text

logger = logging.getLogger(__name__)

DEFAULT_PROPERTY_SORT = Sort("created_at", "desc")

_PROPERTY_FIELDS = (
    "title",
    "description",
    "address",
    "city",
    "property_type",
    "operation_type",
    "status",
    "price",
    "currency",
    "bedrooms",
    "bathrooms",
    "area_m2",
    "images",
    "amenities",
    "agent_id",
    "owner_id",
    "is_featured",
    "is_published",
)


def _detail_options():
    return (
        joinedload(Property.agent).joinedload(Agent.profile),
        joinedload(Property.owner),
        selectinload(Property.contracts).joinedload(Contract.tenant),
    )


class PropertyService(BaseService):
    """Service for property listings, detail views and CRUD."""

    def _base_query(self, viewer: Viewer | None):
        query = self.db.query(Property)
        if viewer is None:
            # Anonymous visitors only see what is on the market.
            query = query.filter(
                Property.is_published.is_(True),
                Property.status == PropertyStatus.AVAILABLE.value,
            )
        return query

    def _apply_filters(self, query, filters: PropertyFilters):
        search = sanitize_text(filters.search, max_len=200)
        if search:
            query = query.filter(ilike_any((Property.title, Property.address, Property.city), search))
        if filters.property_type:
            query = match_any(query, Property.property_type, filters.property_type)
        if filters.operation_type:
            query = query.filter(Property.operation_type == filters.operation_type)
        if filters.status:
            query = match_any(query, Property.status, filters.status)
        if filters.min_price is not None:
            query = query.filter(Property.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Property.price <= filters.max_price)
        if filters.bedrooms is not None:
            query = query.filter(Property.bedrooms >= filters.bedrooms)
        if filters.bathrooms is not None:
            query = query.filter(Property.bathrooms >= filters.bathrooms)
        if filters.city:
            query = query.filter(Property.city.ilike(f"%{filters.city}%"))
        if filters.agent_id:
            query = query.filter(Property.agent_id == filters.agent_id)
        if filters.is_featured is not None:
            query = query.filter(Property.is_featured.is_(filters.is_featured))
        if filters.is_published is not None:
            query = query.filter(Property.is_published.is_(filters.is_published))
        return query

    def fetch_properties(
        self,
        filters: PropertyFilters | None = None,
        sort: Sort | None = None,
        pagination: Pagination | None = None,
        viewer: Viewer | None = None,
    ) -> Page[Property]:
        query = self._apply_filters(self._base_query(viewer), filters or PropertyFilters())
        query = apply_sort(query, Property, sort, PROPERTY_SORT_FIELDS, DEFAULT_PROPERTY_SORT)
        try:
            total = count_rows(query)
            rows = apply_pagination(query, pagination).all()
        except SQLAlchemyError:
            logger.exception("properties.fetch.failed", extra={"event": "properties.fetch.failed"})
            return Page(items=[], total=0)
        return Page(items=rows, total=total)

    def fetch_property(self, property_id: str, viewer: Viewer | None = None) -> Property | None:
        """Load one property with its agent, owner and contracts.

        Anonymous viewers only reach published, available listings. Each
        load counts as a view unless the viewer is the property's agent or
        owner.
        """
        try:
            prop = (
                self._base_query(viewer)
                .options(*_detail_options())
                .filter(Property.id == property_id)
                .first()
            )
        except SQLAlchemyError:
            logger.exception("properties.fetch_one.failed", extra={"event": "properties.fetch_one.failed", "property_id": property_id})
            return None
        if prop is None:
            return None

        if self._counts_as_view(prop, viewer):
            prop.views_count = (prop.views_count or 0) + 1
            try:
                self.commit()
            except DatabaseError:
                logger.warning(
                    "properties.views.update_failed",
                    extra={"event": "properties.views.update_failed", "property_id": property_id},
                )
        return prop

    @staticmethod
    def _counts_as_view(prop: Property, viewer: Viewer | None) -> bool:
        if viewer is None:
            return True
        agent_user_id = prop.agent.user_id if prop.agent else None
        return viewer.user_id not in {agent_user_id, prop.owner_id}

    def _agent_id_for(self, viewer: Viewer | None) -> str | None:
        if viewer is None or not viewer.is_agent:
            return None
        agent = self.db.query(Agent).filter(Agent.user_id == viewer.user_id).first()
        return agent.id if agent else None

    def create_property(self, data: dict[str, Any], viewer: Viewer | None = None) -> Property:
        """Insert a property; agents become the listing agent of what they create."""
        payload = {field: data[field] for field in _PROPERTY_FIELDS if field in data}
        agent_id = self._agent_id_for(viewer)
        if agent_id:
            payload["agent_id"] = agent_id

        prop = Property(**payload)
        self.db.add(prop)
        try:
            self.commit()
        except DatabaseError:
            logger.exception("properties.create.failed", extra={"event": "properties.create.failed"})
            raise
        self.db.refresh(prop)
        logger.info("properties.created", extra={"event": "properties.created", "property_id": prop.id})
        return prop

    def update_property(self, property_id: str, updates: dict[str, Any]) -> Property | None:
        prop = self.db.get(Property, property_id)
        if prop is None:
            return None
        for field in _PROPERTY_FIELDS:
            if field in updates:
                setattr(prop, field, updates[field])
        prop.updated_at = self._utcnow_naive()
        try:
            self.commit()
        except DatabaseError:
            logger.exception("properties.update.failed", extra={"event": "properties.update.failed", "property_id": property_id})
            raise
        self.db.refresh(prop)
        return prop

    def delete_property(self, property_id: str) -> bool:
        """Hard delete; returns False when nothing matched."""
        prop = self.db.get(Property, property_id)
        if prop is None:
            return False
        self.db.delete(prop)
        try:
            self.commit()
        except DatabaseError:
            logger.exception("properties.delete.failed", extra={"event": "properties.delete.failed", "property_id": property_id})
            raise
        logger.info("properties.deleted", extra={"event": "properties.deleted", "property_id": property_id})
        return True
