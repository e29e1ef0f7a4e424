"""Filter, sort and pagination state for property listing screens."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from propdesk.schemas.properties import PropertyFilters
from propdesk.services.query_builder import Pagination, Sort
from propdesk.utils.formatting import group_thousands, plain_number

DEFAULT_SORT = Sort("created_at", "desc")
DEFAULT_PAGE_SIZE = 12

PROPERTY_TYPE_LABELS = {
    "departamento": "Departamento",
    "casa": "Casa",
    "ph": "PH",
    "local": "Local",
    "oficina": "Oficina",
}

# Query-string key -> filter attribute.
_QUERY_KEYS = {
    "search": "search",
    "type": "property_type",
    "operation": "operation_type",
    "status": "status",
    "min_price": "min_price",
    "max_price": "max_price",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "city": "city",
}


def _number(raw: Any) -> float | int:
    value = float(raw)
    return int(value) if value.is_integer() else value


class PropertyFilterState:
    """Listing state that round-trips through URL query parameters.

    Every filter change returns to the first page. The query form omits
    defaults so a pristine listing has an empty query string.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.filters = PropertyFilters()
        self.sort = DEFAULT_SORT
        self.page = 1
        self.page_size = page_size
        self.total = 0

    @classmethod
    def from_query(cls, params: Mapping[str, Any], page_size: int = DEFAULT_PAGE_SIZE) -> "PropertyFilterState":
        state = cls(page_size=page_size)
        values: dict[str, Any] = {}
        for key, attribute in _QUERY_KEYS.items():
            raw = params.get(key)
            if raw in (None, ""):
                continue
            if attribute in {"min_price", "max_price", "bedrooms", "bathrooms"}:
                values[attribute] = _number(raw)
            else:
                values[attribute] = str(raw)
        state.filters = PropertyFilters(**values)

        field = params.get("sort") or DEFAULT_SORT.field
        direction = params.get("direction") or DEFAULT_SORT.direction
        state.sort = Sort(str(field), str(direction))
        if params.get("page"):
            state.page = int(params["page"])
        return state

    def to_query(self) -> dict[str, str]:
        query: dict[str, str] = {}
        for key, attribute in _QUERY_KEYS.items():
            value = getattr(self.filters, attribute)
            if not value:
                continue
            query[key] = plain_number(value) if isinstance(value, (int, float)) else str(value)
        if self.sort.field != DEFAULT_SORT.field:
            query["sort"] = self.sort.field
        if self.sort.direction != DEFAULT_SORT.direction:
            query["direction"] = self.sort.direction
        if self.page > 1:
            query["page"] = str(self.page)
        return query

    @property
    def pagination(self) -> Pagination:
        return Pagination(page=self.page, page_size=self.page_size)

    def update_filter(self, key: str, value: Any) -> None:
        self.update_filters({key: value})

    def update_filters(self, changes: Mapping[str, Any]) -> None:
        merged = self.filters.model_dump()
        merged.update(changes)
        self.filters = PropertyFilters(**merged)
        self.page = 1

    def clear_filters(self) -> None:
        self.filters = PropertyFilters()
        self.page = 1

    def update_sort(self, field: str, direction: str | None = None) -> None:
        if self.sort.field == field and not direction:
            self.sort = Sort(field, "desc" if self.sort.ascending else "asc")
        else:
            self.sort = Sort(field, direction or "desc")

    def update_page(self, page: int) -> None:
        self.page = page

    def update_total(self, total: int) -> None:
        self.total = total

    @property
    def total_pages(self) -> int:
        return math.ceil((self.total or 0) / self.page_size)

    @property
    def has_active_filters(self) -> bool:
        f = self.filters
        return bool(
            f.search
            or f.property_type
            or f.operation_type
            or f.status
            or f.min_price
            or f.max_price
            or f.bedrooms
            or f.bathrooms
            or f.city
            or f.is_featured
        )

    @property
    def active_filters_count(self) -> int:
        f = self.filters
        flags = (
            f.search,
            f.property_type,
            f.operation_type,
            f.status,
            f.min_price or f.max_price,
            f.bedrooms,
            f.bathrooms,
            f.city,
        )
        return sum(1 for flag in flags if flag)

    @property
    def description(self) -> str:
        f = self.filters
        parts: list[str] = []
        if f.operation_type:
            parts.append("Venta" if f.operation_type == "venta" else "Alquiler")
        if f.property_type and isinstance(f.property_type, str):
            parts.append(PROPERTY_TYPE_LABELS.get(f.property_type, f.property_type))
        if f.bedrooms:
            parts.append(f"{f.bedrooms}+ dorm")
        if f.city:
            parts.append(f.city)
        if f.min_price and f.max_price:
            parts.append(f"${group_thousands(f.min_price)} - ${group_thousands(f.max_price)}")
        elif f.min_price:
            parts.append(f"Desde ${group_thousands(f.min_price)}")
        elif f.max_price:
            parts.append(f"Hasta ${group_thousands(f.max_price)}")
        return " • ".join(parts)
