"""Composable filter, sort and pagination helpers for service queries."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from propdesk.core.exceptions import ValidationError

T = TypeVar("T")

DEFAULT_WINDOW = 10


@dataclass(frozen=True)
class Sort:
    field: str
    direction: str = "desc"

    @property
    def ascending(self) -> bool:
        return self.direction == "asc"


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    page_size: int = 12

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class Page(Generic[T]):
    """A window of rows plus the exact count of the filtered query."""

    items: list[T]
    total: int


def match_any(query: Query, column: Any, value: Any) -> Query:
    """Filter ``column`` by one value or any of several."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return query.filter(column.in_(list(value)))
    return query.filter(column == value)


def ilike_any(columns: Iterable[Any], term: str):
    """OR of case-insensitive substring matches over ``columns``."""
    pattern = f"%{term}%"
    return or_(*(column.ilike(pattern) for column in columns))


def apply_sort(
    query: Query,
    model: type,
    sort: Sort | None,
    allowed_fields: Sequence[str],
    default: Sort,
) -> Query:
    chosen = sort or default
    if chosen.field not in allowed_fields:
        raise ValidationError(f"Unsupported sort field: {chosen.field}")
    if chosen.direction not in {"asc", "desc"}:
        raise ValidationError(f"Unsupported sort direction: {chosen.direction}")
    column = getattr(model, chosen.field)
    return query.order_by(column.asc() if chosen.ascending else column.desc())


def apply_pagination(query: Query, pagination: Pagination | None) -> Query:
    if pagination is None:
        return query
    if pagination.page < 1 or pagination.page_size < 1:
        raise ValidationError("page and page_size must be >= 1.")
    return query.offset(pagination.offset).limit(pagination.page_size)


def apply_limit_offset(query: Query, limit: int | None, offset: int | None) -> Query:
    """Legacy limit/offset window; an offset without a limit spans DEFAULT_WINDOW rows."""
    if offset:
        return query.offset(offset).limit(limit or DEFAULT_WINDOW)
    if limit:
        return query.limit(limit)
    return query


def count_rows(query: Query) -> int:
    """Exact row count of ``query`` ignoring ordering."""
    return int(query.order_by(None).count())


def count_where(db: Session, model: type, *criteria: Any) -> int:
    query = db.query(func.count(model.id))
    if criteria:
        query = query.filter(*criteria)
    return int(query.scalar() or 0)


def sum_column(db: Session, column: Any, *criteria: Any) -> float:
    query = db.query(func.coalesce(func.sum(column), 0))
    if criteria:
        query = query.filter(*criteria)
    return float(query.scalar() or 0)


def contains_text(value: str | None, needle: str) -> bool:
    return bool(value) and needle in value.lower()


def window(items: Sequence[Any], limit: int | None, offset: int | None) -> list[Any]:
    """In-memory counterpart of ``apply_limit_offset`` for rows filtered after the fetch."""
    if offset:
        return list(items[offset : offset + (limit or DEFAULT_WINDOW)])
    if limit:
        return list(items[:limit])
    return list(items)
