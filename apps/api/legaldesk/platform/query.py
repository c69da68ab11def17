from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select


ItemT = TypeVar("ItemT")

DEFAULT_SORT_COLUMN = "created_at"

# Characters with meaning in filter or LIKE syntax: , . ( ) " ' \ % _
_SEARCH_UNSAFE_RE = re.compile(r"[,.()\"'\\%_]")


class PageParams(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    sort: str = DEFAULT_SORT_COLUMN
    order: Literal["asc", "desc"] = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")


class Page(BaseModel, Generic[ItemT]):
    data: list[ItemT]
    meta: PageMeta


def build_page(items: Sequence[ItemT], *, total: int, params: PageParams) -> Page[ItemT]:
    return Page(
        data=list(items),
        meta=PageMeta(
            page=params.page,
            limit=params.limit,
            total=total,
            total_pages=math.ceil(total / params.limit) if total else 0,
        ),
    )


def sanitize_search_term(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = _SEARCH_UNSAFE_RE.sub("", value).strip()
    return cleaned or None


def resolve_sort_column(requested: str | None, allowed: Iterable[str]) -> str:
    if requested and requested in set(allowed):
        return requested
    return DEFAULT_SORT_COLUMN


def apply_search(query: Select[Any], model: type[Any], columns: Sequence[str], term: str | None) -> Select[Any]:
    cleaned = sanitize_search_term(term)
    if cleaned is None or not columns:
        return query
    pattern = f"%{cleaned}%"
    return query.where(or_(*(getattr(model, column).ilike(pattern) for column in columns)))


def apply_equality_filters(
    query: Select[Any],
    model: type[Any],
    filters: dict[str, Any] | None,
    allowed: Iterable[str],
) -> Select[Any]:
    if not filters:
        return query
    allowed_set = set(allowed)
    for column, value in filters.items():
        if value is None or column not in allowed_set:
            continue
        query = query.where(getattr(model, column) == value)
    return query


def paginate(
    session: Session,
    query: Select[Any],
    model: type[Any],
    params: PageParams,
    *,
    sort_columns: Iterable[str],
) -> tuple[list[Any], int]:
    """Run the count and data queries for one filtered statement.

    Both queries are derived from ``query`` so the total always describes the
    same predicate as the returned page.
    """

    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = int(session.scalar(count_query) or 0)

    sort_column = getattr(model, resolve_sort_column(params.sort, sort_columns))
    ordering = sort_column.asc() if params.order == "asc" else sort_column.desc()
    rows = session.scalars(query.order_by(ordering, model.id.asc()).offset(params.offset).limit(params.limit)).all()
    return list(rows), total
