"""
Listing query building blocks: pagination parameters, the page envelope,
substring search across columns and second-query reference joins.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterable, List, Literal, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from supabase import Client

T = TypeVar("T")

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100


class ListParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE, alias="perPage")
    search: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    sort_by: Optional[str] = Field(default=None, alias="sortBy")
    sort_order: Optional[Literal["asc", "desc"]] = Field(default=None, alias="sortOrder")

    @model_validator(mode="before")
    @classmethod
    def accept_page_size(cls, data):
        """`pageSize` is accepted as another name for `perPage`."""
        if isinstance(data, dict) and "pageSize" in data and "perPage" not in data:
            data = {**data, "perPage": data["pageSize"], "per_page": data["pageSize"]}
        return data

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    def bounds(self):
        """Inclusive row range for the requested page."""
        return self.offset, self.offset + self.per_page - 1


class Page(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    per_page: int = Field(serialization_alias="perPage")
    total_pages: int = Field(serialization_alias="totalPages")


def total_pages(total: int, per_page: int) -> int:
    return math.ceil(total / per_page) if per_page else 0


def build_page(rows: List[Any], total: int, params: ListParams) -> Page:
    return Page(
        data=rows,
        total=total,
        page=params.page,
        per_page=params.per_page,
        total_pages=total_pages(total, params.per_page),
    )


def search_filter(columns: Sequence[str], term: str) -> str:
    """PostgREST or-filter matching `term` case-insensitively in any of `columns`."""
    cleaned = term.strip()
    for ch in ",()":
        cleaned = cleaned.replace(ch, " ")
    return ",".join(f"{column}.ilike.%{cleaned}%" for column in columns)


@dataclass
class RelatedJoin:
    """Attach rows from `table` to each listed row by the value of `foreign_key`."""

    foreign_key: str
    table: str
    attach_as: str
    columns: str = "*"
    key: str = "id"


def attach_related(supabase: Client, rows: List[Dict[str, Any]], join: RelatedJoin) -> List[Dict[str, Any]]:
    ids = list(dict.fromkeys(row[join.foreign_key] for row in rows if row.get(join.foreign_key)))
    related: Dict[Any, Dict[str, Any]] = {}
    if ids:
        result = supabase.table(join.table)\
            .select(join.columns)\
            .in_(join.key, ids)\
            .execute()
        related = {item[join.key]: item for item in result.data or []}
    for row in rows:
        row[join.attach_as] = related.get(row.get(join.foreign_key))
    return rows


def count_rows(supabase: Client, table: str, filters: Optional[Dict[str, Any]] = None) -> int:
    query = supabase.table(table).select("id", count="exact")
    for column, value in (filters or {}).items():
        query = query.eq(column, value)
    result = query.execute()
    if result.count is not None:
        return result.count
    return len(result.data or [])


def group_by(rows: Iterable[Dict[str, Any]], key: str) -> Dict[Any, List[Dict[str, Any]]]:
    grouped: Dict[Any, List[Dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(row.get(key), []).append(row)
    return grouped
