"""
core/paging.py -- Pagination, sorting and search for list queries.

Shared by auth/store.py and ngo/store.py so every list endpoint applies the
same rules:
  - sort_by must be one of the table's whitelisted columns; anything else
    falls back to created_at. Column names never come from raw input.
  - order is "asc" or "desc"; anything else means "asc".
  - search is a case-insensitive substring match OR-ed across the table's
    searchable text columns. The term is a bound parameter.

Security: LIKE wildcards in the search term are escaped, so a user searching
for "50%" matches the literal text instead of every row.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or ngo/.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import Table, and_, func, or_, select
from sqlalchemy.engine import Connection, Row
from sqlalchemy.sql.elements import ColumnElement

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class ListQuery:
    page: int = 1
    limit: int = DEFAULT_LIMIT
    sort_by: str = "created_at"
    order: str = "asc"
    search: str = ""

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def fetch_page(
    conn: Connection,
    table: Table,
    query: ListQuery,
    *,
    sortable: Sequence[str],
    searchable: Sequence[str],
    filters: Sequence[ColumnElement] = (),
) -> tuple[list[Row], int]:
    """Return (rows for the requested page, total matching rows).

    filters are extra WHERE clauses AND-ed with the search condition -- used
    for organization scoping and role filters.
    """
    conditions = list(filters)
    if query.search:
        pattern = f"%{_escape_like(query.search.lower())}%"
        conditions.append(or_(*(func.lower(table.c[name]).like(pattern, escape="\\") for name in searchable)))
    where = and_(*conditions) if conditions else None

    sort_name = query.sort_by if query.sort_by in sortable else "created_at"
    sort_col = table.c[sort_name]
    order_by = sort_col.desc() if query.order.lower() == "desc" else sort_col.asc()

    count_stmt = select(func.count()).select_from(table)
    page_stmt = table.select().order_by(order_by, table.c.id.asc()).limit(query.limit).offset(query.offset)
    if where is not None:
        count_stmt = count_stmt.where(where)
        page_stmt = page_stmt.where(where)

    total = conn.execute(count_stmt).scalar() or 0
    rows = conn.execute(page_stmt).fetchall()
    return list(rows), total
