"""
api/routes/v1/common.py -- Helpers shared by the v1 route modules.

  RecordId       Path parameter type for numeric ids (1 .. 2**63-1, else 422).
  list_query()   FastAPI dependency turning page/limit/sort_by/order/search
                 query params into a core.paging.ListQuery.
  to_page()      Wraps a store page in the {"data", "meta"} envelope.
  not_found() / conflict() / bad_request()
                 HTTPException factories using the structured detail shape
                 the exception handler in api/main.py expects.
  scoped_organization()
                 Decides which organization a new scoped record belongs to.
"""

from typing import Annotated, Optional

from fastapi import HTTPException, Path, Query
from pydantic import BaseModel

from api.models import OrderEnum, Page, PageMeta
from auth.models import Principal
from auth.policy import is_admin
from core.paging import DEFAULT_LIMIT, MAX_LIMIT, ListQuery, total_pages

# Largest value SQLite can bind to an INTEGER column.
MAX_RECORD_ID = 2**63 - 1

RecordId = Annotated[int, Path(ge=1, le=MAX_RECORD_ID, description="Numeric record id.")]


def list_query(
    page: int = Query(1, ge=1, description="1-based page number."),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Items per page."),
    sort_by: str = Query("created_at", max_length=50, description="Column to sort by. Unknown columns fall back to created_at."),
    order: OrderEnum = Query(OrderEnum.asc),
    search: str = Query("", max_length=100, description="Case-insensitive substring across text columns."),
) -> ListQuery:
    return ListQuery(page=page, limit=limit, sort_by=sort_by, order=order.value, search=search.strip())


def to_page(items: list, total: int, query: ListQuery, schema: type[BaseModel]) -> Page:
    return Page(
        data=[schema.model_validate(item) for item in items],
        meta=PageMeta(
            total_items=total,
            total_pages=total_pages(total, query.limit),
            current_page=query.page,
        ),
    )


def not_found(label: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": f"{label} not found."})


def conflict(message: str) -> HTTPException:
    return HTTPException(status_code=409, detail={"code": "conflict", "message": message})


def bad_request(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": code, "message": message})


def scoped_organization(principal: Principal, requested: Optional[int]) -> Optional[int]:
    """Return the organization a new scoped record is filed under.

    Admins may file into any organization (or none). Everyone else who got
    past the policy check is an org_admin and always files into their own
    organization, whatever the body says.
    """
    if is_admin(principal):
        return requested
    return principal.organization_id
