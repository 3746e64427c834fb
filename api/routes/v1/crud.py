"""
api/routes/v1/crud.py -- Router factory for admin-only NGO record collections.

Donors, beneficiaries, volunteers, employees, events, projects and
organizations share one shape:

  GET    /api/<name>          paginated list
  GET    /api/<name>/{id}     detail
  POST   /api/<name>          create (201)
  PUT    /api/<name>/{id}     partial update (only fields present in the body)
  DELETE /api/<name>/{id}     delete (204)

Auth policy: every route depends on require(resource). The role check runs
before the handler body, so a non-admin caller gets 401 and the store is never
touched -- no reads, no writes.

Per-collection differences are expressed through a before_create hook, which
may validate foreign keys or fill defaults and returns the values to insert.

Note: this module deliberately does not use `from __future__ import
annotations`. FastAPI resolves handler annotations at decoration time, and the
body/response types here are closure variables, not module-level names.
"""

import logging
from collections.abc import Callable
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from api.models import Page
from api.routes.v1.common import RecordId, bad_request, conflict, list_query, not_found, to_page
from auth.models import Principal
from auth.policy import Resource, require
from core.paging import ListQuery
from ngo.store import NGOStore

logger = logging.getLogger("ngomanager.routes")

BeforeCreate = Callable[[Request, Principal, dict], dict]


def build_crud_router(
    *,
    model: type,
    resource: Resource,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
    label: str,
    before_create: Optional[BeforeCreate] = None,
) -> APIRouter:
    """Return an APIRouter implementing admin-only CRUD for one record type.

    label is the human name used in messages and logs ("Donor").
    """
    router = APIRouter()
    guard = require(resource)

    @router.get("", response_model=Page[response_schema])
    def list_records(
        request: Request,
        query: ListQuery = Depends(list_query),
        principal: Principal = Depends(guard),
    ):
        store: NGOStore = request.app.state.ngo_store
        items, total = store.list_page(model, query)
        return to_page(items, total, query, response_schema)

    @router.get("/{record_id}", response_model=response_schema)
    def get_record(request: Request, record_id: RecordId, principal: Principal = Depends(guard)):
        store: NGOStore = request.app.state.ngo_store
        record = store.get(model, record_id)
        if record is None:
            raise not_found(label)
        return response_schema.model_validate(record)

    @router.post("", response_model=response_schema, status_code=201)
    def create_record(request: Request, body: create_schema, principal: Principal = Depends(guard)):
        store: NGOStore = request.app.state.ngo_store
        values = body.model_dump(mode="json")
        if before_create is not None:
            values = before_create(request, principal, values)
        try:
            record_id = store.create(model(**values))
        except IntegrityError as exc:
            raise conflict(f"A {label.lower()} with those unique fields already exists.") from exc
        logger.info("%s %s created by admin %s", label, record_id, principal.id)
        return response_schema.model_validate(store.get(model, record_id))

    @router.put("/{record_id}", response_model=response_schema)
    def update_record(request: Request, record_id: RecordId, body: update_schema, principal: Principal = Depends(guard)):
        store: NGOStore = request.app.state.ngo_store
        if store.get(model, record_id) is None:
            raise not_found(label)
        changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if not changes:
            raise bad_request("no_changes", "No fields to update.")
        try:
            store.update(model, record_id, **changes)
        except IntegrityError as exc:
            raise conflict(f"A {label.lower()} with those unique fields already exists.") from exc
        logger.info("%s %s updated by admin %s", label, record_id, principal.id)
        return response_schema.model_validate(store.get(model, record_id))

    @router.delete("/{record_id}", status_code=204)
    def delete_record(request: Request, record_id: RecordId, principal: Principal = Depends(guard)) -> Response:
        store: NGOStore = request.app.state.ngo_store
        if not store.delete(model, record_id):
            raise not_found(label)
        logger.info("%s %s deleted by admin %s", label, record_id, principal.id)
        return Response(status_code=204)

    return router
