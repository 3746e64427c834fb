"""
api/routes/v1/scoped.py -- Router factory for organization-scoped records.

Reports and volunteer attendance are managed by admins and by the org_admin
of the organization that owns each record.

  GET    /api/<name>          admins see every row; org_admins see their own organization's
  GET    /api/<name>/{id}     404 if missing, then 401 unless the record is in scope
  POST   /api/<name>          admins may set organization_id; org_admins always file into their own
  PUT    /api/<name>/{id}     404 if missing, then 401 unless in scope
  DELETE /api/<name>/{id}     404 if missing, then 401 unless in scope

Collection routes (list, create) depend on require(resource), which admits
admins and org_admins bound to an organization. Record routes load the record
first and call authorize() with its organization_id, so a missing record is
404 for everyone and an out-of-scope record is 401.

check_references validates foreign keys in create and update bodies; it raises
an HTTPException (400) for ids that do not exist.

This module does not use `from __future__ import annotations` for the same
reason as crud.py.
"""

import logging
from collections.abc import Callable
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from api.models import Page
from api.routes.v1.common import RecordId, bad_request, list_query, not_found, scoped_organization, to_page
from auth.dependencies import get_principal
from auth.models import Principal
from auth.policy import Resource, authorize, is_admin, require
from core.paging import ListQuery
from ngo.store import NGOStore

logger = logging.getLogger("ngomanager.routes")

CheckReferences = Callable[[NGOStore, dict], None]


def build_scoped_router(
    *,
    model: type,
    resource: Resource,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
    label: str,
    check_references: Optional[CheckReferences] = None,
) -> APIRouter:
    router = APIRouter()
    guard = require(resource)

    def load_in_scope(store: NGOStore, record_id: int, principal: Principal):
        record = store.get(model, record_id)
        if record is None:
            raise not_found(label)
        authorize(principal, resource, organization_id=record.organization_id)
        return record

    @router.get("", response_model=Page[response_schema])
    def list_records(
        request: Request,
        query: ListQuery = Depends(list_query),
        principal: Principal = Depends(guard),
    ):
        store: NGOStore = request.app.state.ngo_store
        organization_id = None if is_admin(principal) else principal.organization_id
        items, total = store.list_page(model, query, organization_id=organization_id)
        return to_page(items, total, query, response_schema)

    @router.get("/{record_id}", response_model=response_schema)
    def get_record(request: Request, record_id: RecordId, principal: Principal = Depends(get_principal)):
        store: NGOStore = request.app.state.ngo_store
        return response_schema.model_validate(load_in_scope(store, record_id, principal))

    @router.post("", response_model=response_schema, status_code=201)
    def create_record(request: Request, body: create_schema, principal: Principal = Depends(guard)):
        store: NGOStore = request.app.state.ngo_store
        values = body.model_dump(mode="json")
        values["organization_id"] = scoped_organization(principal, values.get("organization_id"))
        if check_references is not None:
            check_references(store, values)
        record_id = store.create(model(**values))
        logger.info(
            "%s %s created by %s %s (organization=%s)",
            label,
            record_id,
            principal.role.value,
            principal.id,
            values["organization_id"],
        )
        return response_schema.model_validate(store.get(model, record_id))

    @router.put("/{record_id}", response_model=response_schema)
    def update_record(
        request: Request,
        record_id: RecordId,
        body: update_schema,
        principal: Principal = Depends(get_principal),
    ):
        store: NGOStore = request.app.state.ngo_store
        load_in_scope(store, record_id, principal)
        changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if not changes:
            raise bad_request("no_changes", "No fields to update.")
        if check_references is not None:
            check_references(store, changes)
        store.update(model, record_id, **changes)
        logger.info("%s %s updated by %s %s", label, record_id, principal.role.value, principal.id)
        return response_schema.model_validate(store.get(model, record_id))

    @router.delete("/{record_id}", status_code=204)
    def delete_record(request: Request, record_id: RecordId, principal: Principal = Depends(get_principal)) -> Response:
        store: NGOStore = request.app.state.ngo_store
        load_in_scope(store, record_id, principal)
        store.delete(model, record_id)
        logger.info("%s %s deleted by %s %s", label, record_id, principal.role.value, principal.id)
        return Response(status_code=204)

    return router
