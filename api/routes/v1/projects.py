"""
api/routes/v1/projects.py -- Project records. Admin only.

created_by defaults to the calling admin's user id when the body omits it.
"""

from fastapi import Request

from api.models import ProjectCreate, ProjectResponse, ProjectUpdate
from api.routes.v1.crud import build_crud_router
from auth.models import Principal
from auth.policy import Resource
from ngo.models import Project


def _default_creator(request: Request, principal: Principal, values: dict) -> dict:
    if values.get("created_by") is None:
        values["created_by"] = principal.id
    return values


router = build_crud_router(
    model=Project,
    resource=Resource.projects,
    create_schema=ProjectCreate,
    update_schema=ProjectUpdate,
    response_schema=ProjectResponse,
    label="Project",
    before_create=_default_creator,
)
