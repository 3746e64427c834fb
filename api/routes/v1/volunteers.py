"""
api/routes/v1/volunteers.py -- Volunteer assignments. Admin only.

A volunteer record points at an existing user account. Creating one for an
unknown user_id returns 400 "unknown_user".
"""

from fastapi import Request

from api.models import VolunteerCreate, VolunteerResponse, VolunteerUpdate
from api.routes.v1.common import bad_request
from api.routes.v1.crud import build_crud_router
from auth.models import Principal
from auth.policy import Resource
from auth.store import CredentialStore
from ngo.models import Volunteer


def require_existing_user(request: Request, principal: Principal, values: dict) -> dict:
    """before_create hook: reject records that reference a missing user account."""
    credential_store: CredentialStore = request.app.state.credential_store
    if credential_store.get_by_id(values["user_id"]) is None:
        raise bad_request("unknown_user", f"User {values['user_id']} does not exist.")
    return values


router = build_crud_router(
    model=Volunteer,
    resource=Resource.volunteers,
    create_schema=VolunteerCreate,
    update_schema=VolunteerUpdate,
    response_schema=VolunteerResponse,
    label="Volunteer",
    before_create=require_existing_user,
)
