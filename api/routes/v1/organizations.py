"""
api/routes/v1/organizations.py -- Organization records. Admin only.

name and registration_number are unique; a duplicate on create or update
returns 409.
"""

from api.models import OrganizationCreate, OrganizationResponse, OrganizationUpdate
from api.routes.v1.crud import build_crud_router
from auth.policy import Resource
from ngo.models import Organization

router = build_crud_router(
    model=Organization,
    resource=Resource.organizations,
    create_schema=OrganizationCreate,
    update_schema=OrganizationUpdate,
    response_schema=OrganizationResponse,
    label="Organization",
)
