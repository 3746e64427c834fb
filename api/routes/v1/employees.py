"""
api/routes/v1/employees.py -- Employment records. Admin only.

position is the job title; it has nothing to do with the account's auth role.
"""

from api.models import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from api.routes.v1.crud import build_crud_router
from api.routes.v1.volunteers import require_existing_user
from auth.policy import Resource
from ngo.models import Employee

router = build_crud_router(
    model=Employee,
    resource=Resource.employees,
    create_schema=EmployeeCreate,
    update_schema=EmployeeUpdate,
    response_schema=EmployeeResponse,
    label="Employee",
    before_create=require_existing_user,
)
