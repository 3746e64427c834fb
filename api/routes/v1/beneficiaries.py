"""
api/routes/v1/beneficiaries.py -- Beneficiary records. Admin only.

Reports reference beneficiaries by id; see api/routes/v1/reports.py.
"""

from api.models import BeneficiaryCreate, BeneficiaryResponse, BeneficiaryUpdate
from api.routes.v1.crud import build_crud_router
from auth.policy import Resource
from ngo.models import Beneficiary

router = build_crud_router(
    model=Beneficiary,
    resource=Resource.beneficiaries,
    create_schema=BeneficiaryCreate,
    update_schema=BeneficiaryUpdate,
    response_schema=BeneficiaryResponse,
    label="Beneficiary",
)
