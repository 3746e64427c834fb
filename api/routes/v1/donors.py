"""
api/routes/v1/donors.py -- Donor records. Admin only.
"""

from api.models import DonorCreate, DonorResponse, DonorUpdate
from api.routes.v1.crud import build_crud_router
from auth.policy import Resource
from ngo.models import Donor

router = build_crud_router(
    model=Donor,
    resource=Resource.donors,
    create_schema=DonorCreate,
    update_schema=DonorUpdate,
    response_schema=DonorResponse,
    label="Donor",
)
