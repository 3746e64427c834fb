"""
api/routes/v1/reports.py -- Aid reports, scoped to the filing organization.

Admins manage every report. An org_admin manages the reports of its own
organization only. beneficiary_id must reference an existing beneficiary.
"""

from api.models import ReportCreate, ReportResponse, ReportUpdate
from api.routes.v1.common import bad_request
from api.routes.v1.scoped import build_scoped_router
from auth.policy import Resource
from ngo.models import Beneficiary, Report
from ngo.store import NGOStore


def _check_beneficiary(store: NGOStore, values: dict) -> None:
    beneficiary_id = values.get("beneficiary_id")
    if beneficiary_id is not None and store.get(Beneficiary, beneficiary_id) is None:
        raise bad_request("unknown_beneficiary", f"Beneficiary {beneficiary_id} does not exist.")


router = build_scoped_router(
    model=Report,
    resource=Resource.reports,
    create_schema=ReportCreate,
    update_schema=ReportUpdate,
    response_schema=ReportResponse,
    label="Report",
    check_references=_check_beneficiary,
)
