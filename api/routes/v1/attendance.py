"""
api/routes/v1/attendance.py -- Volunteer attendance at events, scoped by organization.
"""

from api.models import AttendanceCreate, AttendanceResponse, AttendanceUpdate
from api.routes.v1.common import bad_request
from api.routes.v1.scoped import build_scoped_router
from auth.policy import Resource
from ngo.models import Attendance, Event, Volunteer
from ngo.store import NGOStore


def _check_volunteer_and_event(store: NGOStore, values: dict) -> None:
    volunteer_id = values.get("volunteer_id")
    if volunteer_id is not None and store.get(Volunteer, volunteer_id) is None:
        raise bad_request("unknown_volunteer", f"Volunteer {volunteer_id} does not exist.")
    event_id = values.get("event_id")
    if event_id is not None and store.get(Event, event_id) is None:
        raise bad_request("unknown_event", f"Event {event_id} does not exist.")


router = build_scoped_router(
    model=Attendance,
    resource=Resource.attendance,
    create_schema=AttendanceCreate,
    update_schema=AttendanceUpdate,
    response_schema=AttendanceResponse,
    label="Attendance record",
    check_references=_check_volunteer_and_event,
)
