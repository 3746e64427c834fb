"""
api/routes/v1/events.py -- Event records. Admin only.
"""

from api.models import EventCreate, EventResponse, EventUpdate
from api.routes.v1.crud import build_crud_router
from auth.policy import Resource
from ngo.models import Event

router = build_crud_router(
    model=Event,
    resource=Resource.events,
    create_schema=EventCreate,
    update_schema=EventUpdate,
    response_schema=EventResponse,
    label="Event",
)
