"""
ngo/models.py -- Domain dataclasses for NGO records.

These are pure data containers with zero logic. Persistence lives in
ngo/store.py; who may touch which record is decided in auth/policy.py.

Dates are ISO 8601 strings (YYYY-MM-DD or full timestamps), matching how the
stores persist them. id / created_at / updated_at are None or "" before the
record is written and are always set by the store.

Report and Attendance carry organization_id: they are the organization-scoped
resources an org_admin may manage for its own organization.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Organization:
    """An NGO registered in the system. org_admin credentials point at one."""

    name: str
    registration_number: str
    address: str
    contact_email: str
    contact_phone: str
    website: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Donor:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Beneficiary:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None  # "male" | "female" | "other"
    date_of_birth: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Volunteer:
    """Volunteer assignment for a credential with role=volunteer."""

    user_id: int
    task: Optional[str] = None
    availability: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Employee:
    """Employment record for a credential. position is the job title, not the auth role."""

    user_id: int
    position: str
    date_of_joining: str
    salary: Optional[float] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Event:
    event_name: str
    date: str
    location: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Project:
    name: str
    description: str
    start_date: str
    end_date: str
    created_by: int
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Report:
    """Aid disbursed to a beneficiary, owned by the organization that filed it."""

    beneficiary_id: int
    aid_amount: float
    aid_date: str
    organization_id: Optional[int] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Attendance:
    """Volunteer attendance at an event. status True means present."""

    volunteer_id: int
    event_id: int
    status: bool
    date: str
    organization_id: Optional[int] = None
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""
