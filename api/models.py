"""
API request and response models for NGO Manager REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
ngo/models.py, which own the internal domain representation. Route handlers
map between the two; response models use from_attributes so a dataclass can be
validated straight into its response shape.

Separation of concerns: domain models = domain truth; api/ models = API contract.

Security: UserResponse has no password field. A credential's hash cannot be
serialized even if a handler passes the full Credential object through.
"""

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import Role
from auth.passwords import MAX_PASSWORD_BYTES

T = TypeVar("T")

_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class GenderEnum(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class OrderEnum(str, Enum):
    asc = "asc"
    desc = "desc"


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Uniform error envelope for every non-2xx response except login."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


class PageMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_items: int
    total_pages: int
    current_page: int


class Page(BaseModel, Generic[T]):
    """Paginated list response: {"data": [...], "meta": {...}}."""

    data: list[T]
    meta: PageMeta


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=72)


class LoginResponse(BaseModel):
    """Login result. Same shape on success and failure: {auth, token}."""

    auth: bool
    token: Optional[str] = None


def _check_password_bytes(value: Optional[str]) -> Optional[str]:
    """Reject passwords bcrypt cannot hash. max_length counts characters, not bytes."""
    if value is not None and len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


class _ProfileFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    address: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)


class RegisterRequest(_ProfileFields):
    """Request body for POST /auth/register and POST /api/users."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8, max_length=72)
    role: Role = Role.volunteer
    organization_id: Optional[int] = None

    check_password_bytes = field_validator("password")(_check_password_bytes)


class AdminCreate(_ProfileFields):
    """Request body for POST /api/admins. Role is implied."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8, max_length=72)

    check_password_bytes = field_validator("password")(_check_password_bytes)


class UserUpdate(_ProfileFields):
    """Request body for PUT /api/users/{id} and PUT /api/admins/{id}.

    role and organization_id may only be changed by an admin.
    """

    username: Optional[str] = Field(default=None, min_length=1, max_length=255)
    password: Optional[str] = Field(default=None, min_length=8, max_length=72)
    role: Optional[Role] = None
    organization_id: Optional[int] = None

    check_password_bytes = field_validator("password")(_check_password_bytes)


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    username: str
    role: Role
    organization_id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    created_at: str
    updated_at: str


class MeResponse(BaseModel):
    """Principal as the server sees it (live role and organization), plus the caller's profile."""

    user_id: int
    username: str
    role: Role
    organization_id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------


class OrganizationCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    registration_number: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1, max_length=255)
    contact_email: str = Field(min_length=3, max_length=255)
    contact_phone: str = Field(min_length=1, max_length=50)
    website: Optional[str] = Field(default=None, max_length=255)


class OrganizationUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    registration_number: Optional[str] = Field(default=None, min_length=1, max_length=100)
    address: Optional[str] = Field(default=None, min_length=1, max_length=255)
    contact_email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    contact_phone: Optional[str] = Field(default=None, min_length=1, max_length=50)
    website: Optional[str] = Field(default=None, max_length=255)


class OrganizationResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    registration_number: str
    address: str
    contact_email: str
    contact_phone: str
    website: Optional[str]
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Donors
# ---------------------------------------------------------------------------


class DonorCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=255)


class DonorUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=255)


class DonorResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Beneficiaries
# ---------------------------------------------------------------------------


class BeneficiaryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=255)
    gender: Optional[GenderEnum] = None
    date_of_birth: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)


class BeneficiaryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=255)
    gender: Optional[GenderEnum] = None
    date_of_birth: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)


class BeneficiaryResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    gender: Optional[str]
    date_of_birth: Optional[str]
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Volunteers and employees
# ---------------------------------------------------------------------------


class VolunteerCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: int
    task: Optional[str] = Field(default=None, max_length=255)
    availability: Optional[str] = Field(default=None, max_length=255)


class VolunteerUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    task: Optional[str] = Field(default=None, max_length=255)
    availability: Optional[str] = Field(default=None, max_length=255)


class VolunteerResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    user_id: int
    task: Optional[str]
    availability: Optional[str]
    created_at: str
    updated_at: str


class EmployeeCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: int
    position: str = Field(min_length=1, max_length=100)
    date_of_joining: str = Field(pattern=_DATE_PATTERN)
    salary: Optional[float] = Field(default=None, ge=0)


class EmployeeUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    position: Optional[str] = Field(default=None, min_length=1, max_length=100)
    date_of_joining: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)
    salary: Optional[float] = Field(default=None, ge=0)


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    user_id: int
    position: str
    salary: Optional[float]
    date_of_joining: str
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Events and projects
# ---------------------------------------------------------------------------


class EventCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    event_name: str = Field(min_length=1, max_length=255)
    date: str = Field(pattern=_DATE_PATTERN)
    location: Optional[str] = Field(default=None, max_length=255)


class EventUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    event_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)
    location: Optional[str] = Field(default=None, max_length=255)


class EventResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    event_name: str
    date: str
    location: Optional[str]
    created_at: str
    updated_at: str


class ProjectCreate(BaseModel):
    """created_by defaults to the calling admin when omitted."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=5000)
    start_date: str = Field(pattern=_DATE_PATTERN)
    end_date: str = Field(pattern=_DATE_PATTERN)
    created_by: Optional[int] = None


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    start_date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)
    end_date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    description: str
    start_date: str
    end_date: str
    created_by: int
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Organization-scoped: reports and volunteer attendance
# ---------------------------------------------------------------------------


class ReportCreate(BaseModel):
    """organization_id is honoured for admins only; org_admins file into their own organization."""

    beneficiary_id: int
    aid_amount: float = Field(ge=0)
    aid_date: str = Field(pattern=_DATE_PATTERN)
    organization_id: Optional[int] = None


class ReportUpdate(BaseModel):
    beneficiary_id: Optional[int] = None
    aid_amount: Optional[float] = Field(default=None, ge=0)
    aid_date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)


class ReportResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    beneficiary_id: int
    aid_amount: float
    aid_date: str
    organization_id: Optional[int]
    created_at: str
    updated_at: str


class AttendanceCreate(BaseModel):
    volunteer_id: int
    event_id: int
    status: bool
    date: str = Field(pattern=_DATE_PATTERN)
    organization_id: Optional[int] = None


class AttendanceUpdate(BaseModel):
    status: Optional[bool] = None
    date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    volunteer_id: int
    event_id: int
    status: bool
    date: str
    organization_id: Optional[int]
    created_at: str
    updated_at: str
