"""
ngo/store.py -- SQLAlchemy-backed persistence layer for NGO records.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in ngo/models.py
remain the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. NGOStore is the repository. Every record
type is registered in _ENTITIES with its table and its sort/search column
whitelists; the repository methods take the dataclass type and look the rest
up there, so adding a record type is one table plus one registry line.
_row_to_record is the mapper.

Security: all queries use bound parameters. Column names used for sorting,
searching and updating come from the registry, never from raw input.

Usage:
    store = NGOStore("sqlite:///ngo.db")
    donor_id = store.create(Donor(name="Acme Trust"))
    donor = store.get(Donor, donor_id)
    rows, total = store.list_page(Donor, ListQuery(search="acme"))
    store.update(Donor, donor_id, phone="555-0100")
    store.delete(Donor, donor_id)
    store.close()
"""

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Optional, TypeVar

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine

from core.paging import ListQuery, fetch_page
from ngo.models import Attendance, Beneficiary, Donor, Employee, Event, Organization, Project, Report, Volunteer

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()


def _timestamps() -> list[Column]:
    return [
        Column("created_at", String(32), nullable=False),
        Column("updated_at", String(32), nullable=False),
    ]


_organizations = Table(
    "organizations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("registration_number", String(100), nullable=False, unique=True),
    Column("address", String(255), nullable=False),
    Column("contact_email", String(255), nullable=False),
    Column("contact_phone", String(50), nullable=False),
    Column("website", String(255)),
    *_timestamps(),
)

_donors = Table(
    "donors",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255)),
    Column("phone", String(50)),
    Column("address", String(255)),
    *_timestamps(),
)

_beneficiaries = Table(
    "beneficiaries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255)),
    Column("phone", String(50)),
    Column("address", String(255)),
    Column("gender", String(10)),
    Column("date_of_birth", String(10)),
    *_timestamps(),
)

_volunteers = Table(
    "volunteers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("task", String(255)),
    Column("availability", String(255)),
    *_timestamps(),
)

_employees = Table(
    "employees",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("position", String(100), nullable=False),
    Column("salary", Float),
    Column("date_of_joining", String(32), nullable=False),
    *_timestamps(),
)

_events = Table(
    "events",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("event_name", String(255), nullable=False),
    Column("date", String(32), nullable=False),
    Column("location", String(255)),
    *_timestamps(),
)

_projects = Table(
    "projects",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False),
    Column("start_date", String(32), nullable=False),
    Column("end_date", String(32), nullable=False),
    Column("created_by", Integer, nullable=False),
    *_timestamps(),
)

_reports = Table(
    "reports",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("beneficiary_id", Integer, nullable=False),
    Column("aid_amount", Float, nullable=False),
    Column("aid_date", String(32), nullable=False),
    Column("organization_id", Integer),
    *_timestamps(),
)

_attendance = Table(
    "volunteer_attendance",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("volunteer_id", Integer, nullable=False),
    Column("event_id", Integer, nullable=False),
    Column("status", Boolean, nullable=False),
    Column("date", String(32), nullable=False),
    Column("organization_id", Integer),
    *_timestamps(),
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Entity:
    table: Table
    sortable: tuple[str, ...]
    searchable: tuple[str, ...]


_ENTITIES: dict[type, _Entity] = {
    Organization: _Entity(
        _organizations,
        sortable=("id", "name", "registration_number", "created_at", "updated_at"),
        searchable=("name", "registration_number", "address", "contact_email"),
    ),
    Donor: _Entity(
        _donors,
        sortable=("id", "name", "email", "created_at", "updated_at"),
        searchable=("name", "email", "phone", "address"),
    ),
    Beneficiary: _Entity(
        _beneficiaries,
        sortable=("id", "name", "email", "date_of_birth", "created_at", "updated_at"),
        searchable=("name", "email", "phone", "address"),
    ),
    Volunteer: _Entity(
        _volunteers,
        sortable=("id", "user_id", "created_at", "updated_at"),
        searchable=("task", "availability"),
    ),
    Employee: _Entity(
        _employees,
        sortable=("id", "user_id", "position", "salary", "date_of_joining", "created_at", "updated_at"),
        searchable=("position",),
    ),
    Event: _Entity(
        _events,
        sortable=("id", "event_name", "date", "location", "created_at", "updated_at"),
        searchable=("event_name", "location"),
    ),
    Project: _Entity(
        _projects,
        sortable=("id", "name", "start_date", "end_date", "created_by", "created_at", "updated_at"),
        searchable=("name", "description"),
    ),
    Report: _Entity(
        _reports,
        sortable=("id", "beneficiary_id", "aid_amount", "aid_date", "created_at", "updated_at"),
        searchable=("aid_date",),
    ),
    Attendance: _Entity(
        _attendance,
        sortable=("id", "volunteer_id", "event_id", "status", "date", "created_at", "updated_at"),
        searchable=("date",),
    ),
}

_MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def _entity(model: type) -> _Entity:
    try:
        return _ENTITIES[model]
    except KeyError:
        raise TypeError(f"{model.__name__} is not a registered NGO record type") from None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode (per connection -- PRAGMAs are not inherited)."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class NGOStore:
    """Repository for every NGO record type in ngo/models.py."""

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def create(self, record) -> int:
        """Insert record and return its assigned ID.

        Raises sqlalchemy.exc.IntegrityError on unique-column conflicts
        (organization name / registration number).
        """
        entity = _entity(type(record))
        values = {f.name: getattr(record, f.name) for f in fields(record) if f.name not in _MANAGED_FIELDS}
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(entity.table.insert().values(**values, created_at=now, updated_at=now))
            conn.commit()
            return result.inserted_primary_key[0]

    def get(self, model: type[T], record_id: int) -> Optional[T]:
        """Look up one record by primary key. Returns None if not found."""
        table = _entity(model).table
        with self.engine.connect() as conn:
            row = conn.execute(table.select().where(table.c.id == record_id)).fetchone()
        return _row_to_record(model, row) if row is not None else None

    def list_page(
        self,
        model: type[T],
        query: ListQuery,
        organization_id: Optional[int] = None,
    ) -> tuple[list[T], int]:
        """Return one page of records plus the total match count.

        organization_id restricts the listing to one organization. Only valid
        for record types that carry the column (Report, Attendance).
        """
        entity = _entity(model)
        filters = []
        if organization_id is not None:
            filters.append(entity.table.c.organization_id == organization_id)
        with self.engine.connect() as conn:
            rows, total = fetch_page(
                conn,
                entity.table,
                query,
                sortable=entity.sortable,
                searchable=entity.searchable,
                filters=filters,
            )
        return [_row_to_record(model, r) for r in rows], total

    def update(self, model: type, record_id: int, **changes) -> bool:
        """Update fields on an existing record.

        Unknown or store-managed field names raise ValueError -- fail-fast.
        Returns True if a row was updated, False if record_id was not found.
        """
        allowed = {f.name for f in fields(model)} - _MANAGED_FIELDS
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown {model.__name__} fields: {sorted(unknown)!r}")
        table = _entity(model).table
        with self.engine.connect() as conn:
            result = conn.execute(
                table.update().where(table.c.id == record_id).values(**changes, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def delete(self, model: type, record_id: int) -> bool:
        """Permanently delete a record. Returns True if deleted, False if not found."""
        table = _entity(model).table
        with self.engine.connect() as conn:
            result = conn.execute(table.delete().where(table.c.id == record_id))
            conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_record(model: type[T], row) -> T:
    mapping = row._mapping
    return model(**{f.name: mapping[f.name] for f in fields(model)})
