"""
auth/store.py -- SQLAlchemy Core persistence layer for credential records.

Pattern: Repository + Data Mapper (same as ngo/store.py).
CredentialStore is the repository; _row_to_credential is the mapper.
Route and dependency code never touches SQL directly.

Contract used by the auth core:
  get_by_id(id)             -- point lookup for the authentication dependency
  get_by_username(name)     -- point lookup for login
Both return None when the record does not exist. Nothing here caches -- every
call is a fresh read, so role changes and deletions are visible immediately.

Security:
  All queries use bound parameters. No f-strings in SQL.
  password_hash is written and read here but never projected into a response;
  api/models.py has no field for it.

Layer rule: no imports from api/ or ngo/. core/ (kernel) is allowed.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select, text
from sqlalchemy.engine import Engine

from auth.models import Credential, Role
from core.paging import ListQuery, fetch_page

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default=Role.volunteer.value),
    Column("organization_id", Integer),
    Column("email", String(255), unique=True),
    Column("phone", String(50)),
    Column("first_name", String(100)),
    Column("last_name", String(100)),
    Column("address", String(255)),
    Column("city", String(100)),
    Column("country", String(100)),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

SORTABLE_COLUMNS = ("id", "username", "role", "email", "first_name", "last_name", "created_at", "updated_at")
SEARCHABLE_COLUMNS = ("username", "email", "first_name", "last_name", "city", "country")

# Fields update() accepts. id and both timestamps are managed by the store.
_MUTABLE_FIELDS = frozenset(
    {
        "username",
        "password_hash",
        "role",
        "organization_id",
        "email",
        "phone",
        "first_name",
        "last_name",
        "address",
        "city",
        "country",
    }
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CredentialStore:
    """Repository for Credential records.

    Usage:
        store = CredentialStore()
        store.create(Credential(username="admin", role=Role.admin, password_hash=hash_password("secret")))
        cred = store.get_by_username("admin")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_by_id(self, user_id: int) -> Credential | None:
        """Look up a credential by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_credential(row) if row is not None else None

    def get_by_username(self, username: str) -> Credential | None:
        """Look up a credential by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_credential(row) if row is not None else None

    def has_users(self) -> bool:
        """Return True if at least one credential exists.

        POST /auth/register uses this to allow the very first admin account
        to be created without authentication.
        """
        with self.engine.connect() as conn:
            result = conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
        return (result or 0) > 0

    def count_admins(self) -> int:
        """Return the number of global admin accounts.

        Used to refuse deleting or demoting the last admin.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                select(func.count()).select_from(_users).where(_users.c.role == Role.admin.value)
            ).scalar()
        return result or 0

    def list_page(self, query: ListQuery, role: Role | None = None) -> tuple[list[Credential], int]:
        """Return one page of credentials plus the total match count.

        role narrows the listing (GET /api/admins lists only admins).
        """
        filters = [_users.c.role == role.value] if role is not None else []
        with self.engine.connect() as conn:
            rows, total = fetch_page(
                conn,
                _users,
                query,
                sortable=SORTABLE_COLUMNS,
                searchable=SEARCHABLE_COLUMNS,
                filters=filters,
            )
        return [_row_to_credential(r) for r in rows], total

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, credential: Credential) -> int:
        """Insert a new credential and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the username (or email)
        already exists. Routes turn that into 409.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=credential.username,
                    password_hash=credential.password_hash,
                    role=Role(credential.role).value,
                    organization_id=credential.organization_id,
                    email=credential.email,
                    phone=credential.phone,
                    first_name=credential.first_name,
                    last_name=credential.last_name,
                    address=credential.address,
                    city=credential.city,
                    country=credential.country,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def update(self, user_id: int, **fields) -> bool:
        """Update mutable fields on an existing credential.

        Unknown field names raise ValueError rather than being silently
        dropped -- fail-fast. role may be passed as Role or str.

        Returns True if a row was updated, False if user_id was not found.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown credential fields: {sorted(unknown)!r}")
        if "role" in fields:
            fields["role"] = Role(fields["role"]).value
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete(self, user_id: int) -> bool:
        """Permanently delete a credential. Returns True if deleted, False if not found.

        Outstanding tokens for the subject stop working on their next use:
        the authentication dependency re-reads the record on every request.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_credential(row) -> Credential:
    return Credential(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        role=Role(row.role),
        organization_id=row.organization_id,
        email=row.email,
        phone=row.phone,
        first_name=row.first_name,
        last_name=row.last_name,
        address=row.address,
        city=row.city,
        country=row.country,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
