#!/usr/bin/env python3
"""
NGO Manager -- administrative command line.

Usage:
  python main.py create-admin --username alice --password 's3cret-pass'
  python main.py create-admin --username bob --password 's3cret-pass' --org-id 3

create-admin writes an admin credential straight into DATABASE_URL. Use it to
recover a deployment that has lost its last admin, or to seed one without
going through POST /auth/register. With --org-id the account is an org_admin
of that organization instead of a global admin.

Environment variables:
  DATABASE_URL  SQLAlchemy URL of the database (default: ngomanager.db next to this file)
"""

import argparse
import sys
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.models import Credential, Role
from auth.passwords import hash_password
from auth.store import CredentialStore
from core.config import get_settings
from ngo.models import Organization
from ngo.store import NGOStore

_MIN_PASSWORD_LENGTH = 8


def create_admin(database_url: str, username: str, password: str, org_id: Optional[int] = None) -> int:
    """Create the credential and return its ID.

    Raises ValueError for input the API would also reject (short password,
    password over 72 bytes, unknown organization) and IntegrityError for a duplicate username.
    """
    if len(password) < _MIN_PASSWORD_LENGTH:
        raise ValueError(f"password must be at least {_MIN_PASSWORD_LENGTH} characters")

    role = Role.admin
    if org_id is not None:
        ngo_store = NGOStore(database_url)
        try:
            if ngo_store.get(Organization, org_id) is None:
                raise ValueError(f"organization {org_id} does not exist")
        finally:
            ngo_store.close()
        role = Role.org_admin

    store = CredentialStore(database_url)
    try:
        return store.create(
            Credential(
                username=username,
                password_hash=hash_password(password),
                role=role,
                organization_id=org_id,
            )
        )
    finally:
        store.close()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="ngo-manager",
        description="Administrative commands for NGO Manager.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create-admin --username alice --password 's3cret-pass'
  DATABASE_URL=sqlite:///prod.db python main.py create-admin --username ops --password 'long-pass'
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create-admin", help="Create an admin account directly in the database")
    create.add_argument("--username", required=True, help="Login name for the new account")
    create.add_argument("--password", required=True, help=f"Password (at least {_MIN_PASSWORD_LENGTH} characters)")
    create.add_argument(
        "--org-id",
        type=int,
        default=None,
        metavar="ID",
        help="Make the account an org_admin of this organization instead of a global admin",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    try:
        user_id = create_admin(settings.database_url, args.username, args.password, args.org_id)
    except ValueError as e:
        print(f"  [!] {e}", file=sys.stderr)
        return 1
    except IntegrityError:
        print(f"  [!] A user named '{args.username}' already exists.", file=sys.stderr)
        return 1

    kind = "org_admin" if args.org_id is not None else "admin"
    print(f"Created {kind} '{args.username}' (id {user_id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
