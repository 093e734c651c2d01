"""
Create a user (e.g. first admin). Run from project root:
  python -m quickdesk.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m quickdesk.scripts.create_user "Admin User" admin@quickdesk.com your-secure-password admin
"""
import argparse
import sys

from quickdesk.core.database import SessionLocal
from quickdesk.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
)
from quickdesk.models.base import utcnow
from quickdesk.schemas.user import ROLE_VALUES, normalize_email
from quickdesk.services.store import SqlStore
from quickdesk.services.users import avatar_url


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a QuickDesk user with any role.")
    parser.add_argument("name", help=f"Display name ({NAME_MIN_LEN}-{NAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address (stored lower-cased)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(ROLE_VALUES))
    args = parser.parse_args()

    name = args.name.strip()
    if not (NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN):
        print("Invalid name length.", file=sys.stderr)
        return 1
    email = normalize_email(args.email)
    if not email or "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        store = SqlStore(db)
        if store.email_taken(email):
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        store.add_user(
            name=name,
            email=email,
            password_hash=hash_password(args.password),
            role=args.role,
            avatar=avatar_url(name),
            created_at=utcnow(),
        )
        store.commit()
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
