"""
Create a user (e.g. the first admin). Run from project root:
  python -m bugsage.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m bugsage.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import sys

from bugsage.core.config import get_settings
from bugsage.core.database import SessionLocal
from bugsage.core.errors import BugSageError
from bugsage.models.user import USER_ROLES
from bugsage.services.users import create_account, validate_new_account


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a BugSage user without going through registration.")
    parser.add_argument("username", help="Username (at most 50 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (at least PASSWORD_MIN_LENGTH chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(USER_ROLES))
    args = parser.parse_args()

    username = args.username.strip()
    email = args.email.strip()

    db = SessionLocal()
    try:
        validate_new_account(username, email, args.password, get_settings())
        create_account(db, username, email, args.password, role=args.role)
    except BugSageError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
