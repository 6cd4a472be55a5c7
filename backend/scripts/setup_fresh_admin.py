"""
Setup Admin Account
===================
Creates an admin account, or promotes an existing user to admin.

Usage (from the project root, with DATABASE_URL set):
    python backend/scripts/setup_fresh_admin.py --email admin@clinic.com
    python backend/scripts/setup_fresh_admin.py --email jane.doe@clinic.com --name "Jane Doe"
    python backend/scripts/setup_fresh_admin.py --email admin@clinic.com --password 'S3cret!'

Flags:
    --email     EMAIL   (required) The admin's email address
    --name      NAME    (optional) Display name. If omitted, derived from email.
    --password  PASS    (optional) Initial password. If omitted, one is generated
                        and printed once.
    --create-tables     Create missing tables before seeding.
"""

import argparse
import secrets
import sys

from youclinic.core.database import SessionLocal, init_db
from youclinic.core.security import hash_password
from youclinic.core.transactions import transaction
from youclinic.models.user import User, UserRole, default_name_from_email


def generate_temp_password() -> str:
    """Generate a readable temporary password (12 chars URL-safe)."""
    return secrets.token_urlsafe(9)


def setup_admin(email: str, name: str | None, password: str | None) -> tuple[User, str | None]:
    """
    Ensure ``email`` is an admin.

    Returns the user and the plain password when one was set, else None.
    """
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        with transaction(db):
            if user is None:
                password = password or generate_temp_password()
                user = User(
                    email=email,
                    name=name or default_name_from_email(email),
                    password_hash=hash_password(password),
                    role=UserRole.ADMIN.value,
                )
                db.add(user)
            else:
                user.role = UserRole.ADMIN.value
                if name:
                    user.name = name
                if password:
                    user.password_hash = hash_password(password)
        return user, password
    finally:
        db.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or promote a YouClinic CRM admin.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default=None)
    parser.add_argument("--password", default=None)
    parser.add_argument("--create-tables", action="store_true")
    args = parser.parse_args()

    if args.create_tables:
        init_db()

    user, password = setup_admin(args.email.strip().lower(), args.name, args.password)

    print("=" * 60)
    print(f"  Admin ready: {user.email} ({user.name})")
    if password:
        print(f"  Password:    {password}")
        print("  Store it now; it will not be shown again.")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
