"""CLI commands for the Health Wallet API."""

import argparse
import getpass
import sys
from contextlib import contextmanager
from typing import Iterator

import bcrypt
from sqlalchemy.orm import Session

from app.config import settings
from app.database import Database
from app.models.user import User
from app.schemas.auth import is_valid_email, normalize_email
from app.services.auth.local_provider import MAX_PASSWORD_BYTES, password_too_long


@contextmanager
def open_session() -> Iterator[Session]:
    """Session on the configured database, creating tables if needed. Disposes the engine on exit."""
    database = Database(settings.database_url)
    try:
        database.create_all()
        session = database.session()
        try:
            yield session
        finally:
            session.close()
    finally:
        database.dispose()


def init_db() -> None:
    """Create any missing tables in the configured database."""
    database = Database(settings.database_url)
    try:
        database.create_all()
        print(f"Database initialized: {database.url}")
    finally:
        database.dispose()


def create_user(email: str, name: str, password: str | None = None) -> None:
    """Create a user account."""
    email = normalize_email(email)
    if not is_valid_email(email):
        print(f"Error: '{email}' is not a valid email address.")
        sys.exit(1)

    with open_session() as db:
        # Check if email already exists
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"Error: User with email '{email}' already exists.")
            sys.exit(1)

        # Get password if not provided
        if not password:
            password = getpass.getpass("Password: ")
            password_confirm = getpass.getpass("Confirm password: ")
            if password != password_confirm:
                print("Error: Passwords do not match.")
                sys.exit(1)

        if len(password) < settings.password_min_length:
            print(f"Error: Password must be at least {settings.password_min_length} characters.")
            sys.exit(1)
        if password_too_long(password):
            print(f"Error: Password must be at most {MAX_PASSWORD_BYTES} bytes.")
            sys.exit(1)

        password_hash = bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt()
        ).decode("utf-8")
        user = User(email=email, password_hash=password_hash, name=name.strip())
        db.add(user)
        db.commit()

        print(f"User created successfully: {email}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Health Wallet CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")

    create_user_parser = subparsers.add_parser("create-user", help="Create a user")
    create_user_parser.add_argument("--email", required=True, help="Email address")
    create_user_parser.add_argument("--name", required=True, help="Display name")
    create_user_parser.add_argument(
        "--password", help="Password (will prompt if not provided)"
    )

    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_db()
    elif args.command == "create-user":
        create_user(args.email, args.name, args.password)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
