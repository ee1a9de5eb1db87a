"""Command-line interface for operating the backend.

Subcommands:

- ``serve`` -- run the HTTP API with uvicorn (same as ``python -m kolhub.app``).
- ``init-db`` -- create the database schema.
- ``create-user`` -- create an account directly in the database, e.g. the
  first ADMIN, which cannot be created over the API without one.

Usage::

    kolhub init-db --db data/kolhub.db
    kolhub create-user --username admin --email admin@example.com \\
        --password 'S3cret!pass' --role ADMIN
    kolhub serve
"""

from __future__ import annotations

import argparse
from datetime import timedelta
from pathlib import Path

from kolhub.app import main as serve_main
from kolhub.auth import PasswordHasher, TokenService
from kolhub.config import get_settings
from kolhub.domain.types import ROLE_VALUES
from kolhub.handlers import UserHandler
from kolhub.persistence import Gateway, close_db, init_db


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with its subcommands.

    Returns:
        A configured :class:`argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(prog="kolhub", description="KOL campaign backend")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Run the HTTP API")

    init_db_parser = subparsers.add_parser("init-db", help="Create the database schema")
    init_db_parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="Path to the database (default: DATABASE_PATH setting)",
    )

    user_parser = subparsers.add_parser("create-user", help="Create a user account")
    user_parser.add_argument("--username", required=True)
    user_parser.add_argument("--email", required=True)
    user_parser.add_argument("--password", required=True)
    user_parser.add_argument("--role", choices=ROLE_VALUES, default="ADMIN")
    user_parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="Path to the database (default: DATABASE_PATH setting)",
    )

    return parser


def _db_path(arg: str | None) -> Path:
    db_path = Path(arg) if arg else get_settings().database_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


def run_init_db(db: str | None) -> int:
    db_path = _db_path(db)
    close_db(init_db(db_path))
    print(f"Database ready at {db_path}")
    return 0


def run_create_user(db: str | None, username: str, email: str, password: str, role: str) -> int:
    """Create one account with the same checks as ``POST /api/user``.

    Returns:
        Process exit code: 0 on success, 1 when the account was rejected.
    """
    settings = get_settings()
    conn = init_db(_db_path(db))
    try:
        users = UserHandler(
            Gateway(conn),
            PasswordHasher(rounds=settings.bcrypt_rounds),
            TokenService(
                secret=settings.jwt_secret.get_secret_value(),
                algorithm=settings.jwt_algorithm,
                expiration=timedelta(hours=settings.jwt_expiration_hours),
            ),
        )
        envelope = users.create(
            {"username": username, "email": email, "password": password, "role": role}
        )
    finally:
        close_db(conn)

    print(envelope.message)
    return 0 if envelope.success else 1


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and dispatch to the chosen subcommand."""
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        serve_main()
        return 0
    if args.command == "init-db":
        return run_init_db(args.db)
    return run_create_user(args.db, args.username, args.email, args.password, args.role)


if __name__ == "__main__":
    raise SystemExit(main())
