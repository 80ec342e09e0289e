#!/usr/bin/env python3
"""
Threat Intel backend -- command line entry point.

Usage:
  python main.py serve
  python main.py serve --host 127.0.0.1 --port 9000 --reload
  python main.py create-user admin@example.com --role admin
  python main.py create-user analyst@example.com --role analyst --password s3cret!

Environment variables (see core/config.py for the full list):
  SECRET_KEY     Token signing key, at least 32 characters. Required unless DEBUG=true.
  DATABASE_URL   SQLAlchemy URL shared by the user and order stores.
  DEBUG          "true" auto-generates a throwaway SECRET_KEY for local runs.

create-user is how the first admin account gets made outside the HTTP API.
When --password is omitted the password is read from the terminal.
"""

import argparse
import getpass
import sys

from auth.credentials import create_user
from auth.roles import Role
from auth.store import UserStore
from core.config import get_settings
from core.errors import HashingError


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def _create_user(args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        print("  [!] Password must be at least 6 characters.")
        return 1

    store = UserStore(get_settings().database_url)
    try:
        if store.find_by_email(args.email) is not None:
            print(f"  [!] A user with email '{args.email}' already exists.")
            return 1
        try:
            user = create_user(args.email, password, Role(args.role))
        except HashingError as e:
            print(f"  [!] Could not hash password: {e}")
            return 1
        store.save(user)
    finally:
        store.close()

    print(f"  Created {user.role.value} {user.email} ({user.id})")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="threat-intel",
        description="Threat intelligence ordering backend.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting).")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting).")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development only).")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-user", help="Create an account directly in the database.")
    create.add_argument("email")
    create.add_argument("--role", choices=[r.value for r in Role], default=Role.viewer.value)
    create.add_argument("--password", default=None, help="Omit to be prompted.")
    create.set_defaults(func=_create_user)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
