#!/usr/bin/env python3
"""
Ticket Tracker -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8000
  python main.py serve --reload
  python main.py create-user --email admin@example.com --password s3cret --role ADMIN

Environment variables (see core/config.py for the full list):
  SECRET_KEY     Required unless DEBUG=true. At least 32 characters.
  DATABASE_URL   SQLAlchemy URL shared by the user and ticket stores.
  CLIENT_URL     Browser origin allowed by CORS.
"""

import argparse
import sys

from core.config import get_settings


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def _create_user(args: argparse.Namespace) -> int:
    """Insert an account straight into the credential store.

    This is how the first ADMIN is made when ALLOW_ADMIN_SIGNUP is off.
    """
    from auth.accounts import register_user
    from auth.store import UserStore
    from auth.tokens import MAX_PASSWORD_BYTES
    from core.errors import TrackerError

    if not args.password or len(args.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        print(f"  [!] Password must be 1-{MAX_PASSWORD_BYTES} bytes.")
        return 1

    store = UserStore(get_settings().database_url)
    try:
        user = register_user(store, args.email, args.password, role=args.role, allow_admin=True)
    except TrackerError as e:
        print(f"  [!] {e.message}")
        return 1
    finally:
        store.close()
    print(f"  Created {user.role} {user.email} (id {user.id})")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Ticket Tracker -- support tickets with role-gated administration.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the JSON API under uvicorn")
    serve.add_argument("--host", help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, help="Bind port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development)")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-user", help="Create an account directly in the database")
    create.add_argument("--email", required=True)
    create.add_argument("--password", required=True)
    create.add_argument("--role", choices=["USER", "ADMIN"], default="USER")
    create.set_defaults(func=_create_user)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
