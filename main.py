#!/usr/bin/env python3
"""
GalleryGate -- operator CLI for accounts and the audit log.

Usage:
  python main.py set-admin ADMIN_NAME ADMIN_PASSWORD
  python main.py add-user alice s3cret --upload
  python main.py list-users
  python main.py show-logs --limit 20

Environment variables (see core/config.py):
  DATABASE_URL  SQLAlchemy URL of the gallery database (default sqlite:///gallerygate.db)
  SECRET_KEY    Required unless DEBUG=true
"""

import argparse
import sys

from sqlalchemy.exc import IntegrityError

from audit.store import AuditLog
from auth.config_store import ConfigStore
from auth.models import User
from auth.passwords import hash_password
from auth.store import UserStore


def _set_admin(args: argparse.Namespace) -> int:
    configs = ConfigStore()
    try:
        configs.set_admin_credentials(args.username, args.password)
    except ValueError as e:
        print(f"  [!] {e}")
        return 1
    finally:
        configs.close()
    print("  Admin credentials saved.")
    return 0


def _add_user(args: argparse.Namespace) -> int:
    users = UserStore()
    try:
        user_id = users.create_user(
            User(
                username=args.username,
                hashed_password=hash_password(args.password),
                upload=args.upload,
                lock=args.lock,
            )
        )
    except IntegrityError:
        print(f"  [!] User '{args.username}' already exists.")
        return 1
    except ValueError as e:
        print(f"  [!] {e}")
        return 1
    finally:
        users.close()
    print(f"  Created user '{args.username}' (id {user_id}).")
    return 0


def _list_users(args: argparse.Namespace) -> int:
    users = UserStore()
    try:
        rows = users.list_users()
    finally:
        users.close()
    if not rows:
        print("  No users.")
        return 0
    for user in rows:
        flags = ", ".join(name for name, on in (("upload", user.upload), ("lock", user.lock)) if on) or "-"
        print(f"  {user.id:>5}  {user.username:<30} {flags}")
    return 0


def _show_logs(args: argparse.Namespace) -> int:
    audit = AuditLog()
    try:
        entries = audit.list_logs(args.limit)
    finally:
        audit.close()
    for entry in entries:
        print(f"  {entry.created_at}  {entry.type:<6} {entry.function}: {entry.text}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gallerygate",
        description="Manage GalleryGate accounts and inspect the audit log.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("set-admin", help="Set the admin username and password")
    p.add_argument("username")
    p.add_argument("password")
    p.set_defaults(func=_set_admin)

    p = sub.add_parser("add-user", help="Create a regular user")
    p.add_argument("username")
    p.add_argument("password")
    p.add_argument("--upload", action="store_true", help="Allow the user to create albums")
    p.add_argument("--lock", action="store_true", help="Prevent the user from changing their password")
    p.set_defaults(func=_add_user)

    p = sub.add_parser("list-users", help="List regular users")
    p.set_defaults(func=_list_users)

    p = sub.add_parser("show-logs", help="Print the newest audit log entries")
    p.add_argument("--limit", type=int, default=50)
    p.set_defaults(func=_show_logs)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
