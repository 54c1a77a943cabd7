#!/usr/bin/env python3
"""
StaffLogin -- administration CLI.

Usage:
  python main.py add-staff 12345678 jperez --nombres "Juan" --apellidos "Pérez Soto" --genero M
  python main.py deactivate 12345678
  python main.py activate 12345678
  python main.py block-role --until 1767225600
  python main.py block-role --until 0          # no end date
  python main.py block-role --hours 2
  python main.py unblock-role
  python main.py serve --port 8000

Environment variables:
  DATABASE_URL  SQLAlchemy URL of the staff database (default: sqlite:///./stafflogin.db)
  SECRET_KEY    Token signing key (required unless DEBUG=true)
"""

import argparse
import getpass
import sys
import time
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.models import PersonalAdministrativo
from auth.store import StaffStore
from core.config import get_settings
from core.models import Genero, RolesSistema

_ROLE = RolesSistema.PersonalAdministrativo.value


def _read_password() -> Optional[str]:
    """Prompt twice for a password. Returns None if the entries differ or are empty."""
    first = getpass.getpass("  Password: ")
    second = getpass.getpass("  Repeat password: ")
    if not first or first != second:
        return None
    if len(first.encode("utf-8")) > 72:
        print("  [!] Passwords longer than 72 bytes are truncated by bcrypt.")
    return first


def _cmd_add_staff(store: StaffStore, args: argparse.Namespace) -> int:
    from auth.tokens import hash_password

    password = _read_password()
    if password is None:
        print("  [!] Passwords are empty or do not match.")
        return 1

    personal = PersonalAdministrativo(
        dni=args.dni,
        nombre_usuario=args.username,
        hashed_password=hash_password(password),
        nombres=args.nombres,
        apellidos=args.apellidos,
        genero=args.genero,
        estado=not args.inactive,
        google_drive_foto_id=args.foto_id,
        celular=args.celular,
        cargo=args.cargo,
    )
    try:
        store.create_personal(personal)
    except IntegrityError:
        print(f"  [!] DNI '{args.dni}' or username '{args.username}' already exists.")
        return 1
    print(f"  Created {args.username} ({args.dni}).")
    return 0


def _cmd_set_active(store: StaffStore, args: argparse.Namespace, active: bool) -> int:
    if not store.set_active(args.dni, active):
        print(f"  [!] No staff account with DNI '{args.dni}'.")
        return 1
    print(f"  {args.dni} {'activated' if active else 'deactivated'}.")
    return 0


def _cmd_block_role(store: StaffStore, args: argparse.Namespace) -> int:
    if args.hours is not None:
        until = int(time.time()) + int(args.hours * 3600)
    else:
        until = args.until
    store.set_role_block(_ROLE, until)
    if until <= 0:
        print("  Personal Administrativo blocked with no end date.")
    else:
        print(f"  Personal Administrativo blocked until {until}.")
    return 0


def _cmd_unblock_role(store: StaffStore, args: argparse.Namespace) -> int:
    if store.clear_role_block(_ROLE):
        print("  Personal Administrativo unblocked.")
    else:
        print("  Personal Administrativo was not blocked.")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stafflogin",
        description="Manage Personal Administrativo accounts and run the login API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db",
        metavar="URL",
        default=None,
        help="SQLAlchemy database URL (default: DATABASE_URL setting)",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    add = sub.add_parser("add-staff", help="Create a staff account (password is prompted)")
    add.add_argument("dni", help="8-digit DNI")
    add.add_argument("username", help="Login username")
    add.add_argument("--nombres", required=True)
    add.add_argument("--apellidos", required=True)
    add.add_argument("--genero", required=True, choices=[g.value for g in Genero])
    add.add_argument("--foto-id", default=None, help="Google Drive photo ID")
    add.add_argument("--celular", default=None)
    add.add_argument("--cargo", default=None)
    add.add_argument("--inactive", action="store_true", help="Create the account disabled")

    deactivate = sub.add_parser("deactivate", help="Disable a staff account")
    deactivate.add_argument("dni")
    activate = sub.add_parser("activate", help="Re-enable a staff account")
    activate.add_argument("dni")

    block = sub.add_parser("block-role", help="Block every Personal Administrativo login")
    when = block.add_mutually_exclusive_group(required=True)
    when.add_argument("--until", type=int, metavar="UNIX_TS", help="Unlock time; 0 means no end date")
    when.add_argument("--hours", type=float, help="Block for this many hours from now")

    sub.add_parser("unblock-role", help="Lift the Personal Administrativo block")

    serve = sub.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "serve":
        import uvicorn

        uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    store = StaffStore(args.db or get_settings().database_url)
    try:
        if args.command == "add-staff":
            return _cmd_add_staff(store, args)
        if args.command == "deactivate":
            return _cmd_set_active(store, args, False)
        if args.command == "activate":
            return _cmd_set_active(store, args, True)
        if args.command == "block-role":
            return _cmd_block_role(store, args)
        return _cmd_unblock_role(store, args)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
