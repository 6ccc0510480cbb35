"""Administrative command line for the portal database."""

from __future__ import annotations

import argparse
import asyncio
import sys
from getpass import getpass
from typing import Sequence

from .config import configure_logging, get_settings
from .database import build_engine, build_sessionmaker
from .login_attempts import recent_login_attempts
from .main import create_tables
from .models import Role
from .passwords import hash_password
from .schemas import PASSWORD_MIN_LENGTH, is_company_email
from .users import create_user, get_user_by_email, get_user_by_username, set_active


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="EIL login portal administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the portal tables")

    create_parser = subparsers.add_parser("create-user", help="Create a portal account")
    create_parser.add_argument("--username", required=True)
    create_parser.add_argument("--email", required=True)
    create_parser.add_argument("--role", required=True, choices=[role.value for role in Role])
    create_parser.add_argument("--first-name", required=True)
    create_parser.add_argument("--last-name", required=True)
    create_parser.add_argument(
        "--password",
        help="Account password (prompted for when omitted)",
    )

    deactivate_parser = subparsers.add_parser("deactivate", help="Block an account from logging in")
    deactivate_parser.add_argument("username")

    activate_parser = subparsers.add_parser("activate", help="Re-enable a deactivated account")
    activate_parser.add_argument("username")

    attempts_parser = subparsers.add_parser("login-attempts", help="Show recent login attempts")
    attempts_parser.add_argument("--limit", type=int, default=20)

    return parser.parse_args(argv)


def _read_password(provided: str | None) -> str:
    if provided:
        return provided
    password = getpass("Password: ")
    if password != getpass("Confirm password: "):
        raise SystemExit("Passwords do not match")
    return password


async def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    engine = build_engine(settings.database_url)
    session_factory = build_sessionmaker(engine)
    try:
        await create_tables(engine)
        if args.command == "init-db":
            print(f"Database ready at {settings.database_url}")
            return 0

        async with session_factory() as session:
            if args.command == "create-user":
                if not is_company_email(args.email, settings.company_email_domain):
                    print(f"Email must be from the company domain ({settings.company_email_domain})", file=sys.stderr)
                    return 1
                if await get_user_by_username(session, args.username) is not None:
                    print("Username already exists", file=sys.stderr)
                    return 1
                if await get_user_by_email(session, args.email) is not None:
                    print("Email already exists", file=sys.stderr)
                    return 1
                password = _read_password(args.password)
                if len(password) < PASSWORD_MIN_LENGTH:
                    print(f"Password must be at least {PASSWORD_MIN_LENGTH} characters", file=sys.stderr)
                    return 1
                user = await create_user(
                    session,
                    username=args.username,
                    email=args.email,
                    password_hash=hash_password(password),
                    role=Role(args.role),
                    first_name=args.first_name,
                    last_name=args.last_name,
                )
                print(f"Created {user.role.value} account {user.username} ({user.id})")
                return 0

            if args.command in {"activate", "deactivate"}:
                user = await set_active(session, args.username, args.command == "activate")
                if user is None:
                    print(f"Unknown user {args.username}", file=sys.stderr)
                    return 1
                state = "active" if user.is_active else "deactivated"
                print(f"{user.username} is now {state}")
                return 0

            if args.command == "login-attempts":
                for attempt in await recent_login_attempts(session, args.limit):
                    outcome = "ok" if attempt.successful else "failed"
                    print(f"{attempt.attempted_at.isoformat()}  {attempt.ip_address:<15}  {outcome:<6}  {attempt.identifier}")
                return 0
    finally:
        await engine.dispose()

    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(get_settings().log_level)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
