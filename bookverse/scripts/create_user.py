from __future__ import annotations

import asyncio
import getpass
from argparse import ArgumentParser, Namespace
from typing import Optional

from bookverse.core.database import create_engine, create_session_factory, shutdown_engine
from bookverse.core.settings import Settings
from bookverse.models.db import Base, User
from bookverse.services.errors import Result
from bookverse.services.user_service import UserService


def parse_args(argv=None) -> Namespace:
    parser = ArgumentParser(
        description=(
            "Create a BookVerse account (with its default shelves). "
            "Typical use is bootstrapping the first admin: "
            "python -m bookverse.scripts.create_user --username admin --role admin"
        )
    )
    parser.add_argument("--username", required=True, help="Login name")
    parser.add_argument("--password", help="Password (prompted for when omitted)")
    parser.add_argument("--email", help="Optional e-mail address")
    parser.add_argument("--display-name", help="Name shown on the public profile")
    parser.add_argument(
        "--role",
        choices=("admin", "member"),
        default="member",
        help="Account role (admin or member)",
    )
    return parser.parse_args(argv)


async def create_user(
    settings: Settings,
    username: str,
    password: str,
    *,
    role: str = "member",
    email: Optional[str] = None,
    display_name: Optional[str] = None,
) -> Result[User]:
    engine = create_engine(settings.DATABASE_URL)
    try:
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

        service = UserService(create_session_factory(engine))
        return await service.register(
            username,
            password,
            email=email,
            display_name=display_name,
            role=role,
        )
    finally:
        await shutdown_engine(engine)


def main(argv=None) -> None:
    args = parse_args(argv)
    password = args.password
    if not password:
        password = getpass.getpass("Password: ").strip()
        if not password:
            raise SystemExit("A password is required.")

    result = asyncio.run(
        create_user(
            Settings(),
            args.username,
            password,
            role=args.role,
            email=args.email,
            display_name=args.display_name,
        )
    )
    if result.is_failure:
        raise SystemExit(f"Could not create '{args.username}': {result.error.message} ({result.error.code})")
    print(f"User '{result.value.username}' (role: {result.value.role}) created.")


if __name__ == "__main__":
    main()
