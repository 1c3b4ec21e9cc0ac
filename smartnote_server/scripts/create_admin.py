#!/usr/bin/env python3
# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Create a verified admin account. Run: python -m smartnote_server.scripts.create_admin"""

import asyncio
import getpass
import sys

from smartnote_server.auth import hash_password
from smartnote_server.database import async_session_maker, dispose_db, init_db
from smartnote_server.models import User
from smartnote_server.stores import CredentialStore, DuplicateRecordError

MIN_PASSWORD_LENGTH = 6


async def create_admin(email: str, password: str) -> User:
    """Insert an admin user. Raises DuplicateRecordError if the email is taken."""
    async with async_session_maker() as session:
        store = CredentialStore(session)
        if await store.find_by_email(email):
            raise DuplicateRecordError("User already exists", constraint="users")
        return await store.insert(
            User(
                email=email,
                password_hash=hash_password(password),
                is_verified=True,
                role="admin",
            )
        )


async def main():
    await init_db()
    email = input("Admin email: ").strip().lower()
    password = getpass.getpass("Password: ")
    if not email or len(password) < MIN_PASSWORD_LENGTH:
        print(f"Email and a password of at least {MIN_PASSWORD_LENGTH} characters are required")
        sys.exit(1)
    try:
        user = await create_admin(email, password)
    except DuplicateRecordError:
        print("User already exists")
        sys.exit(1)
    finally:
        await dispose_db()
    print(f"Admin user created (id={user.id}).")


if __name__ == "__main__":
    asyncio.run(main())
