# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User records: lookup by email or id, insert, password and profile updates."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from smartnote_server.models import User
from smartnote_server.stores.errors import DuplicateRecordError


class CredentialStore:
    """Each write commits on its own unless told to defer to the caller's commit."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def insert(self, user: User) -> User:
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateRecordError("Email already registered", constraint="users.email") from e
        await self.db.refresh(user)
        return user

    async def update_password_hash(self, user: User, password_hash: str, *, commit: bool = True) -> None:
        """With commit=False the change rides on the next commit in this session."""
        user.password_hash = password_hash
        if commit:
            await self.db.commit()
            await self.db.refresh(user)

    async def update_profile_reference(self, user: User, reference: str | None) -> None:
        user.profile_picture = reference
        await self.db.commit()
        await self.db.refresh(user)
