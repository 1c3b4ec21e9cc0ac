# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Ephemeral token records (reset codes, revoked JWT ids)."""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from smartnote_server.models import EphemeralToken, TokenKind
from smartnote_server.stores.errors import DuplicateRecordError


class EphemeralTokenStore:
    """Reads that act on a token filter out expired rows; only the reaper deletes them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_unexpired_by_user_and_kind(
        self, user_id: int, kind: TokenKind, now: datetime
    ) -> EphemeralToken | None:
        result = await self.db.execute(
            select(EphemeralToken)
            .where(
                EphemeralToken.user_id == user_id,
                EphemeralToken.kind == kind,
                EphemeralToken.expires_at > now,
            )
            .order_by(EphemeralToken.expires_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_by_user_token_kind(
        self, user_id: int, token: str, kind: TokenKind, now: datetime
    ) -> EphemeralToken | None:
        result = await self.db.execute(
            select(EphemeralToken).where(
                EphemeralToken.user_id == user_id,
                EphemeralToken.token == token,
                EphemeralToken.kind == kind,
                EphemeralToken.expires_at > now,
            )
        )
        return result.scalar_one_or_none()

    async def find_revoked(self, jti: str) -> EphemeralToken | None:
        result = await self.db.execute(
            select(EphemeralToken).where(
                EphemeralToken.token == jti,
                EphemeralToken.kind == TokenKind.REVOKED,
            )
        )
        return result.scalar_one_or_none()

    async def insert(self, token: EphemeralToken) -> EphemeralToken:
        """Insert and commit. Raises DuplicateRecordError on a unique index conflict."""
        self.db.add(token)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateRecordError(
                f"Conflicting {token.kind.value} token", constraint="ephemeral_tokens"
            ) from e
        await self.db.refresh(token)
        return token

    async def delete_by_id(self, token_id: int) -> None:
        await self.db.execute(delete(EphemeralToken).where(EphemeralToken.id == token_id))
        await self.db.commit()

    async def purge_expired_for_user(self, user_id: int, kind: TokenKind, now: datetime) -> None:
        await self.db.execute(
            delete(EphemeralToken).where(
                EphemeralToken.user_id == user_id,
                EphemeralToken.kind == kind,
                EphemeralToken.expires_at <= now,
            )
        )
        await self.db.commit()

    async def delete_expired(self, now: datetime) -> int:
        result = await self.db.execute(
            delete(EphemeralToken).where(EphemeralToken.expires_at <= now)
        )
        await self.db.commit()
        return result.rowcount or 0
