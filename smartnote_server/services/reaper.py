# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Periodic deletion of expired ephemeral tokens (storage hygiene only)."""

import asyncio
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smartnote_server.models.timestamp import utcnow
from smartnote_server.stores import EphemeralTokenStore

logger = logging.getLogger(__name__)


async def reap_expired_tokens(
    session_maker: async_sessionmaker[AsyncSession], now: datetime | None = None
) -> int:
    async with session_maker() as db:
        removed = await EphemeralTokenStore(db).delete_expired(now or utcnow())
    if removed:
        logger.info("Reaped %d expired tokens", removed)
    return removed


async def reap_loop(session_maker: async_sessionmaker[AsyncSession], interval_minutes: float) -> None:
    while True:
        await asyncio.sleep(interval_minutes * 60)
        try:
            await reap_expired_tokens(session_maker)
        except Exception as e:
            logger.warning("Token reaper failed: %s", e)
