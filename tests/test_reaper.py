# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Expired token reaping and OTP generation."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from smartnote_server.database import async_session_maker
from smartnote_server.models import EphemeralToken, TokenKind, User
from smartnote_server.models.timestamp import utcnow
from smartnote_server.services.otp import generate_otp, is_valid_otp
from smartnote_server.services.reaper import reap_expired_tokens


@pytest.mark.anyio
async def test_reaper_removes_only_expired(session):
    user = User(email="r@x.com", password_hash="x")
    session.add(user)
    await session.commit()
    now = utcnow()
    session.add_all(
        [
            EphemeralToken(user_id=user.id, token="111111", kind=TokenKind.RESET, expires_at=now - timedelta(minutes=1)),
            EphemeralToken(user_id=user.id, token="jti-old", kind=TokenKind.REVOKED, expires_at=now - timedelta(hours=1)),
            EphemeralToken(user_id=user.id, token="jti-live", kind=TokenKind.REVOKED, expires_at=now + timedelta(hours=1)),
        ]
    )
    await session.commit()

    removed = await reap_expired_tokens(async_session_maker, now)
    assert removed == 2
    remaining = (await session.execute(select(EphemeralToken.token))).scalars().all()
    assert remaining == ["jti-live"]


def test_generated_otps_are_six_digits():
    codes = {generate_otp() for _ in range(200)}
    assert all(is_valid_otp(c) for c in codes)
    assert all(100000 <= int(c) <= 999999 for c in codes)
    assert len(codes) > 150


@pytest.mark.parametrize("code, ok", [("123456", True), ("012345", True), ("12a456", False), ("123", False), ("\u0661\u0662\u0663\u0664\u0665\u0666", False), ("", False), (None, False)])
def test_is_valid_otp(code, ok):
    assert is_valid_otp(code) is ok
