# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Registration, login, bearer verification, revocation and password reset.

AuthService holds no state of its own: users and ephemeral tokens live in the
stores, and each store write commits individually. Concurrent reset requests
for one user are serialized by the unique index on pending reset codes.

Passwords, codes and tokens are never logged.
"""

import logging
import math
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from smartnote_server.auth import (
    IssuedToken,
    TokenSigner,
    dummy_verify,
    hash_password,
    verify_password,
)
from smartnote_server.config import settings
from smartnote_server.errors import (
    AlreadyExists,
    EmailDeliveryFailed,
    InvalidCredentials,
    InvalidOrExpiredOtp,
    MissingToken,
    PasswordUnchanged,
    ResetAlreadyPending,
    TokenInvalid,
    TokenRevoked,
    UserNotFound,
)
from smartnote_server.models import EphemeralToken, TokenKind, User
from smartnote_server.models.timestamp import as_utc, utcnow
from smartnote_server.services.email import EmailDeliveryError, Mailer, MailerNotConfiguredError
from smartnote_server.services.otp import generate_otp, is_valid_otp, reset_email_body
from smartnote_server.stores import CredentialStore, DuplicateRecordError, EphemeralTokenStore

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def remaining_minutes(expires_at: datetime, now: datetime) -> int:
    seconds = (as_utc(expires_at) - now).total_seconds()
    return max(1, math.ceil(seconds / 60))


class AuthService:
    def __init__(
        self,
        credentials: CredentialStore,
        tokens: EphemeralTokenStore,
        signer: TokenSigner,
        mailer: Mailer,
        *,
        clock: Callable[[], datetime] = utcnow,
        otp_expire_minutes: int | None = None,
    ) -> None:
        self.credentials = credentials
        self.tokens = tokens
        self.signer = signer
        self.mailer = mailer
        self.clock = clock
        self.otp_expire_minutes = otp_expire_minutes or settings.otp_expire_minutes

    # Registration / login

    async def register(self, email: str, password: str) -> User:
        if await self.credentials.find_by_email(email):
            raise AlreadyExists()
        user = User(
            email=email,
            password_hash=hash_password(password),
            is_verified=False,
            role="user",
        )
        try:
            user = await self.credentials.insert(user)
        except DuplicateRecordError as e:
            raise AlreadyExists() from e
        logger.info("User registered: id=%s", user.id)
        return user

    async def login(self, email: str, password: str) -> tuple[User, IssuedToken]:
        """Both an unknown email and a wrong password raise the same InvalidCredentials."""
        user = await self.credentials.find_by_email(email)
        if user is None:
            dummy_verify()
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        issued = self.signer.issue(str(user.id), user.email, now=self.clock())
        logger.info("User logged in: id=%s", user.id)
        return user, issued

    # Bearer tokens

    async def authenticate(self, raw_header: str | None) -> tuple[User, dict[str, Any]]:
        """Verify an Authorization header value; return the user and the token claims."""
        if not raw_header or not raw_header.startswith(BEARER_PREFIX):
            raise MissingToken()
        token = raw_header[len(BEARER_PREFIX):].strip()
        if not token:
            raise MissingToken()
        claims = self.signer.decode(token)
        if await self.tokens.find_revoked(claims["jti"]):
            raise TokenRevoked()
        try:
            user_id = int(claims["sub"])
        except (TypeError, ValueError) as e:
            raise TokenInvalid() from e
        user = await self.credentials.find_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return user, claims

    async def verify_bearer(self, raw_header: str | None) -> User:
        user, _ = await self.authenticate(raw_header)
        return user

    async def revoke_bearer(self, jti: str, user_id: int, expires_at: datetime) -> None:
        """Record jti as revoked until the token would have expired anyway. Idempotent."""
        if await self.tokens.find_revoked(jti):
            return
        record = EphemeralToken(
            user_id=user_id,
            token=jti,
            kind=TokenKind.REVOKED,
            expires_at=expires_at,
        )
        try:
            await self.tokens.insert(record)
        except DuplicateRecordError:
            # Lost a race with a concurrent logout of the same token.
            return
        logger.info("Token revoked for user id=%s", user_id)

    async def logout(self, raw_header: str | None) -> None:
        user, claims = await self.authenticate(raw_header)
        await self.revoke_bearer(
            claims["jti"],
            user.id,
            datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )

    # Password reset

    async def request_password_reset(self, email: str) -> None:
        user = await self.credentials.find_by_email(email)
        if user is None:
            raise UserNotFound()
        user_id = user.id
        now = self.clock()

        pending = await self.tokens.find_unexpired_by_user_and_kind(user_id, TokenKind.RESET, now)
        if pending is not None:
            raise ResetAlreadyPending(remaining_minutes(pending.expires_at, now))
        if not self.mailer.configured:
            raise EmailDeliveryFailed("Email delivery is not configured")

        await self.tokens.purge_expired_for_user(user_id, TokenKind.RESET, now)
        code = generate_otp()
        record = EphemeralToken(
            user_id=user_id,
            token=code,
            kind=TokenKind.RESET,
            expires_at=now + timedelta(minutes=self.otp_expire_minutes),
        )
        try:
            record = await self.tokens.insert(record)
        except DuplicateRecordError as e:
            pending = await self.tokens.find_unexpired_by_user_and_kind(user_id, TokenKind.RESET, now)
            minutes = remaining_minutes(pending.expires_at, now) if pending else self.otp_expire_minutes
            raise ResetAlreadyPending(minutes) from e

        try:
            await self.mailer.send(
                email,
                "Password Reset OTP",
                reset_email_body(code, self.otp_expire_minutes),
            )
        except (MailerNotConfiguredError, EmailDeliveryError) as e:
            await self.tokens.delete_by_id(record.id)
            logger.warning("Reset code for user id=%s not delivered; token removed", user_id)
            raise EmailDeliveryFailed() from e
        logger.info("Reset code sent for user id=%s", user_id)

    async def complete_password_reset(self, email: str, otp: str, new_password: str) -> None:
        if not is_valid_otp(otp):
            raise InvalidOrExpiredOtp()
        user = await self.credentials.find_by_email(email)
        if user is None:
            raise UserNotFound()
        record = await self.tokens.find_by_user_token_kind(user.id, otp, TokenKind.RESET, self.clock())
        if record is None:
            raise InvalidOrExpiredOtp()
        if verify_password(new_password, user.password_hash):
            raise PasswordUnchanged()
        # The new hash and the consumed code commit together.
        await self.credentials.update_password_hash(user, hash_password(new_password), commit=False)
        await self.tokens.delete_by_id(record.id)
        logger.info("Password reset for user id=%s", user.id)

    # Profile

    async def update_profile_picture(self, user: User, reference: str) -> User:
        await self.credentials.update_profile_reference(user, reference)
        return user
