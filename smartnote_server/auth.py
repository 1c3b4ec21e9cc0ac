# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication primitives: password hashing and RS256 JWT signing."""

import logging
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, NamedTuple

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from smartnote_server.config import settings
from smartnote_server.errors import TokenExpired, TokenInvalid
from smartnote_server.models.timestamp import utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against its hash (constant-time)."""
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    """Burn one hash verification so unknown emails take as long as wrong passwords."""
    pwd_context.dummy_verify()


class IssuedToken(NamedTuple):
    token: str
    jti: str
    expires_at: datetime


class TokenSigner:
    """Signs bearer tokens with the private key and verifies them with the public key."""

    def __init__(
        self,
        private_key: str,
        public_key: str,
        *,
        algorithm: str = "RS256",
        issuer: str = "smart-note-app",
        audience: str = "smart-note-app-users",
        expire_minutes: int = 1440,
    ) -> None:
        self.private_key = private_key
        self.public_key = public_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls) -> "TokenSigner":
        """Load the PEM key pair named in settings."""
        try:
            private_key = Path(settings.jwt_private_key_path).read_text(encoding="utf-8")
            public_key = Path(settings.jwt_public_key_path).read_text(encoding="utf-8")
        except OSError as e:
            raise RuntimeError(
                "JWT keys not found. Generate an RSA key pair first: "
                "python -m smartnote_server.scripts.generate_keys keys"
            ) from e
        logger.info("JWT RSA keys loaded from %s", settings.jwt_public_key_path.parent)
        return cls(
            private_key,
            public_key,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            expire_minutes=settings.jwt_expire_minutes,
        )

    def issue(self, subject: str, email: str, now: datetime | None = None) -> IssuedToken:
        """Create a signed access token with a fresh jti."""
        issued_at = now or utcnow()
        expires_at = issued_at + timedelta(minutes=self.expire_minutes)
        jti = uuid.uuid4().hex
        claims: dict[str, Any] = {
            "sub": subject,
            "email": email,
            "iss": self.issuer,
            "aud": self.audience,
            "jti": jti,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(claims, self.private_key, algorithm=self.algorithm)
        return IssuedToken(token=token, jti=jti, expires_at=expires_at)

    def decode(self, token: str) -> dict[str, Any]:
        """Verify signature, issuer, audience and expiry; return the claims."""
        try:
            payload = jwt.decode(
                token,
                self.public_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except ExpiredSignatureError as e:
            raise TokenExpired() from e
        except JWTError as e:
            raise TokenInvalid() from e
        if not payload.get("sub") or not payload.get("jti"):
            raise TokenInvalid()
        return payload
