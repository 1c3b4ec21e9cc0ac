# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. Tests run against a throwaway SQLite database and a generated RSA key pair."""

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

# Settings are read at import time, so the environment must be ready first.
_TMP = Path(tempfile.mkdtemp(prefix="smartnote-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP / 'test.db'}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_PATH"] = str(_TMP / "uploads")
os.environ["TOKEN_REAP_INTERVAL_MINUTES"] = "0"
os.environ["JWT_PRIVATE_KEY_PATH"] = str(_TMP / "keys" / "private.pem")
os.environ["JWT_PUBLIC_KEY_PATH"] = str(_TMP / "keys" / "public.pem")
os.environ.pop("SMTP_HOST", None)
os.environ.pop("SMTP_USER", None)

from smartnote_server.scripts.generate_keys import generate_key_pair  # noqa: E402

(_TMP / "keys").mkdir()
_private_pem, _public_pem = generate_key_pair()
(_TMP / "keys" / "private.pem").write_bytes(_private_pem)
(_TMP / "keys" / "public.pem").write_bytes(_public_pem)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from smartnote_server.auth import TokenSigner  # noqa: E402
from smartnote_server.database import async_session_maker, engine  # noqa: E402
from smartnote_server.dependencies import get_mailer  # noqa: E402
from smartnote_server.main import app  # noqa: E402
from smartnote_server.models import Base  # noqa: E402
from smartnote_server.models.timestamp import utcnow  # noqa: E402
from smartnote_server.rate_limit import reset_limits  # noqa: E402
from smartnote_server.services.authentication import AuthService  # noqa: E402
from smartnote_server.services.email import EmailDeliveryError  # noqa: E402
from smartnote_server.stores import CredentialStore, EphemeralTokenStore  # noqa: E402


@dataclass
class SentMail:
    to: str
    subject: str
    text_body: str


class FakeMailer:
    """Records messages instead of sending them."""

    def __init__(self, configured: bool = True, fail: bool = False):
        self._configured = configured
        self.fail = fail
        self.sent: list[SentMail] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def send(self, to: str, subject: str, text_body: str, html_body: str | None = None) -> None:
        if self.fail:
            raise EmailDeliveryError("connection refused")
        self.sent.append(SentMail(to, subject, text_body))

    def last_code(self) -> str:
        return self.sent[-1].text_body.split("OTP is: ")[1].split()[0]


class Clock:
    """Settable clock for AuthService; starts at the real current time."""

    def __init__(self, now: datetime | None = None):
        self.now = now or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def reset_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    reset_limits()
    yield


@pytest.fixture
async def session(reset_db):
    async with async_session_maker() as s:
        yield s


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def signer():
    return TokenSigner.from_settings()


@pytest.fixture
def service(session, signer, mailer, clock):
    return AuthService(
        CredentialStore(session),
        EphemeralTokenStore(session),
        signer,
        mailer,
        clock=clock,
    )


@pytest.fixture
async def client(reset_db, mailer):
    app.dependency_overrides[get_mailer] = lambda: mailer
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    """Register through the API and return Authorization headers for the new user."""

    async def _login(email: str, password: str = "Secret1") -> dict:
        r = await client.post("/api/auth/register", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        r = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login
