# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""FastAPI dependencies wiring stores, signer and mailer into the auth service."""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from smartnote_server.auth import TokenSigner
from smartnote_server.database import get_db
from smartnote_server.models import User
from smartnote_server.services.authentication import AuthService
from smartnote_server.services.email import Mailer, SmtpMailer
from smartnote_server.stores import CredentialStore, EphemeralTokenStore, NoteStore


@lru_cache
def get_token_signer() -> TokenSigner:
    """Keys are read from disk once per process."""
    return TokenSigner.from_settings()


def get_mailer() -> Mailer:
    return SmtpMailer.from_settings()


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
    mailer: Mailer = Depends(get_mailer),
) -> AuthService:
    return AuthService(CredentialStore(db), EphemeralTokenStore(db), signer, mailer)


def get_note_store(db: AsyncSession = Depends(get_db)) -> NoteStore:
    return NoteStore(db)


async def get_current_user(
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> User:
    """Verify the Authorization header and attach the user to request.state. Raises AuthError."""
    user = await service.verify_bearer(request.headers.get("Authorization"))
    request.state.user = user
    return user
