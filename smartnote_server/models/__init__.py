# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from smartnote_server.models.base import Base
from smartnote_server.models.user import User
from smartnote_server.models.note import Note
from smartnote_server.models.ephemeral_token import EphemeralToken, TokenKind

__all__ = [
    "Base",
    "User",
    "Note",
    "EphemeralToken",
    "TokenKind",
]
