# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Single-document data access over an AsyncSession."""

from smartnote_server.stores.credentials import CredentialStore
from smartnote_server.stores.errors import DuplicateRecordError
from smartnote_server.stores.notes import NoteFilter, NotePage, NoteStore
from smartnote_server.stores.tokens import EphemeralTokenStore

__all__ = [
    "CredentialStore",
    "DuplicateRecordError",
    "EphemeralTokenStore",
    "NoteFilter",
    "NotePage",
    "NoteStore",
]
