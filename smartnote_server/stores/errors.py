# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Storage-layer errors."""


class DuplicateRecordError(Exception):
    """Raised when an insert violates a unique index."""

    def __init__(self, message: str, constraint: str | None = None):
        super().__init__(message)
        self.message = message
        self.constraint = constraint
