# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Short-lived tokens: password reset codes and revoked JWT ids."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from smartnote_server.models.base import Base
from smartnote_server.models.timestamp import TimestampMixin


class TokenKind(str, enum.Enum):
    RESET = "reset"
    REVOKED = "revoked"
    VERIFICATION = "verification"


_RESET_ONLY = text("kind = 'reset'")
_REVOKED_ONLY = text("kind = 'revoked'")


class EphemeralToken(Base, TimestampMixin):
    """One row per pending reset code or revoked bearer token.

    Rows past expires_at are never acted on; the reaper deletes them later.
    Consumed reset codes are deleted, not flagged.
    """

    __tablename__ = "ephemeral_tokens"
    __table_args__ = (
        # At most one reset code per user; expired codes are purged before insert.
        Index(
            "uq_ephemeral_tokens_user_reset",
            "user_id",
            unique=True,
            postgresql_where=_RESET_ONLY,
            sqlite_where=_RESET_ONLY,
        ),
        # One revocation record per jti.
        Index(
            "uq_ephemeral_tokens_revoked_jti",
            "token",
            unique=True,
            postgresql_where=_REVOKED_ONLY,
            sqlite_where=_REVOKED_ONLY,
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token: Mapped[str] = mapped_column(String(64), nullable=False)
    kind: Mapped[TokenKind] = mapped_column(
        Enum(
            TokenKind,
            name="token_kind",
            values_callable=lambda kinds: [k.value for k in kinds],
            native_enum=False,
            length=16,
        ),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
