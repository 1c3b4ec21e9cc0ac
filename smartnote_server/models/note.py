# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Note model."""

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smartnote_server.models.base import Base
from smartnote_server.models.timestamp import UpdatedAtMixin
from smartnote_server.models.user import User


class Note(Base, UpdatedAtMixin):
    """A personal note. Only its owner can read or change it."""

    __tablename__ = "notes"
    __table_args__ = (Index("ix_notes_owner_created", "owner_id", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    owner: Mapped[User] = relationship(User, lazy="joined")
