# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later
"""Initial schema: users, notes and ephemeral tokens.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("profile_picture", sa.String(512), nullable=True),
        sa.Column("role", sa.String(32), nullable=False, server_default="user"),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_notes_owner_id", "notes", ["owner_id"])
    op.create_index("ix_notes_owner_created", "notes", ["owner_id", "created_at"])

    op.create_table(
        "ephemeral_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_ephemeral_tokens_user_id", "ephemeral_tokens", ["user_id"])
    op.create_index("ix_ephemeral_tokens_expires_at", "ephemeral_tokens", ["expires_at"])
    op.create_index(
        "uq_ephemeral_tokens_user_reset",
        "ephemeral_tokens",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("kind = 'reset'"),
    )
    op.create_index(
        "uq_ephemeral_tokens_revoked_jti",
        "ephemeral_tokens",
        ["token"],
        unique=True,
        postgresql_where=sa.text("kind = 'revoked'"),
    )


def downgrade() -> None:
    op.drop_table("ephemeral_tokens")
    op.drop_table("notes")
    op.drop_table("users")
