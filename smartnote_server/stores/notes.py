# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Note records, always scoped to their owner."""

import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from smartnote_server.models import Note


@dataclass
class NoteFilter:
    title: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    page: int = 1
    limit: int = 10


@dataclass
class NotePage:
    notes: list[Note]
    total_count: int
    current_page: int
    total_pages: int

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.current_page > 1


class NoteStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, owner_id: int, title: str, content: str) -> Note:
        note = Note(owner_id=owner_id, title=title, content=content)
        self.db.add(note)
        await self.db.commit()
        return await self._reload(note.id)

    async def _reload(self, note_id: int) -> Note:
        # Picks up server-side timestamps and the joined owner.
        result = await self.db.execute(
            select(Note).where(Note.id == note_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def get(self, owner_id: int, note_id: int) -> Note | None:
        result = await self.db.execute(
            select(Note).where(Note.id == note_id, Note.owner_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def update(
        self, note: Note, title: str | None = None, content: str | None = None
    ) -> Note:
        if title is not None:
            note.title = title
        if content is not None:
            note.content = content
        await self.db.commit()
        return await self._reload(note.id)

    async def delete(self, owner_id: int, note_id: int) -> bool:
        result = await self.db.execute(
            delete(Note).where(Note.id == note_id, Note.owner_id == owner_id)
        )
        await self.db.commit()
        return (result.rowcount or 0) > 0

    def _filtered(self, owner_id: int, flt: NoteFilter) -> Select:
        q = select(Note).where(Note.owner_id == owner_id)
        if flt.title:
            q = q.where(Note.title.ilike(f"%{flt.title}%"))
        if flt.created_from:
            q = q.where(Note.created_at >= flt.created_from)
        if flt.created_to:
            q = q.where(Note.created_at <= flt.created_to)
        return q

    async def list_notes(self, owner_id: int, flt: NoteFilter) -> NotePage:
        """Newest first, paginated."""
        q = self._filtered(owner_id, flt)
        total = await self.db.scalar(select(func.count()).select_from(q.subquery())) or 0
        result = await self.db.execute(
            q.order_by(Note.created_at.desc(), Note.id.desc())
            .offset((flt.page - 1) * flt.limit)
            .limit(flt.limit)
        )
        return NotePage(
            notes=list(result.scalars().unique().all()),
            total_count=total,
            current_page=flt.page,
            total_pages=math.ceil(total / flt.limit) if total else 0,
        )

    async def search(self, owner_id: int, term: str | None) -> list[Note]:
        """Title/content substring search across all of the owner's notes."""
        q = select(Note).where(Note.owner_id == owner_id)
        if term:
            pattern = f"%{term}%"
            q = q.where(Note.title.ilike(pattern) | Note.content.ilike(pattern))
        result = await self.db.execute(q.order_by(Note.created_at.desc(), Note.id.desc()))
        return list(result.scalars().unique().all())
