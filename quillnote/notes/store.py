"""In-process note store, scoped per user.

Stands in for the relational ``notes`` table: list with search and
pagination, plus get/create/update/delete with ownership checks.
"""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timezone

from quillnote.errors import NoteAccessError, NoteNotFoundError
from quillnote.schemas import Note, NoteCreate, NotePage, NoteUpdate

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _matches(note: Note, needle: str) -> bool:
    haystacks = [note.title, note.content, *(note.tags or [])]
    return any(needle in h.lower() for h in haystacks)


class NoteStore:
    def __init__(self):
        self._notes: dict[int, Note] = {}
        self._next_id = 1
        # note id -> write sequence number, newest write sorts first
        self._touched: dict[int, int] = {}
        self._writes = itertools.count()

    def _owned(self, user_id: int, note_id: int) -> Note:
        note = self._notes.get(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        if note.user_id != user_id:
            raise NoteAccessError(note_id)
        return note

    def notes_for(self, user_id: int) -> list[Note]:
        """All of a user's notes, most recently updated first."""
        notes = [n for n in self._notes.values() if n.user_id == user_id]
        notes.sort(key=lambda n: self._touched[n.id], reverse=True)
        return notes

    def list(
        self,
        user_id: int,
        search: str | None = None,
        page: int = 1,
        per_page: int = 12,
    ) -> NotePage:
        """Return one page of the user's notes, optionally filtered.

        Search is a case-insensitive substring match over title, content
        and tags. Pages past the end come back empty.
        """
        if page < 1 or per_page < 1:
            raise ValueError("page and per_page must be >= 1")

        notes = self.notes_for(user_id)
        needle = (search or "").strip().lower()
        if needle:
            notes = [n for n in notes if _matches(n, needle)]

        start = (page - 1) * per_page
        total = len(notes)
        return NotePage(
            items=notes[start:start + per_page],
            total=total,
            page=page,
            per_page=per_page,
            pages=max(1, -(-total // per_page)),
        )

    def get(self, user_id: int, note_id: int) -> Note:
        return self._owned(user_id, note_id)

    def create(self, user_id: int, data: NoteCreate) -> Note:
        now = _now()
        note = Note(
            id=self._next_id,
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._notes[note.id] = note
        self._next_id += 1
        self._touched[note.id] = next(self._writes)
        logger.info(f"Created note {note.id} for user {user_id}")
        return note

    def update(self, user_id: int, note_id: int, data: NoteUpdate) -> Note:
        note = self._owned(user_id, note_id)
        updated = note.model_copy(update={**data.model_dump(), "updated_at": _now()})
        self._notes[note_id] = updated
        self._touched[note_id] = next(self._writes)
        logger.info(f"Updated note {note_id} for user {user_id}")
        return updated

    def delete(self, user_id: int, note_id: int) -> None:
        self._owned(user_id, note_id)
        del self._notes[note_id]
        del self._touched[note_id]
        logger.info(f"Deleted note {note_id} for user {user_id}")
