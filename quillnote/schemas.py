"""Request/response models — the contract between the service and clients."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class EnhanceRequest(BaseModel):
    """Incoming body for ``POST /ai/enhance``.

    ``action`` is kept as a plain string so unsupported values reach the
    relay's own validation and come back as a ValidationError.
    """

    content: str
    action: str
    stream: bool = True


class EnhancementResult(BaseModel):
    """Non-streaming answer: either ``result`` or ``error`` is set."""

    action: str
    result: str | None = None
    error: str | None = None


class RelayEvent(BaseModel):
    """A single event in the client-facing enhancement stream.

    Types:
        content — append ``content`` to the text received so far
        done    — stream completed normally
        error   — stream failed; ``content`` holds the message
    """

    type: Literal["content", "done", "error"]
    content: str = ""

    @classmethod
    def fragment(cls, text: str) -> RelayEvent:
        return cls(type="content", content=text)

    @classmethod
    def done(cls) -> RelayEvent:
        return cls(type="done")

    @classmethod
    def failure(cls, message: str) -> RelayEvent:
        return cls(type="error", content=message)

    @property
    def is_terminal(self) -> bool:
        return self.type != "content"

    def to_sse(self) -> str:
        """Frame the event as one server-sent-event ``data:`` line."""
        if self.type == "done":
            return "data: [DONE]\n\n"
        key = "error" if self.type == "error" else "content"
        return f"data: {json.dumps({key: self.content})}\n\n"


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    tags: list[str] | None = None


class NoteUpdate(NoteCreate):
    pass


class Note(BaseModel):
    id: int
    user_id: int
    title: str
    content: str
    tags: list[str] | None = None
    created_at: datetime
    updated_at: datetime


class NotePage(BaseModel):
    """One page of a user's notes, newest first."""

    items: list[Note]
    total: int
    page: int
    per_page: int
    pages: int


class TagCount(BaseModel):
    tag: str
    count: int


class WordCount(BaseModel):
    word: str
    count: int


class MonthCount(BaseModel):
    month: str  # YYYY-MM
    count: int


class AnalyticsSummary(BaseModel):
    total_notes: int
    total_words: int
    average_length: int
    top_tags: list[TagCount]
    notes_per_month: list[MonthCount]
    common_words: list[WordCount]
