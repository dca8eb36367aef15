"""Note analytics — counts and frequency tables over one user's notes."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence

from quillnote.schemas import AnalyticsSummary, MonthCount, Note, TagCount, WordCount

# Letters plus in-word apostrophes and hyphens count as one word.
_WORD_RE = re.compile(r"[A-Za-z'][A-Za-z'-]*")

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "is", "are", "was", "were", "be", "been", "have", "has",
    "had", "do", "does", "did", "will", "would", "could", "should", "may",
    "might", "must", "can", "this", "that", "these", "those", "i", "you", "he",
    "she", "it", "we", "they", "me", "him", "her", "us", "them",
})

MONTHS_SHOWN = 12


def _words(text: str) -> list[str]:
    return _WORD_RE.findall(text)


def total_notes(notes: Sequence[Note]) -> int:
    return len(notes)


def total_words(notes: Sequence[Note]) -> int:
    return sum(len(_words(n.content)) for n in notes)


def average_length(notes: Sequence[Note]) -> int:
    """Mean content length in characters, rounded. 0 when there are no notes."""
    if not notes:
        return 0
    return round(sum(len(n.content) for n in notes) / len(notes))


def top_tags(notes: Sequence[Note], limit: int = 10) -> list[TagCount]:
    counts: Counter[str] = Counter()
    for note in notes:
        for tag in note.tags or []:
            tag = tag.strip()
            if tag:
                counts[tag] += 1
    return [TagCount(tag=t, count=c) for t, c in counts.most_common(limit)]


def notes_per_month(notes: Sequence[Note]) -> list[MonthCount]:
    """Notes created per ``YYYY-MM``, most recent months first."""
    counts = Counter(n.created_at.strftime("%Y-%m") for n in notes)
    months = sorted(counts, reverse=True)[:MONTHS_SHOWN]
    return [MonthCount(month=m, count=counts[m]) for m in months]


def common_words(notes: Sequence[Note], limit: int = 20) -> list[WordCount]:
    counts: Counter[str] = Counter()
    for note in notes:
        for word in _words(note.content.lower()):
            if len(word) > 3 and word not in STOP_WORDS:
                counts[word] += 1
    return [WordCount(word=w, count=c) for w, c in counts.most_common(limit)]


def summarize(notes: Sequence[Note]) -> AnalyticsSummary:
    return AnalyticsSummary(
        total_notes=total_notes(notes),
        total_words=total_words(notes),
        average_length=average_length(notes),
        top_tags=top_tags(notes),
        notes_per_month=notes_per_month(notes),
        common_words=common_words(notes),
    )
