"""Chunk reframer — turns the provider's SSE lines into RelayEvents.

Upstream grammar: ``data: <json>`` lines carrying
``choices[0].delta.content``, terminated by ``data: [DONE]``.
Anything else (blank lines, comments, keep-alives, broken JSON) is skipped.
One upstream delta becomes exactly one RelayEvent, in arrival order.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

from quillnote.schemas import RelayEvent

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def extract_delta(payload: str) -> str | None:
    """Return the delta text carried by one JSON payload, or None.

    Malformed JSON and payloads without a delta both yield None.
    """
    try:
        chunk = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed upstream chunk: {payload[:80]!r}")
        return None

    try:
        content = chunk["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    if not isinstance(content, str) or not content:
        return None
    return content


async def reframe(lines: AsyncIterable[str]) -> AsyncIterator[RelayEvent]:
    """Yield RelayEvents for the upstream lines, stopping at ``[DONE]``."""
    async for raw in lines:
        line = raw.strip()
        if not line or not line.startswith(DATA_PREFIX):
            continue

        payload = line[len(DATA_PREFIX):]
        if payload == DONE_SENTINEL:
            yield RelayEvent.done()
            return

        content = extract_delta(payload)
        if content is not None:
            yield RelayEvent.fragment(content)
