"""Exception hierarchy — every failure the service reports to a client.

The HTTP layer maps each class to a status code; the relay maps upstream
failures to a terminal error event once a stream has started.
"""

from __future__ import annotations


class QuillnoteError(Exception):
    """Base class for all service errors."""

    status_code = 500


class ValidationError(QuillnoteError):
    """Client input is unusable (bad action, empty content, bad note fields)."""

    status_code = 422


class InvalidActionError(ValidationError):
    """Requested enhancement action is not one of the supported actions."""

    def __init__(self, action: str, allowed: list[str]):
        self.action = action
        super().__init__(
            f"Unsupported action '{action}'. Available: {allowed}"
        )


class ConfigurationError(QuillnoteError):
    """Server is misconfigured (e.g. no upstream API key)."""

    status_code = 500


class UpstreamError(QuillnoteError):
    """Upstream AI provider answered with a non-success status."""

    status_code = 502

    def __init__(self, status: int, detail: str = ""):
        self.status = status
        self.detail = detail
        message = f"AI provider returned HTTP {status}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UpstreamConnectionError(QuillnoteError):
    """Transport-level failure opening or reading the upstream response."""

    status_code = 502


class NoteNotFoundError(QuillnoteError):
    status_code = 404

    def __init__(self, note_id: int):
        self.note_id = note_id
        super().__init__(f"Note {note_id} not found")


class NoteAccessError(QuillnoteError):
    status_code = 403

    def __init__(self, note_id: int):
        self.note_id = note_id
        super().__init__(f"Not allowed to access note {note_id}")
