"""Prompt templates — the only place enhancement instructions are defined.

Each action maps to one fixed instruction; the note content follows it
after a blank line.
"""

from __future__ import annotations

from quillnote.errors import InvalidActionError

ACTION_INSTRUCTIONS: dict[str, str] = {
    "summarize": "Please provide a concise summary of the following text:",
    "improve": "Please improve the following text for clarity, grammar, and style:",
    "generate_tags": (
        "Generate 5-10 relevant tags for the following text "
        "(return only the tags separated by commas):"
    ),
}


def supported_actions() -> list[str]:
    return list(ACTION_INSTRUCTIONS.keys())


def build_prompt(action: str, content: str) -> str:
    """Render the upstream prompt for an enhancement action.

    Raises ``InvalidActionError`` for anything outside ACTION_INSTRUCTIONS.
    """
    instruction = ACTION_INSTRUCTIONS.get(action)
    if instruction is None:
        raise InvalidActionError(action, supported_actions())
    return f"{instruction}\n\n{content}"
