"""Turn raw model output into a reply that reads well in WhatsApp."""
from __future__ import annotations
import re

MAX_REPLY_CHARS = 500
ELLIPSIS = "…"

_ROLE_PREFIX = re.compile(r"^Assistant:\s*", re.IGNORECASE)
_BOLD = re.compile(r"\*\*(.*?)\*\*")
_CODE_FENCE = re.compile(r"```[\s\S]*?```")


def _clean(text: str) -> str:
    text = _ROLE_PREFIX.sub("", text)
    text = _BOLD.sub(r"\1", text)
    text = _CODE_FENCE.sub("", text)
    return text.strip()


def normalize(raw: str | None) -> str:
    """
    Sanitize generated text for a messaging app.

    Strips an echoed "Assistant:" role marker, markdown bold markers and
    fenced code blocks, then trims. Cleaning is repeated until the text is
    stable, since removing one artifact can expose another
    (e.g. "**Assistant:** hi"). Text longer than MAX_REPLY_CHARS is cut on
    a character boundary and ends with a single ellipsis, keeping the total
    within the limit.

    Args:
        raw: Model output; None is treated as empty.

    Returns:
        Clean reply, or "" when nothing usable remains.
    """
    text = (raw or "").strip()
    while True:
        cleaned = _clean(text)
        if cleaned == text:
            break
        text = cleaned

    if len(text) > MAX_REPLY_CHARS:
        text = text[: MAX_REPLY_CHARS - len(ELLIPSIS)].rstrip() + ELLIPSIS
    return text
