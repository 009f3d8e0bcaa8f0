"""Enumerations and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from reply_agent.common.errors import InputInvalid

SHARE_URL_TEMPLATE = "https://wa.me/?text={}"


class Tone(str, Enum):
    FRIENDLY = "friendly"
    FORMAL = "formal"
    CONCISE = "concise"
    EMPATHETIC = "empathetic"
    SALES = "sales"


class Length(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


TOKEN_BUDGETS: dict[Length, int] = {
    Length.SHORT: 64,
    Length.MEDIUM: 128,
    Length.LONG: 196,
}


@dataclass(frozen=True)
class GenerationParameters:
    """Sampling parameters passed to a generation gateway."""
    max_new_tokens: int
    temperature: float = 0.7
    top_p: float = 0.95

    def __post_init__(self) -> None:
        if self.max_new_tokens <= 0:
            raise ValueError(f"max_new_tokens must be positive, got {self.max_new_tokens}")
        if not 0 < self.temperature <= 2:
            raise ValueError(f"temperature must be in (0, 2], got {self.temperature}")
        if not 0 < self.top_p <= 1:
            raise ValueError(f"top_p must be in (0, 1], got {self.top_p}")

    @classmethod
    def for_length(
        cls, length: Length | str, temperature: float = 0.7, top_p: float = 0.95
    ) -> "GenerationParameters":
        """Derive the token budget from the requested reply length."""
        return cls(
            max_new_tokens=TOKEN_BUDGETS[Length(length)],
            temperature=temperature,
            top_p=top_p,
        )


@dataclass
class ReplyRequest:
    """Everything the pipeline needs to draft one reply."""
    incoming: str
    context: str = ""
    tone: Tone = Tone.FRIENDLY
    length: Length = Length.SHORT
    language: str = "auto"

    def __post_init__(self) -> None:
        self.tone = Tone(self.tone)
        self.length = Length(self.length)
        self.language = (self.language or "auto").strip() or "auto"

    def validate(self) -> None:
        """Raise InputInvalid when the incoming message is blank."""
        if not self.incoming or not self.incoming.strip():
            raise InputInvalid("incoming message is empty")


def build_share_link(text: str) -> str | None:
    """
    Build a WhatsApp share link for a reply.

    Args:
        text: Reply text; percent-encoded the way encodeURIComponent does.

    Returns:
        The wa.me URL, or None when there is nothing to share.
    """
    if not text:
        return None
    return SHARE_URL_TEMPLATE.format(quote(text, safe="!*'()"))


@dataclass
class ReplyResult:
    """Final reply handed back to the caller for display."""
    text: str
    used_fallback: bool
    status: str

    @property
    def share_url(self) -> str | None:
        return build_share_link(self.text)
