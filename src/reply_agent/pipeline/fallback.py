"""Offline, rule-based reply drafting used when the model path yields nothing.

The composer classifies the incoming message with an ordered list of rules
(first match wins), prepends a tone opener and may append one follow-up
question. It never touches the network and always returns non-empty text for a
non-empty message.

The language preference is accepted for signature parity with the model path
but is not applied: fallback replies are English-only.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Callable

from reply_agent.common.schema import Length, Tone

OPENERS: dict[Tone, str] = {
    Tone.FRIENDLY: "Hey!",
    Tone.FORMAL: "Hello,",
    Tone.CONCISE: "",
    Tone.EMPATHETIC: "I understand…",
    Tone.SALES: "Great question…",
}

APOLOGY = re.compile(r"sorry|issue|problem|delay", re.IGNORECASE)
GRATITUDE = re.compile(r"thanks|thank you", re.IGNORECASE)
SCHEDULING = re.compile(r"time|reschedule|move|tomorrow|today|tonight|am|pm", re.IGNORECASE)
LOCATION = re.compile(r"where|venue|location|address|park|parking", re.IGNORECASE)

TIMING_FOLLOW_UP = "Does that timing suit you?"
LOCATION_FOLLOW_UP = "Would you like the address or parking details?"
SALES_FOLLOW_UP = "Would you like a quick overview of the benefits?"

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Rule:
    """One classification rule: a predicate over the message and the core reply it yields."""
    name: str
    matches: Callable[[str], bool]
    reply: Callable[[str], str]


# Order is part of the contract: a question that also apologises is a question.
RULES: tuple[Rule, ...] = (
    Rule(
        "question",
        lambda m: m.endswith("?"),
        lambda m: re.sub(r"\?+$", "?", m) + " I can do that.",
    ),
    Rule(
        "apology",
        lambda m: bool(APOLOGY.search(m)),
        lambda m: "Thanks for flagging, I'll sort this out and keep you posted.",
    ),
    Rule(
        "gratitude",
        lambda m: bool(GRATITUDE.search(m)),
        lambda m: "You're welcome!",
    ),
    Rule(
        "scheduling",
        lambda m: bool(SCHEDULING.search(m)),
        lambda m: "That works for me, happy to adjust the time.",
    ),
    Rule("default", lambda m: True, lambda m: "Got it!"),
)


def classify(message: str) -> Rule:
    """Return the first rule matching the trimmed message."""
    m = message.strip()
    for rule in RULES:
        if rule.matches(m):
            return rule
    return RULES[-1]


def follow_up(message: str, tone: Tone, rule: Rule) -> str:
    """Pick at most one follow-up question for the reply."""
    # An echoed question already names the proposed time.
    if rule.name != "question" and SCHEDULING.search(message):
        return TIMING_FOLLOW_UP
    if LOCATION.search(message):
        return LOCATION_FOLLOW_UP
    if tone is Tone.SALES:
        return SALES_FOLLOW_UP
    return ""


def first_sentences(text: str, count: int = 2) -> str:
    """Keep the first `count` sentences, splitting after . ! or ?"""
    return " ".join(_SENTENCE_END.split(text)[:count]).strip()


def _join(*parts: str) -> str:
    return _WHITESPACE.sub(" ", " ".join(p for p in parts if p)).strip()


def compose_fallback(
    incoming: str,
    tone: Tone | str,
    length: Length | str,
    language: str = "auto",
) -> str:
    """
    Draft a reply without a model.

    Args:
        incoming: Last message received.
        tone: Selects the opener and enables the sales follow-up.
        length: "short" keeps only the first two sentences after the opener.
        language: Ignored; the fallback only writes English.

    Returns:
        The composed reply.
    """
    tone = Tone(tone)
    message = incoming.strip()
    rule = classify(message)

    body = _join(rule.reply(message), follow_up(message, tone, rule))
    if Length(length) is Length.SHORT:
        body = first_sentences(body)
    return _join(OPENERS[tone], body)
