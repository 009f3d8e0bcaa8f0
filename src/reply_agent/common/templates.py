"""Prompt templating helpers."""
from __future__ import annotations

from reply_agent.common.schema import Length, Tone

TONE_DESCRIPTIONS: dict[Tone, str] = {
    Tone.FRIENDLY: "friendly, warm, natural",
    Tone.FORMAL: "professional and polite",
    Tone.CONCISE: "succinct, to-the-point",
    Tone.EMPATHETIC: "empathetic and reassuring",
    Tone.SALES: "persuasive but not pushy, value-focused",
}

LENGTH_DESCRIPTIONS: dict[Length, str] = {
    Length.SHORT: "1-2 sentences",
    Length.MEDIUM: "2-4 sentences",
    Length.LONG: "a short paragraph",
}

SYSTEM_TEMPLATE = (
    "System: You are a WhatsApp reply assistant. Draft a reply considering tone, "
    "brevity, and clarity. {language}. Avoid emojis unless present in the context. "
    "No preambles."
)
CONTEXT_HEADER = "Conversation so far:"
GUIDELINES_TEMPLATE = (
    "Guidelines: Tone: {tone}. Length: {length}. "
    "Add a helpful follow-up question only if appropriate."
)
USER_PREFIX = "User message: "
ASSISTANT_CUE = "Assistant:"


def language_directive(language: str) -> str:
    """Return the sentence telling the model which language to answer in."""
    if language == "auto":
        return "Match the user's language"
    return f"Write in {language}"


def build_prompt(
    incoming: str,
    tone: Tone | str,
    length: Length | str,
    language: str,
    context: str | None = None,
) -> str:
    """
    Render the instruction prompt for one reply.

    The section order is fixed: system preamble, optional conversation
    context, guidelines, the incoming message, then the assistant cue the
    model continues from.

    Args:
        incoming: Last message received; trimmed before use.
        tone: One of the Tone values.
        length: One of the Length values.
        language: "auto" or a language code/name.
        context: Earlier messages; omitted entirely when blank.

    Returns:
        Rendered prompt.
    """
    parts = [SYSTEM_TEMPLATE.format(language=language_directive(language))]
    if context and context.strip():
        parts.append(f"{CONTEXT_HEADER}\n{context.strip()}")
    parts.append(
        GUIDELINES_TEMPLATE.format(
            tone=TONE_DESCRIPTIONS[Tone(tone)],
            length=LENGTH_DESCRIPTIONS[Length(length)],
        )
    )
    parts.append(f"{USER_PREFIX}{incoming.strip()}")
    parts.append(ASSISTANT_CUE)
    return "\n\n".join(parts)
