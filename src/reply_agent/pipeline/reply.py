"""Reply pipeline: prompt -> gateway -> normalizer, with offline fallback."""
from __future__ import annotations
import asyncio
import logging

from reply_agent.common.errors import GenerationEmpty, GenerationFailure
from reply_agent.common.schema import (
    GenerationParameters,
    Length,
    ReplyRequest,
    ReplyResult,
    Tone,
)
from reply_agent.common.templates import build_prompt
from reply_agent.gateway.base import GenerationGateway
from reply_agent.pipeline.fallback import compose_fallback
from reply_agent.pipeline.normalize import normalize

LOGGER = logging.getLogger("reply_agent.pipeline")

STATUS_MODEL = "Reply generated by model."
STATUS_FAILED = "Model generation failed. Using offline fallback."
STATUS_EMPTY = "Model returned no usable text. Using offline fallback."

STATUS_READY = "Model ready"
STATUS_WARMUP_FAILED = "Model fallback will be used if loading fails"

WARMUP_PROMPT_CHARS = 60
WARMUP_PARAMS = GenerationParameters(max_new_tokens=1, temperature=0.7, top_p=0.9)


async def _generate(
    gateway: GenerationGateway,
    prompt: str,
    params: GenerationParameters,
    timeout: float | None,
) -> str:
    try:
        raw = await asyncio.wait_for(gateway.generate(prompt, params), timeout)
    except GenerationFailure:
        raise
    except asyncio.TimeoutError as e:
        raise GenerationFailure(f"generation exceeded {timeout}s") from e
    except Exception as e:
        raise GenerationFailure(f"{type(e).__name__}: {e}") from e

    text = normalize(raw)
    if not text:
        raise GenerationEmpty("normalized output is empty")
    return text


def _fallback(request: ReplyRequest, status: str) -> ReplyResult:
    text = compose_fallback(request.incoming, request.tone, request.length, request.language)
    return ReplyResult(text=text, used_fallback=True, status=status)


async def draft_reply(
    request: ReplyRequest,
    gateway: GenerationGateway,
    temperature: float = 0.7,
    top_p: float = 0.95,
    timeout: float | None = None,
) -> ReplyResult:
    """
    Draft one reply, falling back to the rule-based composer when needed.

    Args:
        request: Validated before anything else; InputInvalid propagates.
        gateway: Generation backend.
        temperature: Sampling temperature.
        top_p: Nucleus sampling probability.
        timeout: Optional bound in seconds on the gateway call.

    Returns:
        ReplyResult; used_fallback tells whether the model path was abandoned.
    """
    request.validate()
    prompt = build_prompt(
        request.incoming, request.tone, request.length, request.language, request.context
    )
    params = GenerationParameters.for_length(request.length, temperature=temperature, top_p=top_p)

    try:
        text = await _generate(gateway, prompt, params, timeout)
    except GenerationFailure as e:
        LOGGER.warning("Generation failed, using fallback: %s", e)
        return _fallback(request, STATUS_FAILED)
    except GenerationEmpty:
        LOGGER.warning("Generation produced no usable text, using fallback")
        return _fallback(request, STATUS_EMPTY)

    return ReplyResult(text=text, used_fallback=False, status=STATUS_MODEL)


async def warm_up(gateway: GenerationGateway, timeout: float | None = None) -> str:
    """
    Trigger lazy initialization of the backend with a one-token request.

    Never raises for backend problems; the outcome is only a status string.
    """
    prompt = build_prompt("Ok", Tone.FRIENDLY, Length.SHORT, "auto")[:WARMUP_PROMPT_CHARS]
    try:
        await asyncio.wait_for(gateway.generate(prompt, WARMUP_PARAMS), timeout)
    except Exception as e:
        LOGGER.info("Warm-up did not complete: %s", e)
        return STATUS_WARMUP_FAILED
    LOGGER.info("Warm-up complete")
    return STATUS_READY
