from __future__ import annotations

import asyncio

import pytest

from reply_agent.common.errors import GenerationUnavailable, InputInvalid
from reply_agent.common.schema import GenerationParameters, Length, ReplyRequest, Tone
from reply_agent.gateway.base import GenerationGateway, UnavailableGateway
from reply_agent.pipeline.reply import (
    STATUS_EMPTY,
    STATUS_FAILED,
    STATUS_MODEL,
    STATUS_READY,
    STATUS_WARMUP_FAILED,
    WARMUP_PROMPT_CHARS,
    draft_reply,
    warm_up,
)


class _FakeGateway:
    def __init__(self, text: str = "", exc: Exception | None = None, delay: float = 0.0) -> None:
        self.text = text
        self.exc = exc
        self.delay = delay
        self.calls: list[tuple[str, GenerationParameters]] = []

    async def generate(self, prompt: str, params: GenerationParameters) -> str:
        self.calls.append((prompt, params))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.text


def _request(**overrides: object) -> ReplyRequest:
    values: dict[str, object] = {
        "incoming": "Can we move to 4 PM instead?",
        "context": "You: Still on for tomorrow?\nThem: Yes, 3 PM works.",
        "tone": Tone.FRIENDLY,
        "length": Length.SHORT,
    }
    values.update(overrides)
    return ReplyRequest(**values)  # type: ignore[arg-type]


def test_fake_satisfies_protocol() -> None:
    assert isinstance(_FakeGateway(), GenerationGateway)
    assert isinstance(UnavailableGateway(), GenerationGateway)


def test_model_reply_is_normalized() -> None:
    gw = _FakeGateway(text="Assistant: **Sure**, 4 PM works for me. ```ignore```")
    result = asyncio.run(draft_reply(_request(), gw))
    assert result.text == "Sure, 4 PM works for me."
    assert result.used_fallback is False
    assert result.status == STATUS_MODEL


def test_prompt_and_params_reach_gateway() -> None:
    gw = _FakeGateway(text="ok")
    asyncio.run(draft_reply(_request(length=Length.LONG), gw, temperature=0.5, top_p=0.8))
    prompt, params = gw.calls[0]
    assert "Conversation so far:" in prompt
    assert prompt.endswith("User message: Can we move to 4 PM instead?\n\nAssistant:")
    assert params == GenerationParameters(max_new_tokens=196, temperature=0.5, top_p=0.8)


def test_gateway_failure_uses_fallback() -> None:
    gw = _FakeGateway(exc=GenerationUnavailable("not loaded"))
    result = asyncio.run(draft_reply(_request(), gw))
    assert result.used_fallback is True
    assert result.status == STATUS_FAILED
    assert result.text == "Hey! Can we move to 4 PM instead? I can do that."


def test_unexpected_exception_uses_fallback() -> None:
    gw = _FakeGateway(exc=RuntimeError("CUDA out of memory"))
    result = asyncio.run(draft_reply(_request(), gw))
    assert result.used_fallback is True
    assert result.status == STATUS_FAILED


def test_unconfigured_backend_uses_fallback() -> None:
    result = asyncio.run(draft_reply(_request(incoming="Thanks so much!", tone="formal"), UnavailableGateway()))
    assert result.text == "Hello, You're welcome!"
    assert result.used_fallback is True


def test_timeout_uses_fallback() -> None:
    gw = _FakeGateway(text="too late", delay=1.0)
    result = asyncio.run(draft_reply(_request(), gw, timeout=0.01))
    assert result.used_fallback is True
    assert result.status == STATUS_FAILED


@pytest.mark.parametrize("raw", ["", "   ", "Assistant:", "```just code```"])
def test_empty_generation_uses_fallback(raw: str) -> None:
    result = asyncio.run(draft_reply(_request(), _FakeGateway(text=raw)))
    assert result.used_fallback is True
    assert result.status == STATUS_EMPTY
    assert result.text


def test_blank_incoming_is_rejected_before_generation() -> None:
    gw = _FakeGateway(text="should not be used")
    with pytest.raises(InputInvalid):
        asyncio.run(draft_reply(_request(incoming="   "), gw))
    assert gw.calls == []


def test_share_url_encodes_reply() -> None:
    result = asyncio.run(draft_reply(_request(), _FakeGateway(text="Sure, 4 PM & coffee?")))
    assert result.share_url == "https://wa.me/?text=Sure%2C%204%20PM%20%26%20coffee%3F"


def test_warm_up_sends_one_token_request() -> None:
    gw = _FakeGateway(text="x")
    assert asyncio.run(warm_up(gw)) == STATUS_READY
    prompt, params = gw.calls[0]
    assert len(prompt) == WARMUP_PROMPT_CHARS
    assert params.max_new_tokens == 1


def test_warm_up_never_raises() -> None:
    assert asyncio.run(warm_up(UnavailableGateway())) == STATUS_WARMUP_FAILED
    assert asyncio.run(warm_up(_FakeGateway(exc=ValueError("boom")))) == STATUS_WARMUP_FAILED


def test_warm_up_and_request_run_independently() -> None:
    gw = _FakeGateway(text="See you at 4!", delay=0.01)

    async def both() -> tuple[str, str]:
        status, result = await asyncio.gather(warm_up(gw), draft_reply(_request(), gw))
        return status, result.text

    status, text = asyncio.run(both())
    assert status == STATUS_READY
    assert text == "See you at 4!"
    assert sorted(p.max_new_tokens for _, p in gw.calls) == [1, 64]
