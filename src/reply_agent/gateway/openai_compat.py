"""Gateway for OpenAI-compatible completion servers (vLLM, llama.cpp server, ...)."""
from __future__ import annotations
import logging
import time
from typing import Any

import httpx

from reply_agent.common.errors import GenerationFailure, GenerationUnavailable
from reply_agent.common.schema import GenerationParameters
from reply_agent.common.templates import USER_PREFIX

LOGGER = logging.getLogger("reply_agent.gateway.http")

# Stop before the model starts inventing the next user turn.
STOP_SEQUENCES = [f"\n{USER_PREFIX.strip()}", "\nSystem:"]


class OpenAICompatGateway:
    """Calls POST {base_url}/v1/completions with the rendered prompt."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str = "not-required",
        timeout: float = 60.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.timeout = timeout

    def _payload(self, prompt: str, params: GenerationParameters) -> dict[str, Any]:
        return {
            "model": self.model,
            "prompt": prompt,
            "max_tokens": params.max_new_tokens,
            "temperature": params.temperature,
            "top_p": params.top_p,
            "stop": STOP_SEQUENCES,
            "stream": False,
        }

    async def generate(self, prompt: str, params: GenerationParameters) -> str:
        url = f"{self.base_url}/v1/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}

        start = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(url, headers=headers, json=self._payload(prompt, params))
                r.raise_for_status()
                data = r.json()
        except httpx.TimeoutException as e:
            LOGGER.error("Completion request timed out after %ss: %s", self.timeout, e)
            raise GenerationUnavailable("generation backend timed out") from e
        except httpx.HTTPError as e:
            LOGGER.error("Completion request failed: %s", e)
            raise GenerationUnavailable("generation backend error") from e
        except ValueError as e:
            LOGGER.error("Completion response is not JSON: %s", e)
            raise GenerationFailure("malformed completion response") from e

        latency_ms = int((time.time() - start) * 1000)
        try:
            text = data["choices"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            LOGGER.error("Malformed completion response: %s", e)
            raise GenerationFailure("malformed completion response") from e

        usage = data.get("usage") or {}
        LOGGER.debug(
            "Latency: %sms | in=%s out=%s",
            latency_ms,
            usage.get("prompt_tokens"),
            usage.get("completion_tokens"),
        )
        return str(text or "")
