"""Local GGUF inference via llama.cpp (Metal/CUDA/CPU).

The model is loaded on the first call, which is normally the warm-up. Loading
and inference are blocking, so both run in a worker thread.
"""
from __future__ import annotations
import asyncio
import logging
import time
from pathlib import Path
from typing import Any

from reply_agent.common.errors import GenerationFailure, GenerationUnavailable
from reply_agent.common.schema import GenerationParameters
from reply_agent.gateway.openai_compat import STOP_SEQUENCES

LOGGER = logging.getLogger("reply_agent.gateway.gguf")


class LlamaCppGateway:
    def __init__(self, model_path: str, n_ctx: int = 2048, n_gpu_layers: int = -1) -> None:
        self.model_path = model_path
        self.model = Path(model_path).name
        self.n_ctx = n_ctx
        self.n_gpu_layers = n_gpu_layers
        self._llm: Any = None
        self._load_task: asyncio.Task | None = None

    def _load(self) -> Any:
        if not Path(self.model_path).exists():
            raise GenerationUnavailable(f"GGUF model not found at {self.model_path}")
        try:
            from llama_cpp import Llama  # type: ignore
        except ImportError as e:
            raise GenerationUnavailable("llama-cpp-python is not installed") from e

        start = time.time()
        llm = Llama(
            model_path=self.model_path,
            n_ctx=self.n_ctx,
            n_gpu_layers=self.n_gpu_layers,
            logits_all=False,
            embedding=False,
            verbose=False,
        )
        LOGGER.info("Loaded %s in %sms", self.model_path, int((time.time() - start) * 1000))
        return llm

    def _on_loaded(self, task: asyncio.Task) -> None:
        if task.cancelled() or task.exception() is not None:
            # let the next call start a fresh load
            self._load_task = None
            return
        self._llm = task.result()

    async def _ensure_loaded(self) -> Any:
        if self._llm is not None:
            return self._llm
        # one load shared by warm-up and user requests; a caller's timeout
        # cancels only its own wait, never the load itself
        if self._load_task is None:
            self._load_task = asyncio.create_task(asyncio.to_thread(self._load))
            self._load_task.add_done_callback(self._on_loaded)
        return await asyncio.shield(self._load_task)

    async def generate(self, prompt: str, params: GenerationParameters) -> str:
        llm = await self._ensure_loaded()
        start = time.time()
        try:
            out = await asyncio.to_thread(
                llm,
                prompt,
                max_tokens=params.max_new_tokens,
                temperature=params.temperature,
                top_p=params.top_p,
                stop=STOP_SEQUENCES,
            )
        except Exception as e:
            LOGGER.error("llama.cpp generation failed: %s", e)
            raise GenerationFailure("local generation failed") from e

        try:
            text = out["choices"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationFailure("malformed llama.cpp output") from e
        usage = out.get("usage", {})
        LOGGER.debug(
            "Latency: %sms | in=%s out=%s",
            int((time.time() - start) * 1000),
            usage.get("prompt_tokens"),
            usage.get("completion_tokens"),
        )
        return str(text or "")
