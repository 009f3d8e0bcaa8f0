"""Generation backends and the factory that picks one from Settings."""
from __future__ import annotations

from reply_agent.common.config import Settings
from reply_agent.gateway.base import GenerationGateway, UnavailableGateway

__all__ = ["GenerationGateway", "UnavailableGateway", "build_gateway"]


def build_gateway(settings: Settings) -> GenerationGateway:
    """
    Instantiate the backend named by settings.backend.

    Args:
        settings: Loaded configuration.

    Raises:
        ValueError: Unknown backend name.
    """
    backend = settings.backend.lower()
    if backend == "none":
        return UnavailableGateway()
    if backend == "http":
        from reply_agent.gateway.openai_compat import OpenAICompatGateway

        return OpenAICompatGateway(
            base_url=settings.base_url,
            model=settings.model_id,
            api_key=settings.api_key,
            timeout=settings.request_timeout,
        )
    if backend == "gguf":
        from reply_agent.gateway.llama_local import LlamaCppGateway

        return LlamaCppGateway(
            model_path=settings.model_path,
            n_ctx=settings.n_ctx,
            n_gpu_layers=settings.n_gpu_layers,
        )
    raise ValueError(f"Unknown generation backend: {settings.backend!r}")
