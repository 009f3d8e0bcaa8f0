"""Generation gateway interface."""
from __future__ import annotations
from typing import Protocol, runtime_checkable

from reply_agent.common.errors import GenerationUnavailable
from reply_agent.common.schema import GenerationParameters


@runtime_checkable
class GenerationGateway(Protocol):
    """
    Anything that turns a prompt into text.

    Implementations raise GenerationFailure (or GenerationUnavailable) on
    faults and return "" when the model produced nothing. They must not retry
    or cache.
    """

    async def generate(self, prompt: str, params: GenerationParameters) -> str:
        ...


class UnavailableGateway:
    """Gateway used when no backend is configured; every call fails."""

    model = "none"

    async def generate(self, prompt: str, params: GenerationParameters) -> str:
        raise GenerationUnavailable("no generation backend configured")
