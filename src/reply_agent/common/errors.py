"""Exception types shared by the pipeline and the generation backends."""
from __future__ import annotations


class ReplyAgentError(Exception):
    """Base class for all reply agent errors."""


class InputInvalid(ReplyAgentError, ValueError):
    """The incoming message is empty after trimming; generation must not run."""


class GenerationFailure(ReplyAgentError):
    """The generation backend raised, timed out, or returned a malformed payload."""


class GenerationUnavailable(GenerationFailure):
    """The backend is absent, not yet initialized, or unreachable."""


class GenerationEmpty(ReplyAgentError):
    """Generation finished but nothing usable survived normalization."""
