"""
Error taxonomy for gptease.

Runtime failures of an exchange derive from `GptEaseError`. Noisy provider
tracebacks are translated into a `CompletionError` that preserves the original
exception. Setup mistakes (bad credentials, bad tool signatures, unsupported
argument types) are raised as configuration errors and are never retried.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

import anthropic
import openai

__all__: tuple[str, ...] = (
    "GptEaseError",
    "CompletionError",
    "ContentFilterError",
    "NotFinishedError",
    "UnexpectedResponseError",
    "ToolLoopLimitError",
    "ConfigurationError",
    "ToolSignatureError",
    "UnsupportedTypeError",
    "ToolInputError",
    "ToolOutputError",
    "classify_error",
)


class GptEaseError(RuntimeError):
    """Base class for errors that abort an exchange."""


class CompletionError(GptEaseError):
    """The remote completion call failed.

    Attributes:
        original_exc: The underlying provider exception.
    """

    original_exc: Exception

    def __init__(self, message: str, original_exc: Exception) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        self.__cause__ = original_exc


class ContentFilterError(GptEaseError):
    """Response omitted due to content filter."""

    def __init__(self, message: str = "response omitted due to content filter") -> None:
        super().__init__(message)


class NotFinishedError(GptEaseError):
    """Response generation not finished."""

    def __init__(self, message: str = "response generation not finished") -> None:
        super().__init__(message)


class UnexpectedResponseError(GptEaseError):
    """The API returned something the completion loop cannot interpret."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"unexpected response from API: {detail}")
        self.detail = detail


class ToolLoopLimitError(GptEaseError):
    """The model kept requesting tools past the configured round limit."""

    def __init__(self, max_rounds: int) -> None:
        super().__init__(f"tool call round limit of {max_rounds} exceeded")
        self.max_rounds = max_rounds


class ConfigurationError(RuntimeError):
    """Missing or invalid process configuration, such as an API key."""


class ToolSignatureError(TypeError):
    """The function handed to make_tool does not have a usable signature."""


class UnsupportedTypeError(TypeError):
    """No schema can be derived for this type."""

    def __init__(self, tp: object) -> None:
        super().__init__(f"unsupported type: {tp!r}")
        self.type = tp


class ToolInputError(ValueError):
    """Tool arguments sent by the model could not be decoded."""


class ToolOutputError(ValueError):
    """A tool result could not be encoded as JSON."""


RATE_LIMIT_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.RateLimitError,
    anthropic.RateLimitError,
)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIConnectionError,
    anthropic.APIConnectionError,
    TimeoutError,
    ConnectionError,
)

API_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIError,
    anthropic.APIError,
)


def classify_error(
    exc: Exception,
    logger: Optional[logging.Logger] = None,
) -> CompletionError:
    """Wrap an SDK exception in CompletionError with a friendly, concise message."""
    log = logger or logging.getLogger("gptease.exceptions")

    if isinstance(exc, RATE_LIMIT_ERRORS):
        msg = "Rate-limit exceeded, please retry later"
    elif isinstance(exc, CONN_ERRORS):
        msg = "Connection problem, unable to reach the LLM provider"
    elif isinstance(exc, API_ERRORS):
        status = getattr(exc, "status_code", None)
        msg = f"Provider reported an error ({status})" if status else "Provider reported an error"
    else:
        msg = exc.__class__.__name__

    log.warning("Wrapping provider exception", extra={"exc": exc})
    return CompletionError(f"{msg}: {exc}", exc)
