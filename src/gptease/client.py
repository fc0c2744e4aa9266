"""
Synchronous LLM clients with a unified complete() method.

The clients are the one place the remote API is touched. Everything they
return is provider neutral (`Completion`), so the completion loop in
`gptease.chat` never sees SDK objects.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Final, Optional, Protocol, Self, Sequence

from anthropic import Anthropic
from openai import OpenAI

from gptease._exceptions import UnexpectedResponseError, classify_error
from gptease.adapters import (
    AnthropicRequestAdapter,
    GeminiRequestAdapter,
    OpenAIRequestAdapter,
)
from gptease.provider import Provider, get_api_key
from gptease.tools import Tool
from gptease.types.chat import ChatTweaks, Completion, Message
from gptease.types.embedding import Embedding

DEFAULT_CHAT_MODEL: Final = "gpt-4-turbo-preview"
DEFAULT_ANTHROPIC_MODEL: Final = "claude-3-5-haiku-latest"
DEFAULT_GEMINI_MODEL: Final = "gemini-2.0-flash"
DEFAULT_EMBEDDING_MODEL: Final = "text-embedding-ada-002"
_DEFAULT_GEMINI_BASE_URL: Final = "https://generativelanguage.googleapis.com/v1beta/openai/"


class RequestAdapter(Protocol):
    """Protocol for adapting between generic chat format and provider-specific format."""

    def to_provider(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool],
        tweaks: Optional[ChatTweaks],
    ) -> dict[str, Any]:
        """Convert dialogue, tools and tweaks to provider-specific request arguments."""
        ...

    def from_provider(self, raw: Any) -> Completion:
        """Convert provider response to unified Completion."""
        ...


class BaseLLM(ABC):
    """
    Abstract base class for synchronous LLM wrappers.
    """

    def __init__(
        self,
        model: str,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Initializes the base LLM client.

        Args:
            model: The identifier of the LLM model to be used.
            logger: Optional logger instance. If None, a logger named after
                    this module will be used.
            name: Optional name for this component, used in logging.
                  If None, defaults to the concrete class's name.
        """
        self.model = model
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

    @abstractmethod
    def _complete_impl(self, model: str, request: dict[str, Any]) -> Any:
        """
        Send one completion request and return the raw provider response.

        Args:
            model: Model identifier for this request.
            request: Provider-specific arguments built by the adapter.
        """
        ...

    @property
    @abstractmethod
    def adapter(self) -> RequestAdapter:
        """Request adapter for this provider."""
        ...

    def complete(
        self,
        messages: Sequence[Message],
        *,
        tools: Sequence[Tool] = (),
        tweaks: Optional[ChatTweaks] = None,
        model: Optional[str] = None,
    ) -> Completion:
        """
        Send the dialogue and return the model's response.

        Raises:
            CompletionError: The request failed; the SDK exception is kept
                as ``original_exc``.
        """
        request = self.adapter.to_provider(messages, tools, tweaks)
        try:
            raw = self._complete_impl(model or self.model, request)
        except Exception as exc:
            raise classify_error(exc, self.logger) from exc
        return self.adapter.from_provider(raw)

    def embed(self, text: str, *, model: str = DEFAULT_EMBEDDING_MODEL) -> tuple[Embedding, int]:
        raise NotImplementedError(f"{self.name} does not support embeddings")

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    def close(self) -> None:
        """
        Close the underlying HTTP client. Safe to call multiple times.
        """
        client = getattr(self, "_client", None)
        close = getattr(client, "close", None)
        if close:
            close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class OpenAILLM(BaseLLM):
    """
    OpenAI LLM implementation.

    Use ``OpenAILLM.from_client`` when you already have an ``OpenAI`` instance.
    """

    def __init__(
        self,
        model: str = DEFAULT_CHAT_MODEL,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(model=model, logger=logger, name=name)
        self._client = OpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = OpenAIRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: OpenAI,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build an ``OpenAILLM`` around an already‑configured ``OpenAI`` client.
        """
        if not isinstance(client, OpenAI):
            raise TypeError(
                f"{cls.__name__}.from_client expects OpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseLLM.__init__(self, model=model, logger=logger, name=name)
        self._client = client
        self._adapter = OpenAIRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        """Request adapter for OpenAI provider."""
        return self._adapter

    def _complete_impl(self, model: str, request: dict[str, Any]) -> Any:
        self._log(f"Sending request to model {model} ({len(request['messages'])} messages)")
        return self._client.chat.completions.create(model=model, **request)

    def embed(self, text: str, *, model: str = DEFAULT_EMBEDDING_MODEL) -> tuple[Embedding, int]:
        """
        Compute a vector embedding of *text*.

        Returns the embedding and the number of tokens the text took up.
        """
        self._log(f"Requesting embedding from model {model}", logging.DEBUG)
        try:
            resp = self._client.embeddings.create(model=model, input=[text])
        except Exception as exc:
            raise classify_error(exc, self.logger) from exc
        if not resp.data:
            raise UnexpectedResponseError("no embedding returned")
        return Embedding(resp.data[0].embedding), resp.usage.prompt_tokens


class GeminiLLM(OpenAILLM):
    """
    Gemini LLM implementation via the OpenAI-compatible endpoint.
    """

    def __init__(
        self,
        model: str = DEFAULT_GEMINI_MODEL,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: str = _DEFAULT_GEMINI_BASE_URL,
    ) -> None:
        super().__init__(
            model,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            logger=logger,
            name=name,
            base_url=base_url,
        )
        self._adapter = GeminiRequestAdapter()


class AnthropicLLM(BaseLLM):
    """
    Anthropic LLM implementation.

    Use ``AnthropicLLM.from_client`` when you already have an ``Anthropic`` instance.
    """

    def __init__(
        self,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(model=model, logger=logger, name=name)
        self._client = Anthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = AnthropicRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: Anthropic,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Wrap an existing ``Anthropic`` client.
        """
        if not isinstance(client, Anthropic):
            raise TypeError(
                f"AnthropicLLM.from_client expects Anthropic; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseLLM.__init__(self, model=model, logger=logger, name=name)
        self._client = client
        self._adapter = AnthropicRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        """Request adapter for Anthropic provider."""
        return self._adapter

    def _complete_impl(self, model: str, request: dict[str, Any]) -> Any:
        self._log(f"Sending request to model {model} ({len(request['messages'])} messages)")
        return self._client.messages.create(model=model, **request)


# Factory for creating LLM instances

_LLM_REGISTRY: Final[dict[Provider, type[BaseLLM]]] = {
    Provider.OPENAI: OpenAILLM,
    Provider.ANTHROPIC: AnthropicLLM,
    Provider.GEMINI: GeminiLLM,
}


def create_llm(
    provider: Provider = Provider.OPENAI,
    model: Optional[str] = None,
    *,
    api_key: str | None = None,
    client: OpenAI | Anthropic | None = None,
    logger: logging.Logger | None = None,
    **provider_kwargs: Any,
) -> BaseLLM:
    """
    Factory for creating any supported LLM.

    Args:
        provider: Which provider to use (OPENAI, ANTHROPIC, GEMINI).
        model: Model identifier; each provider has a default.
        api_key: Overrides automatic lookup; if omitted, pulled from env.
        client: Optional pre-configured client instance to use.
            - For Provider.OPENAI and Provider.GEMINI: an OpenAI instance
            - For Provider.ANTHROPIC: an Anthropic instance
        logger: Optional custom logger.
        **provider_kwargs: Any extra args to pass through (timeout, max_retries, base_url).

    Raises:
        ConfigurationError: No API key was given and none is set in the environment.
    """
    try:
        llm_cls = _LLM_REGISTRY[provider]
    except KeyError as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    if client is not None:  # use caller‑supplied client verbatim
        if model is None:
            raise ValueError("model is required when passing a client")
        return llm_cls.from_client(model, client, logger=logger)

    key = api_key or get_api_key(provider)
    if model is not None:
        provider_kwargs["model"] = model
    return llm_cls(api_key=key, logger=logger, **provider_kwargs)


# Process-wide default, built from the environment the first time it is needed.

_default_llm: Optional[BaseLLM] = None
_default_lock = threading.Lock()


def default_llm() -> BaseLLM:
    """
    Return the default LLM client, an OpenAI client keyed by ``OPENAI_API_KEY``.

    Raises:
        ConfigurationError: The API key is not set.
    """
    global _default_llm
    with _default_lock:
        if _default_llm is None:
            _default_llm = create_llm(Provider.OPENAI)
        return _default_llm


def set_default_llm(llm: Optional[BaseLLM]) -> None:
    """Replace the default LLM client; ``None`` resets it to be rebuilt on next use."""
    global _default_llm
    with _default_lock:
        _default_llm = llm
