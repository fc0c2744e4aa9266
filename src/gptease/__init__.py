"""
gptease - chat with a model that can call back into your Python functions.
"""

import logging

from .chat import Chat
from .client import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_EMBEDDING_MODEL,
    AnthropicLLM,
    BaseLLM,
    GeminiLLM,
    OpenAILLM,
    create_llm,
    default_llm,
    set_default_llm,
)
from .dialogue import Dialogue
from .embed import embed
from .provider import Provider, get_api_key
from .schema import FieldSpec, derive_schema, param
from .tools import Tool, make_tool, tool
from .types import ChatTweaks, Embedding, Message, ToolCallRequest, ToolCallResult
from ._exceptions import (
    CompletionError,
    ConfigurationError,
    ContentFilterError,
    GptEaseError,
    NotFinishedError,
    ToolInputError,
    ToolLoopLimitError,
    ToolOutputError,
    ToolSignatureError,
    UnexpectedResponseError,
    UnsupportedTypeError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "Chat",
    "ChatTweaks",
    "Dialogue",
    "Message",
    "Tool",
    "make_tool",
    "tool",
    "param",
    "FieldSpec",
    "derive_schema",
    "ToolCallRequest",
    "ToolCallResult",
    "Embedding",
    "embed",
    "BaseLLM",
    "OpenAILLM",
    "AnthropicLLM",
    "GeminiLLM",
    "create_llm",
    "default_llm",
    "set_default_llm",
    "DEFAULT_CHAT_MODEL",
    "DEFAULT_EMBEDDING_MODEL",
    "Provider",
    "get_api_key",
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
]
