"""Pure transformation adapters for different LLM providers."""

from .openai import OpenAIRequestAdapter
from .anthropic import AnthropicRequestAdapter

# Gemini is reached through its OpenAI-compatible endpoint, so the wire format is shared.
GeminiRequestAdapter = OpenAIRequestAdapter

__all__ = [
    "OpenAIRequestAdapter",
    "AnthropicRequestAdapter",
    "GeminiRequestAdapter",
]
