from __future__ import annotations

import os
from enum import StrEnum
from typing import Final

from dotenv import load_dotenv

from gptease._exceptions import ConfigurationError


class Provider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


_ENV_VARS: Final[dict[Provider, str]] = {
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.GEMINI: "GEMINI_API_KEY",
}


def get_api_key(provider: Provider = Provider.OPENAI) -> str:
    """Return the API key for *provider* or raise ConfigurationError."""
    load_dotenv()
    try:
        env_var = _ENV_VARS[provider]
    except KeyError:
        raise ConfigurationError(f"No config for {provider!s}") from None

    key = os.environ.get(env_var)
    if not key:
        raise ConfigurationError(f"{env_var} environment variable not set")
    return key


__all__ = ["Provider", "get_api_key"]
