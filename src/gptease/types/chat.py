"""Provider-neutral chat types."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Literal, Optional

from gptease.types.tool import ToolCallRequest

SYSTEM_ROLE = "system"
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
TOOL_ROLE = "tool"
Role = Literal["system", "user", "assistant", "tool"]

# Finish indicators, in the vocabulary of the OpenAI chat completions API.
# Other providers are mapped onto these by their adapter.
FINISH_STOP = "stop"
FINISH_LENGTH = "length"
FINISH_TOOL_CALLS = "tool_calls"
FINISH_CONTENT_FILTER = "content_filter"
FINISH_FUNCTION_CALL = "function_call"


@dataclass(frozen=True, slots=True)
class Message:
    """A single entry in a dialogue."""

    role: Role
    content: Optional[str] = None
    tool_calls: Optional[tuple[ToolCallRequest, ...]] = None
    tool_call_id: Optional[str] = None

    @property
    def text(self) -> str:
        return self.content or ""


@dataclass
class ChatTweaks:
    """Parameters that alter how the model responds.

    Unset (None) or zero values are not sent, so the API default applies.
    Temperature and top_p are best not changed together.
    """

    # Sampling temperature between 0 and 2. Higher is more random.
    temperature: Optional[float] = None
    # Nucleus sampling: only tokens within the top_p probability mass are considered.
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None

    def as_dict(self) -> dict[str, Any]:
        """
        Convert to a dictionary of request parameters, dropping unset ones.

        Returns:
            Dictionary representation of the tweaks
        """
        return {k: v for k, v in asdict(self).items() if v}

    def copy(self, **kwargs: Any) -> "ChatTweaks":
        """
        Create a copy of these tweaks with optional overrides.

        Args:
            **kwargs: Field values to override

        Returns:
            New ChatTweaks instance with overrides applied
        """
        return replace(self, **kwargs)


@dataclass(frozen=True, slots=True)
class Choice:
    finish_reason: Optional[str]
    message: Message


@dataclass(slots=True)
class Completion:
    """Unified completion response for all providers."""

    choices: list[Choice] = field(default_factory=list)
    raw: Any = None
