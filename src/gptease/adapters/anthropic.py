"""Anthropic adapter for pure request/response transformations."""

from __future__ import annotations

import json
import logging
from typing import Any, Final, Optional, Sequence

from anthropic.types import Message as AnthropicMessage

from gptease.tools import Tool
from gptease.types.chat import (
    ASSISTANT_ROLE,
    FINISH_CONTENT_FILTER,
    FINISH_LENGTH,
    FINISH_STOP,
    FINISH_TOOL_CALLS,
    SYSTEM_ROLE,
    TOOL_ROLE,
    USER_ROLE,
    ChatTweaks,
    Choice,
    Completion,
    Message,
)
from gptease.types.tool import ToolCallRequest

logger = logging.getLogger(__name__)

# Anthropic requires max_tokens
DEFAULT_MAX_TOKENS: Final = 4096

# Anthropic stop reasons in terms of the OpenAI finish indicators the loop
# understands. "pause_turn" means the turn is not over yet.
STOP_REASONS: Final[dict[str, Optional[str]]] = {
    "end_turn": FINISH_STOP,
    "stop_sequence": FINISH_STOP,
    "max_tokens": FINISH_LENGTH,
    "tool_use": FINISH_TOOL_CALLS,
    "refusal": FINISH_CONTENT_FILTER,
    "pause_turn": None,
}


class AnthropicRequestAdapter:
    """Adapter for converting between generic format and Anthropic format."""

    def build_messages(self, messages: Sequence[Message]) -> tuple[str, list[dict[str, Any]]]:
        """Split out the system prompt and convert the rest of the dialogue."""
        system_parts: list[str] = []
        anthropic_messages: list[dict[str, Any]] = []
        pending_results: Optional[list[dict[str, Any]]] = None

        for msg in messages:
            if msg.role == SYSTEM_ROLE:
                system_parts.append(msg.text)
                continue

            # Tool results travel as user messages; results answering the same
            # assistant turn must share one message.
            if msg.role == TOOL_ROLE:
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id,
                    "content": msg.text,
                }
                if pending_results is None:
                    pending_results = []
                    anthropic_messages.append({"role": USER_ROLE, "content": pending_results})
                pending_results.append(block)
                continue

            pending_results = None

            if msg.role == ASSISTANT_ROLE and msg.tool_calls:
                content: list[dict[str, Any]] = []
                if msg.content:
                    content.append({"type": "text", "text": msg.content})
                for tc in msg.tool_calls:
                    content.append(
                        {
                            "type": "tool_use",
                            "id": tc.id,
                            "name": tc.name,
                            "input": self._tool_input(tc.arguments),
                        }
                    )
                anthropic_messages.append({"role": ASSISTANT_ROLE, "content": content})
                continue

            anthropic_messages.append({"role": msg.role, "content": msg.text})

        return "\n\n".join(system_parts), anthropic_messages

    @staticmethod
    def _tool_input(arguments: str) -> dict[str, Any]:
        if not arguments.strip():
            return {}
        try:
            value = json.loads(arguments)
        except json.JSONDecodeError:
            logger.warning("Bad JSON in tool call arguments: %s", arguments)
            return {}
        return value if isinstance(value, dict) else {}

    def build_tools(self, tools: Sequence[Tool]) -> list[dict[str, Any]]:
        return [
            {
                "name": t.name,
                "description": t.description,
                "input_schema": t.schema,
            }
            for t in tools
        ]

    def to_provider(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool],
        tweaks: Optional[ChatTweaks],
    ) -> dict[str, Any]:
        """Build the keyword arguments for ``messages.create`` (model excluded)."""
        system_prompt, anthropic_messages = self.build_messages(messages)
        request: dict[str, Any] = {"messages": anthropic_messages}
        if system_prompt:
            request["system"] = system_prompt
        if tools:
            request["tools"] = self.build_tools(tools)
        if tweaks is not None:
            request.update(tweaks.as_dict())
        request.setdefault("max_tokens", DEFAULT_MAX_TOKENS)
        return request

    def from_provider(self, raw: AnthropicMessage) -> Completion:
        """Convert Anthropic response to unified Completion."""
        text_parts: list[str] = []
        tool_calls: list[ToolCallRequest] = []

        for block in raw.content or []:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    ToolCallRequest(
                        id=block.id,
                        name=block.name,
                        arguments=json.dumps(block.input),
                    )
                )

        finish_reason = STOP_REASONS.get(raw.stop_reason, raw.stop_reason)
        message = Message(
            role=ASSISTANT_ROLE,
            content="".join(text_parts),
            tool_calls=tuple(tool_calls) or None,
        )
        return Completion(choices=[Choice(finish_reason=finish_reason, message=message)], raw=raw)
