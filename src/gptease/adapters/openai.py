"""OpenAI adapter for pure request/response transformations."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from openai.types.chat import ChatCompletion, ChatCompletionMessage

from gptease.tools import Tool
from gptease.types.chat import ASSISTANT_ROLE, ChatTweaks, Choice, Completion, Message
from gptease.types.tool import FUNCTION_CALL_TYPE, ToolCallRequest


class OpenAIRequestAdapter:
    """Adapter for converting between generic format and OpenAI format."""

    def build_messages(self, messages: Sequence[Message]) -> list[dict[str, Any]]:
        """Convert dialogue messages to OpenAI's expected format."""
        openai_messages: list[dict[str, Any]] = []
        for msg in messages:
            openai_msg: dict[str, Any] = {"role": msg.role}

            # Handle tool calls (for assistant messages with function calls)
            if msg.tool_calls:
                openai_msg["tool_calls"] = [self._tool_call_to(tc) for tc in msg.tool_calls]
                # content may be null when tool_calls is present
                openai_msg["content"] = msg.content
            else:
                openai_msg["content"] = msg.text

            # Handle tool call ID (for tool response messages)
            if msg.tool_call_id:
                openai_msg["tool_call_id"] = msg.tool_call_id

            openai_messages.append(openai_msg)

        return openai_messages

    @staticmethod
    def _tool_call_to(tc: ToolCallRequest) -> dict[str, Any]:
        if tc.type == FUNCTION_CALL_TYPE:
            return {
                "id": tc.id,
                "type": tc.type,
                "function": {"name": tc.name, "arguments": tc.arguments},
            }
        # Custom tool calls carry free-form input rather than JSON arguments.
        return {
            "id": tc.id,
            "type": tc.type,
            "custom": {"name": tc.name, "input": tc.arguments},
        }

    def build_tools(self, tools: Sequence[Tool]) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description,
                    "parameters": t.schema,
                },
            }
            for t in tools
        ]

    def to_provider(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool],
        tweaks: Optional[ChatTweaks],
    ) -> dict[str, Any]:
        """Build the keyword arguments for ``chat.completions.create`` (model excluded)."""
        request: dict[str, Any] = {"messages": self.build_messages(messages)}
        if tools:
            request["tools"] = self.build_tools(tools)
        if tweaks is not None:
            request.update(tweaks.as_dict())
        return request

    def message_from(self, message: ChatCompletionMessage) -> Message:
        """Convert an OpenAI response message to a dialogue Message."""
        tool_calls = None
        if message.tool_calls:
            tool_calls = tuple(self._tool_call_from(tc) for tc in message.tool_calls)
        return Message(
            role=ASSISTANT_ROLE,
            content=message.content,
            tool_calls=tool_calls,
        )

    def _tool_call_from(self, tc: Any) -> ToolCallRequest:
        # Function tool calls carry ``function``; other call types (e.g. custom)
        # are kept with their declared type so the loop can refuse them.
        function = getattr(tc, "function", None)
        if function is not None:
            return ToolCallRequest(
                id=tc.id,
                name=function.name,
                arguments=function.arguments or "",
                type=tc.type or FUNCTION_CALL_TYPE,
            )
        custom = getattr(tc, "custom", None)
        return ToolCallRequest(
            id=tc.id,
            name=getattr(custom, "name", ""),
            arguments=getattr(custom, "input", ""),
            type=tc.type,
        )

    def from_provider(self, raw: ChatCompletion) -> Completion:
        """Convert OpenAI response to unified Completion."""
        choices = [
            Choice(finish_reason=c.finish_reason, message=self.message_from(c.message))
            for c in raw.choices or []
        ]
        return Completion(choices=choices, raw=raw)
