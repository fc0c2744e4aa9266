"""Shared fixtures: a scripted stand-in for the remote API."""

from __future__ import annotations

from typing import Any, Optional, Sequence

import pytest

from gptease import client as client_module
from gptease.client import BaseLLM
from gptease.tools import Tool
from gptease.types.chat import (
    ASSISTANT_ROLE,
    ChatTweaks,
    Choice,
    Completion,
    Message,
)
from gptease.types.tool import ToolCallRequest


class PassthroughAdapter:
    """Hands the neutral request straight to the fake and its replies straight back."""

    def to_provider(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool],
        tweaks: Optional[ChatTweaks],
    ) -> dict[str, Any]:
        return {"messages": list(messages), "tools": list(tools), "tweaks": tweaks}

    def from_provider(self, raw: Completion) -> Completion:
        return raw


class FakeLLM(BaseLLM):
    """Returns queued completions in order; a queued exception is raised instead."""

    def __init__(self, *replies: Any, model: str = "fake-model") -> None:
        super().__init__(model=model)
        self.replies = list(replies)
        self.requests: list[dict[str, Any]] = []
        self._adapter = PassthroughAdapter()

    @property
    def adapter(self) -> PassthroughAdapter:
        return self._adapter

    def _complete_impl(self, model: str, request: dict[str, Any]) -> Any:
        self.requests.append({"model": model, **request})
        if not self.replies:
            raise AssertionError("FakeLLM ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


def reply(content: Optional[str], finish_reason: Optional[str] = "stop") -> Completion:
    return Completion(
        choices=[
            Choice(
                finish_reason=finish_reason,
                message=Message(role=ASSISTANT_ROLE, content=content),
            )
        ]
    )


def tool_calls(*calls: tuple[str, str, str], call_type: str = "function") -> Completion:
    """A completion asking for (id, name, arguments) calls."""
    requests = tuple(
        ToolCallRequest(id=i, name=n, arguments=a, type=call_type) for i, n, a in calls
    )
    return Completion(
        choices=[
            Choice(
                finish_reason="tool_calls",
                message=Message(role=ASSISTANT_ROLE, content=None, tool_calls=requests),
            )
        ]
    )


@pytest.fixture(autouse=True)
def reset_default_llm():
    """Keep the process-wide default client from leaking between tests."""
    client_module.set_default_llm(None)
    yield
    client_module.set_default_llm(None)
