"""
Chat sessions: a dialogue, a set of tools and the loop that drives the model.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from gptease._exceptions import (
    ContentFilterError,
    NotFinishedError,
    ToolLoopLimitError,
    UnexpectedResponseError,
)
from gptease.client import BaseLLM, default_llm
from gptease.dialogue import Dialogue
from gptease.tools import Tool
from gptease.types.chat import (
    FINISH_CONTENT_FILTER,
    FINISH_FUNCTION_CALL,
    FINISH_LENGTH,
    FINISH_STOP,
    FINISH_TOOL_CALLS,
    TOOL_ROLE,
    ChatTweaks,
    Message,
)
from gptease.types.tool import FUNCTION_CALL_TYPE, ToolCallRequest, ToolCallResult

__all__ = ["Chat"]


class Chat:
    """
    A conversation with the model.

    Keeps the dialogue so far, the tools the model may call back into and the
    parameters to use for API calls. `exchange` and `talk` update the dialogue
    as the conversation goes; it can also be primed directly through
    `instruction`, `user_said`, `assistant_said` and `example_exchange`.

    A chat is not thread safe: run one exchange at a time.
    """

    def __init__(
        self,
        llm: Optional[BaseLLM] = None,
        *,
        model: Optional[str] = None,
        tweaks: Optional[ChatTweaks] = None,
        tools: Iterable[Tool] = (),
        dialogue: Optional[Dialogue] = None,
        max_rounds: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Args:
            llm: Client to send requests through. When omitted, the process
                default (built from ``OPENAI_API_KEY``) is used on first call.
            model: Overrides the client's model.
            tweaks: Sampling parameters; API defaults when omitted.
            tools: Functions the model may call, see `gptease.make_tool`.
            dialogue: Existing dialogue to continue.
            max_rounds: Most tool round trips allowed within one `talk`.
                None means no limit.
            logger: Optional custom logger.
        """
        if max_rounds is not None and max_rounds < 0:
            raise ValueError("max_rounds must not be negative")
        self._llm = llm
        self.model = model
        self.tweaks = tweaks or ChatTweaks()
        self.dialogue = dialogue if dialogue is not None else Dialogue()
        self.max_rounds = max_rounds
        self.logger = logger or logging.getLogger(__name__)
        self._tools: dict[str, Tool] = {}
        for t in tools:
            self.add_tool(t)

    @property
    def llm(self) -> BaseLLM:
        if self._llm is None:
            self._llm = default_llm()
        return self._llm

    @property
    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    def add_tool(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"duplicate tool name {tool.name!r}")
        self._tools[tool.name] = tool

    # --- priming the dialogue ----------------------------------------------
    def instruction(self, text: str) -> None:
        """Add a system message, typically telling the model what role to play."""
        self.dialogue.instruction(text)

    def user_said(self, text: str) -> None:
        self.dialogue.user_said(text)

    def assistant_said(self, text: str) -> None:
        self.dialogue.assistant_said(text)

    def example_exchange(self, user_input: str, response: str) -> None:
        """Add a user message and a model reply, to guide how the model responds."""
        self.dialogue.example_exchange(user_input, response)

    # --- talking -------------------------------------------------------------
    def exchange(self, content: str) -> str:
        """
        Add a message from the user and return the model's response.

        Either the user message and every message that follows from it are
        kept, or, if anything fails or the call is interrupted, the dialogue
        is left exactly as it was.
        """
        if not content:
            raise ValueError("empty content")
        length = len(self.dialogue)
        self.dialogue.user_said(content)
        try:
            return self.talk()
        except BaseException:
            self.dialogue.truncate(length)
            raise

    def talk(self) -> str:
        """
        Ask the model to respond to the dialogue so far.

        Tool calls requested by the model are run and their results sent
        back, as many times as the model asks. The final response is added to
        the dialogue and returned.

        Raises:
            CompletionError: The API call failed.
            ContentFilterError: The response was withheld by the content filter.
            NotFinishedError: The model stopped before producing a response.
            UnexpectedResponseError: The response could not be interpreted.
            ToolLoopLimitError: More than ``max_rounds`` tool round trips.
        """
        rounds = 0
        while True:
            completion = self.llm.complete(
                self.dialogue,
                tools=self.tools,
                tweaks=self.tweaks,
                model=self.model,
            )
            if not completion.choices:
                raise UnexpectedResponseError("API returned no choices")

            choice = completion.choices[0]
            message = choice.message
            finish_reason = choice.finish_reason

            if finish_reason == FINISH_TOOL_CALLS:
                if not message.tool_calls:
                    raise UnexpectedResponseError("no calls provided")
                if self.max_rounds is not None and rounds >= self.max_rounds:
                    raise ToolLoopLimitError(self.max_rounds)
                rounds += 1
                self.dialogue.append(message)
                for call in message.tool_calls:
                    result = self._dispatch(call)
                    self.dialogue.append(
                        Message(role=TOOL_ROLE, content=result.content, tool_call_id=result.id)
                    )
                # Invoke the model again, now with the tool outputs added.
                continue

            if finish_reason == FINISH_FUNCTION_CALL:
                raise UnexpectedResponseError("deprecated function call returned by API")
            if finish_reason == FINISH_CONTENT_FILTER:
                raise ContentFilterError()
            if finish_reason is None or (finish_reason == FINISH_LENGTH and not message.content):
                raise NotFinishedError()
            if finish_reason not in (FINISH_STOP, FINISH_LENGTH):
                raise UnexpectedResponseError(f"unknown finish reason {finish_reason!r}")

            self.dialogue.append(message)
            return message.text

    def _dispatch(self, call: ToolCallRequest) -> ToolCallResult:
        """
        Run one tool call. Failures become the result text, for the model to read.

        Every failure, including an exception raised by the tool itself, is
        reported as its message prefixed with ``error: ``.
        """
        if call.type != FUNCTION_CALL_TYPE:
            return ToolCallResult(call.id, f"error: unknown tool call type {call.type}")

        tool = self._tools.get(call.name)
        if tool is None:
            self.logger.warning("Model called unknown tool %s", call.name)
            return ToolCallResult(call.id, f"error: no tool found with name {call.name}")

        self.logger.info("Calling tool %s", call.name)
        try:
            output = tool.handler(call.arguments)
        except Exception as exc:
            self.logger.warning("Tool %s failed: %s", call.name, exc)
            return ToolCallResult(call.id, f"error: {exc}")
        return ToolCallResult(call.id, output)
