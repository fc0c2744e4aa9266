"""The ordered message log of a chat."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional, Sequence

from gptease.types.chat import (
    ASSISTANT_ROLE,
    SYSTEM_ROLE,
    USER_ROLE,
    Message,
)


class Dialogue(Sequence[Message]):
    """
    Messages exchanged between the user, the system, the model and tools.

    Messages are only ever appended. The one way back is `truncate`, which
    restores the dialogue to a length recorded earlier, so a failed multi
    message exchange can be undone as a unit.
    """

    def __init__(self, messages: Optional[Iterable[Message]] = None) -> None:
        self._messages: list[Message] = list(messages or ())

    def __getitem__(self, index):
        return self._messages[index]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._messages!r})"

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def truncate(self, length: int) -> None:
        """Drop everything after the first *length* messages."""
        if not 0 <= length <= len(self._messages):
            raise ValueError(
                f"cannot truncate dialogue of {len(self._messages)} messages to {length}"
            )
        del self._messages[length:]

    def instruction(self, text: str) -> None:
        """Add a system message, typically telling the model what role to play."""
        self.append(Message(role=SYSTEM_ROLE, content=text))

    def user_said(self, text: str) -> None:
        self.append(Message(role=USER_ROLE, content=text))

    def assistant_said(self, text: str) -> None:
        """Add a message as if the model had said it."""
        self.append(Message(role=ASSISTANT_ROLE, content=text))

    def example_exchange(self, user_input: str, response: str) -> None:
        """Add a user message and a model reply, to show the model how to respond."""
        self.user_said(user_input)
        self.assistant_said(response)

    def to_list(self) -> list[Message]:
        return list(self._messages)
