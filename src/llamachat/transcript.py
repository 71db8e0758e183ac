"""Immutable, ordered chat history."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from llamachat.message import Message, MessageRole


class Transcript(BaseModel):
    """Ordered sequence of user and assistant messages with unique ids.

    Every mutation returns a new ``Transcript``; readers holding an older
    value never observe a change. Iterate over ``messages``; iterating the
    model itself yields pydantic field pairs as usual.
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = ()

    @field_validator("messages")
    @classmethod
    def _check_messages(cls, messages: tuple[Message, ...]) -> tuple[Message, ...]:
        seen = set()
        for m in messages:
            if m.id in seen:
                raise ValueError(f"duplicate message id: {m.id}")
            seen.add(m.id)
            if m.role == MessageRole.SYSTEM:
                raise ValueError("system messages belong to requests, not the transcript")
        return messages

    def __len__(self) -> int:
        return len(self.messages)

    def __getitem__(self, index: int) -> Message:
        return self.messages[index]

    @property
    def last(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    def append(self, message: Message) -> Transcript:
        return Transcript(messages=(*self.messages, message))

    def replace_last(self, message: Message) -> Transcript:
        """Swap the last message for a newer version of itself.

        Raises:
            ValueError: If the transcript is empty or ``message`` does not
                carry the id of the current last message.
        """
        last = self.last
        if last is None:
            raise ValueError("cannot replace the last message of an empty transcript")
        if message.id != last.id:
            raise ValueError(
                f"replacement id {message.id} does not match last message id {last.id}"
            )
        return Transcript(messages=(*self.messages[:-1], message))
