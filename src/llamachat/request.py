from pydantic import BaseModel, field_serializer

from llamachat.message import Message, MessageRole


class PendingRequest(BaseModel):
    """Outbound chat completion request for a single turn.

    Built fresh on every send and discarded once its stream ends. Only the
    system prompt and the message just submitted are sent; earlier turns
    are not replayed.
    """

    messages: list[Message]
    model_id: str
    stream: bool = True

    @field_serializer("messages")
    def serialize_messages(self, messages: list[Message]) -> list[dict]:
        # message ids are local to the transcript and never sent
        return [
            {"role": m.role.value, "content": m.content}
            for m in messages
        ]

    def to_completion_kwargs(self) -> dict:
        """Arguments for ``client.chat.completions.create``."""
        dumped = self.model_dump()
        return {
            "model": dumped["model_id"],
            "messages": dumped["messages"],
            "stream": dumped["stream"],
        }


def build_request(system_prompt: str, user_text: str, model_id: str) -> PendingRequest:
    return PendingRequest(
        messages=[
            Message(role=MessageRole.SYSTEM, content=system_prompt),
            Message(role=MessageRole.USER, content=user_text),
        ],
        model_id=model_id,
        stream=True,
    )
