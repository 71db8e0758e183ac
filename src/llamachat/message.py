import uuid
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_serializer


class MessageRole(Enum):
    SYSTEM = "system"
    ASSISTANT = "assistant"
    USER = "user"


def new_message_id() -> str:
    return uuid.uuid4().hex


class Message(BaseModel):
    """A single chat message.

    Messages are immutable. Equality compares id, content and role, so two
    snapshots of the same streaming assistant message differ once its
    content has grown.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_message_id)
    role: MessageRole
    content: str

    @field_serializer('role')
    def serialize_role(self, role: MessageRole, _info) -> str:
        return role.value

    @property
    def is_user(self) -> bool:
        return self.role == MessageRole.USER

    def appended(self, text: str) -> "Message":
        """Return a copy with the same id and ``text`` appended."""
        return self.model_copy(update={"content": self.content + text})


def user_message(content: str) -> Message:
    return Message(role=MessageRole.USER, content=content)


def assistant_message(content: str) -> Message:
    return Message(role=MessageRole.ASSISTANT, content=content)
