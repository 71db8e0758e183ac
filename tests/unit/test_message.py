import pytest
from pydantic import ValidationError

from llamachat.message import Message, MessageRole, assistant_message, user_message


def test_ids_are_unique_per_message():
    a = user_message("hi")
    b = user_message("hi")
    assert a.id != b.id
    assert a != b


def test_equality_is_by_value():
    a = Message(id="m1", role=MessageRole.USER, content="hi")
    b = Message(id="m1", role=MessageRole.USER, content="hi")
    assert a == b
    assert a is not b


def test_equality_considers_content_and_role():
    base = Message(id="m1", role=MessageRole.USER, content="hi")
    assert base != Message(id="m1", role=MessageRole.USER, content="hello")
    assert base != Message(id="m1", role=MessageRole.ASSISTANT, content="hi")


def test_messages_are_frozen():
    msg = user_message("hi")
    with pytest.raises(ValidationError):
        msg.content = "changed"


def test_appended_keeps_id_and_leaves_original():
    msg = assistant_message("Hi")
    grown = msg.appended(" there")

    assert grown.id == msg.id
    assert grown.content == "Hi there"
    assert grown.role == MessageRole.ASSISTANT
    assert msg.content == "Hi"


def test_role_serializes_to_value():
    dumped = user_message("hi").model_dump()
    assert dumped["role"] == "user"
    assert dumped["content"] == "hi"


def test_is_user():
    assert user_message("a").is_user
    assert not assistant_message("b").is_user
