from llamachat.config import ChatConfig, ConfigurationError
from llamachat.instrumentation import instrument, uninstrument
from llamachat.message import Message, MessageRole
from llamachat.provider import InferenceProvider, OpenAICompatibleProvider, StreamError
from llamachat.reducer import ERROR_NOTICE, TurnState, apply_delta, finalize, submit
from llamachat.session import ChatSession, TurnInProgressError, TurnResult
from llamachat.streaming import StreamChunk, TextDelta, ToolCallDelta
from llamachat.transcript import Transcript

__all__ = [
    "ChatConfig",
    "ChatSession",
    "ConfigurationError",
    "ERROR_NOTICE",
    "InferenceProvider",
    "Message",
    "MessageRole",
    "OpenAICompatibleProvider",
    "StreamChunk",
    "StreamError",
    "TextDelta",
    "ToolCallDelta",
    "Transcript",
    "TurnInProgressError",
    "TurnResult",
    "TurnState",
    "apply_delta",
    "finalize",
    "instrument",
    "submit",
    "uninstrument",
]
