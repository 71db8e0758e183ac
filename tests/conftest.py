import pytest

from llamachat.config import ChatConfig
from llamachat.provider import InferenceProvider
from llamachat.session import ChatSession
from llamachat.streaming import StreamChunk, TextDelta, ToolCallDelta


# ---------------------------------------------------------------------------
# Mock provider
# ---------------------------------------------------------------------------

class MockProvider(InferenceProvider):
    """Provider that replays pre-queued chunk lists. No network calls.

    Each entry in ``responses`` is the stream for one request. An exception
    instance inside a stream is raised at that point, simulating a
    mid-stream failure.
    """

    def __init__(self):
        self.responses: list[list] = []
        self.call_log: list = []

    async def stream_chat(self, request):
        self.call_log.append(request)
        for item in self.responses.pop(0):
            if isinstance(item, BaseException):
                raise item
            yield item


# ---------------------------------------------------------------------------
# Chunk builder helpers
# ---------------------------------------------------------------------------

def text_chunk(text: str) -> StreamChunk:
    return StreamChunk(delta=TextDelta(text=text))


def tool_chunk(name: str = "lookup", arguments: str = "{}", index: int = 0) -> StreamChunk:
    return StreamChunk(delta=ToolCallDelta(
        index=index, call_id=f"call_{index}", name=name, arguments_delta=arguments,
    ))


def text_stream(*parts: str) -> list[StreamChunk]:
    return [text_chunk(p) for p in parts]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config():
    return ChatConfig(
        inference_url="http://localhost:8321",
        model_id="mock-model",
        system_prompt="You are helpful.",
    )


@pytest.fixture
def mock_provider():
    return MockProvider()


@pytest.fixture
def make_session(config, mock_provider):
    """Factory fixture to build sessions with the mock provider."""
    def _make(provider=None, session_id="s1"):
        return ChatSession(
            config=config,
            provider=provider or mock_provider,
            session_id=session_id,
        )
    return _make
