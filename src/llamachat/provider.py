import logging
from collections.abc import AsyncIterator

import httpx
from openai import APIError, AsyncOpenAI

from llamachat.config import ChatConfig
from llamachat.request import PendingRequest
from llamachat.streaming import StreamChunk, TextDelta, ToolCallDelta

logger = logging.getLogger(__name__)


class StreamError(Exception):
    """The response stream ended abnormally."""


class InferenceProvider:
    """Produces a lazy, finite stream of chunks for a request.

    Implementations raise :class:`StreamError` if the stream cannot be
    opened or breaks off part way.
    """

    def stream_chat(self, request: PendingRequest) -> AsyncIterator[StreamChunk]:
        raise NotImplementedError


def normalize_base_url(url: str) -> str:
    """Strip any trailing slash and make sure the URL ends in ``/v1``."""
    url = url.rstrip("/")
    if not url.endswith("/v1"):
        url = f"{url}/v1"
    return url


def chunks_from_completion_chunk(completion_chunk) -> list[StreamChunk]:
    """Split one OpenAI ``ChatCompletionChunk`` into normalised chunks.

    Role-only and usage-only chunks carry no delta and produce nothing.
    """
    if not completion_chunk.choices:
        return []
    choice = completion_chunk.choices[0]
    delta = choice.delta
    finish_reason = choice.finish_reason
    chunks = []
    if delta is not None and delta.content:
        chunks.append(StreamChunk(
            delta=TextDelta(text=delta.content),
            finish_reason=finish_reason,
        ))
    if delta is not None and delta.tool_calls:
        for tc in delta.tool_calls:
            function = tc.function
            chunks.append(StreamChunk(
                delta=ToolCallDelta(
                    index=tc.index,
                    call_id=tc.id,
                    name=function.name if function else None,
                    arguments_delta=function.arguments if function else None,
                    raw=tc,
                ),
                finish_reason=finish_reason,
            ))
    return chunks


class OpenAICompatibleProvider(InferenceProvider):
    """Streams from any server speaking the OpenAI chat completions API,
    such as Llama Stack or vLLM."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 600.0,
        max_retries: int = 2,
    ):
        self.base_url = normalize_base_url(base_url)
        self.client = AsyncOpenAI(
            base_url=self.base_url,
            api_key=api_key or "DUMMY",
            timeout=timeout,
            max_retries=max_retries,
        )

    @classmethod
    def from_config(cls, config: ChatConfig) -> "OpenAICompatibleProvider":
        return cls(
            base_url=config.inference_url,
            api_key=config.api_key,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    async def stream_chat(self, request: PendingRequest) -> AsyncIterator[StreamChunk]:
        try:
            response = await self.client.chat.completions.create(
                **request.to_completion_kwargs()
            )
            async for completion_chunk in response:
                for chunk in chunks_from_completion_chunk(completion_chunk):
                    yield chunk
        except (APIError, httpx.HTTPError) as e:
            logger.warning(f"Stream from {self.base_url} failed: {e}")
            raise StreamError(str(e)) from e
