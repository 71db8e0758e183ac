"""Streaming primitives for inference responses.

Providers yield :class:`StreamChunk` objects, each wrapping exactly one
delta: either a :class:`TextDelta` or a :class:`ToolCallDelta`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class TextDelta:
    """An incremental fragment of assistant text."""

    text: str


@dataclass(frozen=True)
class ToolCallDelta:
    """A fragment of a tool call.

    The payload is kept opaque; the transcript reducer does not render
    tool calls.
    """

    index: int = 0
    call_id: str | None = None
    name: str | None = None
    arguments_delta: str | None = None
    raw: Any = None


Delta = Union[TextDelta, ToolCallDelta]


@dataclass(frozen=True)
class StreamChunk:
    """Normalised streaming chunk from any provider."""

    delta: Delta
    finish_reason: str | None = None
