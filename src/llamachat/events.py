"""Events emitted while a chat turn streams."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from llamachat.reducer import TurnState
from llamachat.transcript import Transcript


@dataclass
class StreamEvent:
    """Base for all streaming events."""


@dataclass
class TranscriptUpdatedEvent(StreamEvent):
    """The transcript changed; ``transcript`` is the new snapshot."""

    transcript: Transcript = field(default_factory=Transcript)
    state: TurnState = TurnState.IDLE


@dataclass
class TurnCompleteEvent(StreamEvent):
    """Final event of a turn; always the last event yielded."""

    result: Any = None
