"""Transcript reducer.

Pure functions that fold one assistant turn into a transcript:
``submit`` opens the turn, ``apply_delta`` consumes each streamed delta
in arrival order, and ``finalize`` closes it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from llamachat.config import ChatConfig
from llamachat.message import MessageRole, assistant_message, user_message
from llamachat.request import PendingRequest, build_request
from llamachat.streaming import Delta, TextDelta, ToolCallDelta
from llamachat.transcript import Transcript

logger = logging.getLogger(__name__)

ERROR_NOTICE = "Error: Unable to get response from the server"


class TurnState(Enum):
    IDLE = "idle"
    AWAITING_FIRST_DELTA = "awaiting_first_delta"
    ACCUMULATING_TEXT = "accumulating_text"
    TERMINATED_OK = "terminated_ok"
    TERMINATED_ERROR = "terminated_error"

    @property
    def terminated(self) -> bool:
        return self in (TurnState.TERMINATED_OK, TurnState.TERMINATED_ERROR)


def submit(
    transcript: Transcript,
    user_text: str,
    config: ChatConfig,
) -> tuple[Transcript, PendingRequest | None]:
    """Append the user's message and build the request for it.

    Whitespace-only input is a no-op: the transcript comes back unchanged
    and no request is produced.
    """
    if not user_text.strip():
        return transcript, None
    transcript = transcript.append(user_message(user_text))
    return transcript, build_request(config.system_prompt, user_text, config.model_id)


def apply_delta(transcript: Transcript, delta: Delta) -> Transcript:
    """Fold one streamed delta into the transcript.

    Text extends the trailing assistant message, or starts one if the
    last message is the user's. Tool-call deltas are dropped.
    """
    if isinstance(delta, ToolCallDelta):
        logger.debug(f"Dropping tool call delta (index={delta.index})")
        return transcript
    if not isinstance(delta, TextDelta):
        raise TypeError(f"unsupported delta: {delta!r}")

    last = transcript.last
    if last is not None and last.role == MessageRole.ASSISTANT:
        return transcript.replace_last(last.appended(delta.text))
    return transcript.append(assistant_message(delta.text))


def finalize(transcript: Transcript, error: BaseException | None = None) -> Transcript:
    """Close a turn, appending the error notice if the stream failed.

    A partial assistant message is kept; the notice is a separate message.
    """
    if error is None:
        return transcript
    return transcript.append(assistant_message(ERROR_NOTICE))


def next_state(state: TurnState, delta: Delta | None) -> TurnState:
    """Advance the per-turn state machine.

    ``delta=None`` marks a normal end of stream. Errors are recorded by
    the caller with :data:`TurnState.TERMINATED_ERROR` directly. A turn
    leaves ``IDLE`` on submit, so text cannot arrive in that state;
    tool-call deltas never change the state.
    """
    if state.terminated:
        raise ValueError(f"turn already terminated ({state.value})")
    if delta is None:
        return TurnState.TERMINATED_OK
    if isinstance(delta, ToolCallDelta):
        return state
    if state == TurnState.IDLE:
        raise ValueError("text arrived before the turn was submitted")
    return TurnState.ACCUMULATING_TEXT


def reduce_stream(transcript: Transcript, deltas: Iterable[Delta]) -> Transcript:
    for delta in deltas:
        transcript = apply_delta(transcript, delta)
    return transcript
