import logging
import uuid
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

from llamachat.config import ChatConfig
from llamachat.events import StreamEvent, TranscriptUpdatedEvent, TurnCompleteEvent
from llamachat.instrumentation import active_span, end_turn_span, start_turn_span
from llamachat.provider import InferenceProvider, OpenAICompatibleProvider, StreamError
from llamachat.reducer import TurnState, apply_delta, finalize, next_state, submit
from llamachat.request import PendingRequest
from llamachat.transcript import Transcript

logger = logging.getLogger(__name__)

TranscriptListener = Callable[[Transcript], None]


class TurnInProgressError(RuntimeError):
    """A message was submitted while another turn was still streaming."""


@dataclass
class TurnResult:
    """The outcome of a single ChatSession.send() invocation."""

    transcript: Transcript
    state: TurnState
    request: PendingRequest | None = None
    error: BaseException | None = None


class ChatSession:
    """Owns a transcript and drives one streamed turn at a time.

    The session is the only writer of its transcript. Each change replaces
    the transcript with a new immutable value, which is handed to every
    subscribed listener and yielded as a :class:`TranscriptUpdatedEvent`.

    ``send()`` drains ``iter()``.  ``iter()`` is the streaming entry point.

    Stream failures never escape a turn: they are logged and turned into
    an error notice in the transcript, and the session stays usable. A
    listener that raises is logged and skipped; it does not end the turn.

    Args:
        config: Endpoint, model and system prompt settings.
        provider: Inference provider, or an OpenAI-compatible provider
            built from ``config``.
        session_id: Identifier used in log lines.
    """

    def __init__(
        self,
        config: ChatConfig,
        provider: InferenceProvider | None = None,
        session_id: str | None = None,
    ):
        self.config = config
        self.provider = provider or OpenAICompatibleProvider.from_config(config)
        self.session_id = session_id or uuid.uuid4().hex
        self.state = TurnState.IDLE
        self._transcript = Transcript()
        self._listeners: list[TranscriptListener] = []
        self._in_flight = False

    @property
    def transcript(self) -> Transcript:
        return self._transcript

    @property
    def busy(self) -> bool:
        """True while a turn is streaming; front ends should block input."""
        return self._in_flight

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        """Call ``listener`` with every new transcript. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def send(self, text: str) -> TurnResult | None:
        """Run a full turn. Returns ``None`` for empty input."""
        result: TurnResult | None = None
        async for event in self.iter(text):
            if isinstance(event, TurnCompleteEvent):
                result = event.result
        return result

    async def iter(self, text: str) -> AsyncIterator[StreamEvent]:
        """Run a turn, yielding events as the response streams in.

        Yields nothing for empty or whitespace-only input.

        Raises:
            TurnInProgressError: If another turn is still streaming.
        """
        if self._in_flight:
            raise TurnInProgressError(
                f"session {self.session_id} is already streaming a response"
            )

        transcript, request = submit(self._transcript, text, self.config)
        if request is None:
            return

        self._in_flight = True
        try:
            self.state = TurnState.AWAITING_FIRST_DELTA
            yield self._publish(transcript)

            error = None
            chunk_count = 0
            stream = self.provider.stream_chat(request)
            span = start_turn_span(self.config.model_id, self.config.inference_url)
            try:
                while True:
                    # only the pull from the server counts as a stream failure
                    with active_span(span):
                        try:
                            chunk = await stream.__anext__()
                        except StopAsyncIteration:
                            break
                        except StreamError as e:
                            logger.error(f"Session {self.session_id}: stream failed: {e}")
                            error = e
                            break
                        except Exception as e:
                            logger.exception(f"Session {self.session_id}: unexpected error while streaming")
                            error = e
                            break
                    chunk_count += 1
                    updated = apply_delta(self._transcript, chunk.delta)
                    self.state = next_state(self.state, chunk.delta)
                    if updated is not self._transcript:
                        yield self._publish(updated)
            finally:
                end_turn_span(span, chunk_count, error)
                aclose = getattr(stream, "aclose", None)
                if aclose is not None:
                    await aclose()

            if error is not None:
                self.state = TurnState.TERMINATED_ERROR
                yield self._publish(finalize(self._transcript, error))
            else:
                self.state = next_state(self.state, None)
                logger.debug(f"Session {self.session_id}: turn finished after {chunk_count} chunks")

            yield TurnCompleteEvent(result=TurnResult(
                transcript=self._transcript,
                state=self.state,
                request=request,
                error=error,
            ))
        finally:
            self._in_flight = False

    def _publish(self, transcript: Transcript) -> TranscriptUpdatedEvent:
        self._transcript = transcript
        for listener in list(self._listeners):
            try:
                listener(transcript)
            except Exception:
                logger.exception(f"Session {self.session_id}: transcript listener {listener!r} failed")
        return TranscriptUpdatedEvent(transcript=transcript, state=self.state)
