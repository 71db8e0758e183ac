"""Optional OpenTelemetry tracing of chat turns.

Each streamed turn becomes one ``chat {model}`` client span. The span is
only made current while the session is waiting on the inference server,
never while a caller is handling a transcript update.
"""

import importlib.util
import logging
from contextlib import contextmanager
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

_tracer = None


def instrument(*, tracer_name: str = "llamachat") -> None:
    """Start tracing chat turns with the globally configured TracerProvider.

    Needs the ``otel`` extra (``opentelemetry-api``).

    Raises:
        ImportError: If ``opentelemetry-api`` is not installed.
    """
    global _tracer
    if importlib.util.find_spec("opentelemetry.trace") is None:
        raise ImportError(
            "Tracing needs opentelemetry-api: pip install llamachat[otel]"
        )
    from opentelemetry import trace
    _tracer = trace.get_tracer(tracer_name)
    if isinstance(_tracer, trace.NoOpTracer):
        logger.info("Tracing enabled but no TracerProvider is set; turn spans are dropped")
    else:
        logger.info("Tracing chat turns")


def uninstrument() -> None:
    global _tracer
    _tracer = None


def start_turn_span(model: str, inference_url: str):
    """Open the span for one turn without making it current.

    Returns ``None`` when tracing is off. The caller ends it with
    :func:`end_turn_span`.
    """
    if _tracer is None:
        return None
    from opentelemetry.trace import SpanKind

    attributes = {
        "gen_ai.operation.name": "chat",
        "gen_ai.request.model": model,
    }
    host = urlparse(inference_url).hostname
    if host:
        attributes["server.address"] = host
    return _tracer.start_span(
        f"chat {model}",
        kind=SpanKind.CLIENT,
        attributes=attributes,
    )


@contextmanager
def active_span(span):
    """Make ``span`` current for the enclosed block only."""
    if span is None:
        yield None
        return
    from opentelemetry import trace

    with trace.use_span(span, end_on_exit=False):
        yield span


def end_turn_span(span, chunk_count: int, error: BaseException | None = None) -> None:
    """Record the outcome of a turn and close its span."""
    if span is None:
        return
    span.set_attribute("llamachat.response.chunks", chunk_count)
    if error is not None:
        record_error(span, error)
    span.end()


def record_error(span, exception: BaseException) -> None:
    if span is None:
        return
    from opentelemetry.trace import StatusCode

    span.set_status(StatusCode.ERROR, str(exception))
    span.record_exception(exception)
    span.set_attribute("error.type", type(exception).__qualname__)
