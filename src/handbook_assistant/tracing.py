"""OpenTelemetry tracing helpers for the handbook assistant.

Every question produces one trace with two child spans: ``ranking`` (key-term
expansion, scoring, and neighbour selection over the active corpus) and
``generation`` (the chat-model answer call).

Usage with an OTLP backend (e.g. Arize Phoenix):

    from handbook_assistant.tracing import configure_tracing, get_tracer

    configure_tracing(
        endpoint="http://localhost:6006/v1/traces",
        service_name="handbook-assistant",
    )
    assistant = HandbookAssistant(store, tracer=get_tracer("handbook-assistant"))

Usage without a backend (development / testing):

    configure_tracing()   # uses ConsoleSpanExporter by default
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Callable

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

from .schema import Section

# ---------------------------------------------------------------------------
# OpenInference semantic-convention attribute names
# ---------------------------------------------------------------------------

ATTR_INPUT_VALUE = "input.value"
ATTR_OUTPUT_VALUE = "output.value"
ATTR_LLM_MODEL_NAME = "llm.model_name"
ATTR_RETRIEVAL_DOCUMENTS = "retrieval.documents"
ATTR_CORPUS_VERSION = "handbook.corpus_version"

# ---------------------------------------------------------------------------
# Provider lifecycle helpers
# ---------------------------------------------------------------------------

_provider: TracerProvider | None = None


def _otlp_exporter(endpoint: str) -> SpanExporter:
    try:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    except ImportError as exc:
        raise ImportError(
            "opentelemetry-exporter-otlp-proto-http is required to export "
            "handbook traces to an OTLP endpoint. Install it with:\n"
            "  pip install 'handbook-assistant[otlp]'"
        ) from exc
    return OTLPSpanExporter(endpoint=endpoint)


def configure_tracing(
    endpoint: str | None = None,
    service_name: str = "handbook-assistant",
    exporter: SpanExporter | None = None,
) -> TracerProvider:
    """Register the process-wide TracerProvider for handbook queries.

    Args:
        endpoint: OTLP HTTP endpoint. Spans are batched before export so a
            slow collector never delays an answer.
        service_name: Label identifying this service in the backend.
        exporter: Explicit exporter, e.g. ``InMemorySpanExporter`` in tests.
            Takes precedence over *endpoint* and is fed synchronously.

    Returns:
        The registered provider. With neither argument, spans go to stdout.
    """
    global _provider

    if exporter is not None:
        processor: SpanProcessor = SimpleSpanProcessor(exporter)
    elif endpoint is not None:
        processor = BatchSpanProcessor(_otlp_exporter(endpoint))
    else:
        processor = SimpleSpanProcessor(ConsoleSpanExporter())

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def shutdown_tracing() -> None:
    """Flush pending spans and forget the configured provider."""
    global _provider
    if _provider is not None:
        _provider.shutdown()
        _provider = None


def get_tracer(name: str) -> trace.Tracer:
    """Return a tracer from the configured provider, or the no-op global one."""
    if _provider is not None:
        return _provider.get_tracer(name)
    return trace.get_tracer(name)


# ---------------------------------------------------------------------------
# Span-wrapping helpers
# ---------------------------------------------------------------------------


def traced_ranking(
    ranker: Callable[..., list[Section]],
    tracer: trace.Tracer,
) -> Callable[..., list[Section]]:
    """Wrap a ranking callable so every call is recorded as a ``ranking`` span.

    The span records the joined key terms as ``input.value`` and the number of
    selected sections as ``retrieval.documents``. Exceptions mark the span as
    ERROR and propagate unchanged.

    Args:
        ranker: Callable with signature ``(key_terms, sections, **kwargs)``.
        tracer: OTel tracer to use for span creation.
    """

    def _wrapped(key_terms: Sequence[str], sections: Sequence[Section], **kwargs) -> list[Section]:
        with tracer.start_as_current_span("ranking") as span:
            span.set_attribute(ATTR_INPUT_VALUE, ", ".join(key_terms))
            try:
                results = ranker(key_terms, sections, **kwargs)
                span.set_attribute(ATTR_RETRIEVAL_DOCUMENTS, len(results))
                span.set_status(trace.StatusCode.OK)
                return results
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise

    return _wrapped


def traced_generation(
    answer_fn: Callable[..., str],
    tracer: trace.Tracer,
    model_name: str = "",
) -> Callable[..., str]:
    """Wrap an answer callable ``(question, context) -> str`` in a ``generation`` span.

    The span records the question, the model name (when provided), and the
    first 500 characters of the answer.
    """

    def _wrapped(question: str, context: str, **kwargs) -> str:
        with tracer.start_as_current_span("generation") as span:
            span.set_attribute(ATTR_INPUT_VALUE, question)
            if model_name:
                span.set_attribute(ATTR_LLM_MODEL_NAME, model_name)
            try:
                answer = answer_fn(question, context, **kwargs)
                span.set_attribute(ATTR_OUTPUT_VALUE, answer[:500])
                span.set_status(trace.StatusCode.OK)
                return answer
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise

    return _wrapped
