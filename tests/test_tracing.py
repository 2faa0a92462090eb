"""Tests for tracing.py — configure_tracing, get_tracer, traced_ranking, traced_generation.

OTel spans are collected with InMemorySpanExporter so tests run fully offline.
"""
from __future__ import annotations

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from handbook_assistant.ranking import rank_sections
from handbook_assistant.tracing import (
    ATTR_INPUT_VALUE,
    ATTR_LLM_MODEL_NAME,
    ATTR_OUTPUT_VALUE,
    ATTR_RETRIEVAL_DOCUMENTS,
    configure_tracing,
    get_tracer,
    shutdown_tracing,
    traced_generation,
    traced_ranking,
)


# ---------------------------------------------------------------------------
# Shared in-memory exporter fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def mem_exporter() -> InMemorySpanExporter:
    """Fresh InMemorySpanExporter and a configured TracerProvider."""
    exporter = InMemorySpanExporter()
    configure_tracing(exporter=exporter, service_name="test-service")
    return exporter


# ---------------------------------------------------------------------------
# configure_tracing / get_tracer
# ---------------------------------------------------------------------------


class TestConfigureTracing:
    def test_returns_provider(self):
        from opentelemetry.sdk.trace import TracerProvider

        provider = configure_tracing(exporter=InMemorySpanExporter())
        assert isinstance(provider, TracerProvider)

    def test_missing_otlp_package_raises_import_error(self, monkeypatch):
        import builtins

        real_import = builtins.__import__

        def mock_import(name, *args, **kwargs):
            if "otlp" in name:
                raise ImportError("mocked missing package")
            return real_import(name, *args, **kwargs)

        monkeypatch.setattr(builtins, "__import__", mock_import)
        with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
            configure_tracing(endpoint="http://localhost:6006/v1/traces")


class TestShutdownTracing:
    def test_flushes_and_forgets_provider(self, mem_exporter):
        with get_tracer("dev").start_as_current_span("before-shutdown"):
            pass
        shutdown_tracing()
        with get_tracer("dev").start_as_current_span("after-shutdown"):
            pass
        assert [span.name for span in mem_exporter.get_finished_spans()] == ["before-shutdown"]

    def test_noop_when_unconfigured(self):
        shutdown_tracing()
        shutdown_tracing()


class TestGetTracer:
    def test_returns_tracer(self, mem_exporter):
        tracer = get_tracer("handbook.ranking")
        assert hasattr(tracer, "start_as_current_span")

    def test_spans_reach_exporter(self, mem_exporter):
        with get_tracer("dev").start_as_current_span("op"):
            pass
        assert [span.name for span in mem_exporter.get_finished_spans()] == ["op"]


# ---------------------------------------------------------------------------
# traced_ranking
# ---------------------------------------------------------------------------


class TestTracedRanking:
    def test_returns_same_results(self, mem_exporter, sample_sections):
        wrapped = traced_ranking(rank_sections, get_tracer("ranking"))
        assert wrapped(["leave"], sample_sections) == rank_sections(["leave"], sample_sections)

    def test_span_attributes(self, mem_exporter, sample_sections):
        wrapped = traced_ranking(rank_sections, get_tracer("ranking"))
        results = wrapped(["leave", "pto"], sample_sections)
        (span,) = mem_exporter.get_finished_spans()
        assert span.name == "ranking"
        assert span.attributes[ATTR_INPUT_VALUE] == "leave, pto"
        assert span.attributes[ATTR_RETRIEVAL_DOCUMENTS] == len(results)
        assert span.status.status_code == trace.StatusCode.OK

    def test_forwards_keyword_arguments(self, mem_exporter, sample_sections):
        seen = {}

        def fake_ranker(key_terms, sections, **kwargs):
            seen.update(kwargs)
            return []

        traced_ranking(fake_ranker, get_tracer("ranking"))(["leave"], sample_sections, top_n=2)
        assert seen == {"top_n": 2}

    def test_error_recorded_and_reraised(self, mem_exporter):
        wrapped = traced_ranking(rank_sections, get_tracer("ranking"))
        with pytest.raises(Exception):
            wrapped(["leave"], [])
        (span,) = mem_exporter.get_finished_spans()
        assert span.status.status_code == trace.StatusCode.ERROR
        assert any(event.name == "exception" for event in span.events)


# ---------------------------------------------------------------------------
# traced_generation
# ---------------------------------------------------------------------------


class TestTracedGeneration:
    def test_span_attributes(self, mem_exporter):
        wrapped = traced_generation(lambda q, ctx: "A" * 600, get_tracer("generation"), model_name="gpt-4o")
        answer = wrapped("What is PTO?", "### Leave ###\n...")
        assert len(answer) == 600
        (span,) = mem_exporter.get_finished_spans()
        assert span.name == "generation"
        assert span.attributes[ATTR_INPUT_VALUE] == "What is PTO?"
        assert span.attributes[ATTR_LLM_MODEL_NAME] == "gpt-4o"
        assert len(span.attributes[ATTR_OUTPUT_VALUE]) == 500

    def test_model_name_omitted_when_empty(self, mem_exporter):
        traced_generation(lambda q, ctx: "ok", get_tracer("generation"))("Q?", "ctx")
        (span,) = mem_exporter.get_finished_spans()
        assert ATTR_LLM_MODEL_NAME not in span.attributes

    def test_error_recorded_and_reraised(self, mem_exporter):
        def exploding(question, context):
            raise RuntimeError("boom")

        wrapped = traced_generation(exploding, get_tracer("generation"))
        with pytest.raises(RuntimeError, match="boom"):
            wrapped("Q?", "ctx")
        (span,) = mem_exporter.get_finished_spans()
        assert span.status.status_code == trace.StatusCode.ERROR
