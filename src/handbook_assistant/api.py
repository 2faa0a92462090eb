"""FastAPI surface for the handbook assistant.

Usage:
    uvicorn --factory handbook_assistant.api:build_app --port 3001

Endpoints mirror the chat front end's expectations: upload a handbook as a
base64 JSON payload, ask questions, record answer feedback, and read the
status of the active handbook.
"""
from __future__ import annotations

import base64
import binascii
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .errors import DocumentProcessingError, HandbookError, HandbookTooLarge, NoCorpusLoaded, RateLimited
from .feedback import FeedbackStore
from .service import HandbookAssistant
from .settings import OpenAISettings, ServiceSettings, configure_logging, load_settings
from .tracing import configure_tracing, get_tracer, shutdown_tracing

logger = logging.getLogger(__name__)


class UploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file: str
    mime_type: str = Field(default="text/plain", alias="mimeType")
    filename: str = "handbook"


class QueryRequest(BaseModel):
    question: str = ""


class FeedbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(alias="messageId")
    feedback: str
    question: str = ""
    answer: str = ""
    sections: list[str] = Field(default_factory=list)


def _error(status_code: int, message: str, headers: dict[str, str] | None = None, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra}, headers=headers)


def create_app(
    assistant: HandbookAssistant | None = None,
    feedback_store: FeedbackStore | None = None,
    settings: tuple[OpenAISettings, ServiceSettings] | None = None,
    load_default: bool = True,
) -> FastAPI:
    """Build the HTTP app around an assistant and a feedback store.

    Args:
        assistant: Assistant to serve; built from settings when omitted.
        feedback_store: In-memory feedback log; a fresh one when omitted.
        settings: Pre-loaded settings; read from the environment when omitted.
        load_default: Whether to load the default handbook at startup.
    """
    openai_settings, service_settings = settings or load_settings()
    assistant = assistant or HandbookAssistant.from_settings(openai_settings, service_settings)
    feedback_store = feedback_store or FeedbackStore()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if load_default:
            assistant.load_default_handbook(service_settings.default_handbook_path)
        yield
        shutdown_tracing()

    app = FastAPI(title="Handbook Assistant", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[service_settings.allowed_origin],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.state.assistant = assistant
    app.state.feedback = feedback_store

    @app.post("/api/upload-handbook")
    def upload_handbook(payload: UploadRequest):
        try:
            file_bytes = base64.b64decode(payload.file, validate=True)
        except (binascii.Error, ValueError):
            return _error(400, "Uploaded file is not valid base64.")
        if not file_bytes:
            return _error(400, "No file uploaded")

        try:
            result = assistant.upload_handbook(file_bytes, payload.mime_type, payload.filename)
        except HandbookTooLarge as exc:
            return _error(413, str(exc))
        except DocumentProcessingError as exc:
            logger.error("Error processing handbook: %s", exc)
            return _error(500, f"Error processing handbook: {exc}")

        return {
            "message": "Handbook uploaded successfully",
            "contentLength": result.content_length,
            "sections": result.sections,
            "sectionTitles": result.section_titles,
            "isDefaultHandbook": result.is_default_handbook,
        }

    @app.post("/api/query")
    def query(payload: QueryRequest):
        question = payload.question.strip()
        if not question:
            return _error(400, "Please provide a question.")

        try:
            result = assistant.ask(question)
        except NoCorpusLoaded as exc:
            return _error(400, str(exc))
        except RateLimited as exc:
            return _error(
                429,
                str(exc),
                headers={"Retry-After": str(exc.retry_after_seconds)},
                details="Our assistant is currently experiencing high demand. Please wait before asking again.",
            )
        except HandbookError as exc:
            logger.error("Error processing query: %s", exc)
            return _error(500, f"Error processing query: {exc}")

        return {"answer": result.answer, "usedSections": result.used_sections}

    @app.post("/api/feedback")
    def feedback(payload: FeedbackRequest):
        feedback_store.record(
            message_id=payload.message_id,
            feedback=payload.feedback,
            question=payload.question,
            answer=payload.answer,
            sections=payload.sections,
        )
        return {"success": True}

    @app.get("/api/feedback/stats")
    def feedback_stats():
        stats = feedback_store.stats()
        return {
            "total": stats.total,
            "helpful": stats.helpful,
            "notHelpful": stats.not_helpful,
            "mostHelpfulSections": [
                {"section": section, "count": count} for section, count in stats.most_helpful_sections
            ],
        }

    @app.get("/api/handbook-status")
    def handbook_status():
        status = assistant.status()
        return {
            "hasHandbook": status.has_handbook,
            "sections": status.sections,
            "sectionTitles": status.section_titles,
            "isDefaultHandbook": status.is_default_handbook,
        }

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


def build_app() -> FastAPI:
    """Factory for ``uvicorn --factory``: load settings, configure logging, build the app.

    Spans are exported only when ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set.
    """
    openai_settings, service_settings = load_settings()
    configure_logging(service_settings.log_level)
    tracer = None
    if service_settings.otel_endpoint:
        configure_tracing(endpoint=service_settings.otel_endpoint)
        tracer = get_tracer("handbook-assistant")
        logger.info("Exporting traces to %s", service_settings.otel_endpoint)
    assistant = HandbookAssistant.from_settings(openai_settings, service_settings, tracer=tracer)
    return create_app(assistant, settings=(openai_settings, service_settings))
