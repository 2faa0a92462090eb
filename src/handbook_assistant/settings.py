from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class OpenAISettings:
    """Runtime model configuration for key-term extraction and answer calls."""

    chat_model: str = "gpt-4.1-mini"
    temperature: float = 0.7
    term_temperature: float = 0.3
    max_answer_tokens: int = 500
    max_term_tokens: int = 100


@dataclass(slots=True)
class ServiceSettings:
    """Handbook service configuration: default document, limits, ranking mode."""

    default_handbook_path: str = "public/handbook.pdf"
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_origin: str = "http://localhost:3000"
    strict_word_match: bool = False
    log_level: str = "INFO"
    otel_endpoint: str | None = None


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def load_settings() -> tuple[OpenAISettings, ServiceSettings]:
    """Load environment-backed settings and return typed config objects.

    Returns:
        Tuple containing OpenAI model settings and handbook service settings.
    """
    load_dotenv()
    return (
        OpenAISettings(chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1-mini")),
        ServiceSettings(
            default_handbook_path=os.getenv("HANDBOOK_DEFAULT_PATH", "public/handbook.pdf"),
            max_upload_bytes=int(os.getenv("HANDBOOK_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            allowed_origin=os.getenv("HANDBOOK_ALLOWED_ORIGIN", "http://localhost:3000"),
            strict_word_match=_env_flag("HANDBOOK_STRICT_WORD_MATCH"),
            log_level=os.getenv("HANDBOOK_LOG_LEVEL", "INFO"),
            otel_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or None,
        ),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format=LOG_FORMAT, level=level.upper())
