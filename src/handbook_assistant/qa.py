from __future__ import annotations

from collections.abc import Sequence
import logging

from openai import OpenAI, RateLimitError

from .errors import AnswerGenerationError, RateLimited, TermExtractionFailure
from .schema import Section

logger = logging.getLogger(__name__)

KEY_TERMS_PROMPT = (
    "Extract key terms, topics, and synonyms from this question. Focus on policy-related words and topics. "
    "Return them as a comma-separated list. Include both specific terms and related concepts."
)

_CLOSING_PHRASES = (
    "What would you like to talk about next?",
    "What other topics can I help you explore?",
    "Curious about anything else?",
    "What other questions do you have?",
    "Would you like to learn about something else?",
    "What other aspects of our policies interest you?",
    "Feel free to ask about any other topics!",
)


def parse_key_terms(raw: str) -> list[str]:
    """Split a comma-separated model reply into lowercase, unique key terms."""
    terms = (term.strip() for term in raw.lower().split(","))
    return list(dict.fromkeys(term for term in terms if term))


def extract_key_terms(
    question: str,
    model: str = "gpt-4.1-mini",
    client: OpenAI | None = None,
    temperature: float = 0.3,
    max_tokens: int = 100,
) -> list[str]:
    """Ask the chat model for key terms, topics, and synonyms of a question.

    Raises:
        TermExtractionFailure: If the call fails or yields no usable terms.
    """
    try:
        client = client or OpenAI()
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": KEY_TERMS_PROMPT},
                {"role": "user", "content": question},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        raw = response.choices[0].message.content or ""
    except Exception as exc:
        raise TermExtractionFailure(f"Key-term extraction failed: {exc}") from exc

    terms = parse_key_terms(raw)
    if not terms:
        raise TermExtractionFailure("Key-term extraction returned no terms.")
    logger.info("Extracted key terms: %s", terms)
    return terms


def build_context(sections: Sequence[Section]) -> str:
    return "\n\n".join(f"### {section.title} ###\n{section.content}" for section in sections)


def build_system_prompt(context: str) -> str:
    closings = "\n".join(f"   - {phrase}" for phrase in _CLOSING_PHRASES)
    return (
        "You are Sophia from the HR team. Answer employee questions from the handbook context below.\n"
        "Key guidelines:\n"
        "1. Give direct answers with a friendly, professional tone.\n"
        "2. Share information confidently; if the context does not cover the question, say so politely.\n"
        "3. End each response with one of these phrases, varying them naturally:\n"
        f"{closings}\n\n"
        f"Current handbook context:\n{context}"
    )


def answer_with_context(
    question: str,
    context: str,
    model: str = "gpt-4.1-mini",
    client: OpenAI | None = None,
    temperature: float = 0.7,
    max_tokens: int = 500,
) -> str:
    """Generate an answer to ``question`` grounded in the handbook context.

    Raises:
        RateLimited: If the provider rejects the call for rate limits.
        AnswerGenerationError: For any other provider failure.
    """
    try:
        client = client or OpenAI()
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": build_system_prompt(context)},
                {"role": "user", "content": question},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except RateLimitError as exc:
        raise RateLimited("Rate limit exceeded. Please try again in about an hour.") from exc
    except Exception as exc:
        raise AnswerGenerationError(f"Answer generation failed: {exc}") from exc
    return response.choices[0].message.content or ""
