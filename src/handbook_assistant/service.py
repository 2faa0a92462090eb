from __future__ import annotations

from functools import partial
import logging
from pathlib import Path
from typing import Callable

from opentelemetry import trace

from .corpus import CorpusSnapshot, CorpusStore
from .errors import HandbookTooLarge, NoCorpusLoaded, RankingComputationError
from .extraction import extract_text, guess_mime_type
from .qa import answer_with_context, build_context, extract_key_terms
from .ranking import DEFAULT_WEIGHTS, ScoringWeights, fallback_sections, rank_sections
from .schema import HandbookStatus, QueryAnswer, Section, UploadResult
from .segmentation import segment_handbook
from .settings import OpenAISettings, ServiceSettings
from .taxonomy import DEFAULT_TAXONOMY, TopicTaxonomy
from .tracing import ATTR_CORPUS_VERSION, ATTR_INPUT_VALUE, ATTR_OUTPUT_VALUE, traced_generation, traced_ranking

logger = logging.getLogger(__name__)

NO_RELEVANT_ANSWER = (
    "I couldn't find any relevant information in the handbook for your question. "
    "Please try rephrasing your question or ask about a different topic."
)

TermExtractor = Callable[[str], list[str]]
AnswerGenerator = Callable[[str, str], str]


class HandbookAssistant:
    """Answers employee questions against the single active handbook.

    Collaborators are injected so the ranking path can run without network
    access: ``term_extractor`` maps a question to key terms and ``answer_fn``
    maps ``(question, context)`` to an answer.
    """

    def __init__(
        self,
        store: CorpusStore | None = None,
        *,
        term_extractor: TermExtractor | None = None,
        answer_fn: AnswerGenerator | None = None,
        taxonomy: TopicTaxonomy = DEFAULT_TAXONOMY,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        openai_settings: OpenAISettings | None = None,
        max_upload_bytes: int = ServiceSettings().max_upload_bytes,
        tracer: trace.Tracer | None = None,
    ):
        openai_settings = openai_settings or OpenAISettings()
        self.store = store or CorpusStore()
        self.taxonomy = taxonomy
        self.weights = weights
        self.max_upload_bytes = max_upload_bytes
        self._tracer = tracer or trace.get_tracer(__name__)

        self._extract_terms = term_extractor or partial(
            extract_key_terms,
            model=openai_settings.chat_model,
            temperature=openai_settings.term_temperature,
            max_tokens=openai_settings.max_term_tokens,
        )
        self._rank = traced_ranking(rank_sections, self._tracer)
        self._generate = traced_generation(
            answer_fn
            or partial(
                answer_with_context,
                model=openai_settings.chat_model,
                temperature=openai_settings.temperature,
                max_tokens=openai_settings.max_answer_tokens,
            ),
            self._tracer,
            model_name=openai_settings.chat_model,
        )

    @classmethod
    def from_settings(
        cls, openai_settings: OpenAISettings, service_settings: ServiceSettings, **kwargs
    ) -> "HandbookAssistant":
        weights = ScoringWeights(strict_word_match=service_settings.strict_word_match)
        return cls(
            weights=weights,
            openai_settings=openai_settings,
            max_upload_bytes=service_settings.max_upload_bytes,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Corpus lifecycle
    # ------------------------------------------------------------------

    def load_text(self, text: str, *, source: str, is_default: bool) -> CorpusSnapshot:
        """Segment extracted text and install it as the active corpus."""
        sections = segment_handbook(text)
        snapshot = self.store.replace_corpus(
            sections, source=source, is_default=is_default, content_length=len(text)
        )
        logger.info("Handbook %s loaded with %d sections", source or "<unnamed>", len(sections))
        return snapshot

    def load_default_handbook(self, path: str | Path) -> bool:
        """Load the bundled handbook if it exists; failures are logged, not raised."""
        handbook_path = Path(path)
        if not handbook_path.exists():
            logger.info("No default handbook at %s", handbook_path)
            return False
        try:
            text = extract_text(handbook_path.read_bytes(), guess_mime_type(handbook_path))
            self.load_text(text, source=handbook_path.name, is_default=True)
        except Exception:
            logger.exception("Error loading default handbook from %s", handbook_path)
            return False
        return True

    def upload_handbook(self, file_bytes: bytes, mime_type: str, filename: str = "") -> UploadResult:
        """Replace the active handbook with an uploaded document.

        Extraction and segmentation finish before the corpus is swapped, so a
        failed upload leaves the previous handbook in place.

        Raises:
            HandbookTooLarge: If the upload exceeds ``max_upload_bytes``.
            DocumentProcessingError: If no text can be extracted.
        """
        logger.info("File received: %s (%d bytes, %s)", filename, len(file_bytes), mime_type)
        if len(file_bytes) > self.max_upload_bytes:
            raise HandbookTooLarge(
                f"Handbook is {len(file_bytes)} bytes; the limit is {self.max_upload_bytes} bytes."
            )

        text = extract_text(file_bytes, mime_type)
        snapshot = self.load_text(text, source=filename, is_default=False)
        return UploadResult(
            filename=filename,
            content_length=snapshot.content_length,
            sections=len(snapshot.sections),
            section_titles=snapshot.titles,
            is_default_handbook=False,
        )

    def status(self) -> HandbookStatus:
        return self.store.status()

    # ------------------------------------------------------------------
    # Question answering
    # ------------------------------------------------------------------

    def find_relevant_sections(self, question: str, sections: tuple[Section, ...]) -> tuple[list[Section], bool]:
        """Rank corpus sections for a question.

        Returns:
            Tuple of ``(sections, used_fallback)``. When key terms cannot be
            extracted, or the sections cannot be scored, the first three
            sections are returned unscored.

        Raises:
            NoCorpusLoaded: If ``sections`` is empty.
        """
        if not sections:
            raise NoCorpusLoaded("No handbook content available. Please upload a handbook first.")

        try:
            key_terms = self._extract_terms(question)
        except Exception as exc:
            logger.warning("Key-term extraction failed, using first sections as context: %s", exc)
            return fallback_sections(sections), True

        try:
            ranked = self._rank(key_terms, sections, taxonomy=self.taxonomy, weights=self.weights)
        except RankingComputationError as exc:
            logger.warning("Ranking failed, using first sections as context: %s", exc)
            return fallback_sections(sections), True
        return ranked, False

    def ask(self, question: str) -> QueryAnswer:
        """Answer a question from the sections most relevant to it.

        Raises:
            NoCorpusLoaded: If no handbook is loaded.
            AnswerGenerationError: If the answer call fails.
        """
        snapshot = self.store.get_current_corpus()
        if not snapshot.is_loaded:
            raise NoCorpusLoaded("No handbook content available. Please upload a handbook first.")

        with self._tracer.start_as_current_span("handbook-query") as span:
            span.set_attribute(ATTR_INPUT_VALUE, question)
            span.set_attribute(ATTR_CORPUS_VERSION, snapshot.version)
            logger.info("Received question: %s", question)

            sections, used_fallback = self.find_relevant_sections(question, snapshot.sections)
            if not sections:
                logger.info("No relevant sections found for query")
                return QueryAnswer(question=question, answer=NO_RELEVANT_ANSWER)

            titles = [section.title for section in sections]
            logger.info("Using sections: %s", titles)
            answer = self._generate(question, build_context(sections))
            span.set_attribute(ATTR_OUTPUT_VALUE, answer[:500])
            return QueryAnswer(question=question, answer=answer, used_sections=titles, fallback=used_fallback)
