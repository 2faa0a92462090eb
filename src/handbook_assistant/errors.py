"""Exception hierarchy shared by the segmenter, ranker, and service layer."""
from __future__ import annotations


class HandbookError(Exception):
    """Base class for every error raised by handbook_assistant."""


class SegmentationInputError(HandbookError, TypeError):
    """Raised when segmentation receives something other than a string."""


class DocumentProcessingError(HandbookError):
    """Raised when an uploaded or default handbook cannot be turned into text."""


class NoCorpusLoaded(HandbookError):
    """Raised when ranking or answering is attempted with zero sections."""


class TermExtractionFailure(HandbookError):
    """Raised when key terms cannot be extracted from a question.

    Callers recover by falling back to the first sections of the corpus.
    """


class RankingComputationError(HandbookError):
    """Raised for unexpected faults while expanding terms or scoring sections."""


class AnswerGenerationError(HandbookError):
    """Raised when the language model fails to produce an answer."""


class RateLimited(AnswerGenerationError):
    """Raised when the language model provider rejects a call for rate limits."""

    retry_after_seconds = 3600


class HandbookTooLarge(DocumentProcessingError):
    """Raised when an upload exceeds the configured size limit."""
