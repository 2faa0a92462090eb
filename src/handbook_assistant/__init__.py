"""Employee handbook question answering: segmentation, section ranking, and answers."""

from .corpus import CorpusSnapshot, CorpusStore
from .ranking import ScoringWeights, rank_sections
from .schema import HandbookStatus, QueryAnswer, ScoredSection, Section, UploadResult
from .segmentation import segment

__all__ = [
    "CorpusSnapshot",
    "CorpusStore",
    "HandbookStatus",
    "QueryAnswer",
    "ScoredSection",
    "ScoringWeights",
    "Section",
    "UploadResult",
    "rank_sections",
    "segment",
]
