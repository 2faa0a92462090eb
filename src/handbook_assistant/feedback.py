from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import threading

logger = logging.getLogger(__name__)

HELPFUL = "helpful"
NOT_HELPFUL = "not_helpful"


@dataclass(slots=True)
class FeedbackEntry:
    """One thumbs-up/down rating on a generated answer."""

    message_id: str
    feedback: str
    question: str = ""
    answer: str = ""
    sections: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(slots=True)
class FeedbackStats:
    """Aggregate counts over all recorded feedback."""

    total: int
    helpful: int
    not_helpful: int
    most_helpful_sections: list[tuple[str, int]]


class FeedbackStore:
    """In-memory feedback log for the lifetime of the process."""

    def __init__(self) -> None:
        self._entries: list[FeedbackEntry] = []
        self._lock = threading.Lock()

    def record(
        self,
        message_id: str,
        feedback: str,
        question: str = "",
        answer: str = "",
        sections: list[str] | None = None,
    ) -> FeedbackEntry:
        entry = FeedbackEntry(
            message_id=message_id,
            feedback=feedback,
            question=question,
            answer=answer,
            sections=list(sections or []),
        )
        with self._lock:
            self._entries.append(entry)
        logger.info(
            "Feedback received - %s for message %s (sections: %s)",
            feedback,
            message_id,
            ", ".join(entry.sections) or "none",
        )
        return entry

    def entries(self) -> list[FeedbackEntry]:
        with self._lock:
            return list(self._entries)

    def stats(self, top_k: int = 5) -> FeedbackStats:
        """Count ratings and rank section titles by helpful votes.

        Ties in helpful count keep the order in which titles were first rated.
        """
        entries = self.entries()
        section_counts: Counter[str] = Counter()
        for entry in entries:
            if entry.feedback == HELPFUL:
                section_counts.update(entry.sections)

        return FeedbackStats(
            total=len(entries),
            helpful=sum(1 for entry in entries if entry.feedback == HELPFUL),
            not_helpful=sum(1 for entry in entries if entry.feedback == NOT_HELPFUL),
            most_helpful_sections=section_counts.most_common(top_k),
        )
