"""Ownership of the single active handbook corpus.

The corpus is held as one immutable snapshot. Readers take the current
snapshot reference and rank against it; writers build a complete new snapshot
and swap the reference in a single assignment, so a ranking pass never sees a
half-replaced handbook.

Key operations:
  get_current_corpus - return the active snapshot (never None)
  replace_corpus     - install a new snapshot wholesale, bumping the version
  status             - read-only projection for status endpoints
"""
from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .schema import HandbookStatus, Section


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class CorpusSnapshot:
    """Immutable, versioned view of the sections of one handbook."""

    version: int
    sections: tuple[Section, ...] = ()
    source: str = ""
    is_default: bool = True
    content_length: int = 0
    loaded_at: datetime = field(default_factory=_utcnow)

    @property
    def is_loaded(self) -> bool:
        return self.content_length > 0 and len(self.sections) > 0

    @property
    def titles(self) -> list[str]:
        return [section.title for section in self.sections]


class CorpusStore:
    """Holds the active corpus and replaces it atomically.

    Usage
    -----
    store = CorpusStore()
    store.replace_corpus(segment(text), source="handbook.pdf", content_length=len(text))
    snapshot = store.get_current_corpus()
    ranked = rank_sections(terms, snapshot.sections)
    """

    def __init__(self) -> None:
        self._snapshot = CorpusSnapshot(version=0)
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_current_corpus(self) -> CorpusSnapshot:
        """Return the active snapshot.

        The returned object is immutable; later replacements do not affect it.
        """
        return self._snapshot

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def replace_corpus(
        self,
        sections: Sequence[Section],
        *,
        source: str = "",
        is_default: bool = False,
        content_length: int | None = None,
    ) -> CorpusSnapshot:
        """Install a new handbook, replacing the previous one entirely.

        Args:
            sections: Segmented sections of the new handbook, in document order.
            source: Human-readable origin, e.g. the uploaded filename.
            is_default: Whether this is the handbook loaded at startup.
            content_length: Length of the extracted text; defaults to the summed
                section content length.

        Returns:
            The snapshot now active.
        """
        frozen = tuple(sections)
        if content_length is None:
            content_length = sum(len(section.content) for section in frozen)

        with self._write_lock:
            snapshot = CorpusSnapshot(
                version=self._snapshot.version + 1,
                sections=frozen,
                source=source,
                is_default=is_default,
                content_length=content_length,
            )
            self._snapshot = snapshot
        return snapshot

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> HandbookStatus:
        snapshot = self._snapshot
        return HandbookStatus(
            has_handbook=snapshot.is_loaded,
            sections=len(snapshot.sections),
            section_titles=snapshot.titles,
            is_default_handbook=snapshot.is_default,
            version=snapshot.version,
        )
