from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Section:
    """Titled span of handbook text between two detected headers."""

    title: str
    content: str


@dataclass(frozen=True, slots=True)
class ScoredSection:
    """Section annotated with its relevance score for one ranking pass."""

    section: Section
    score: float

    @property
    def title(self) -> str:
        return self.section.title


@dataclass(slots=True)
class HandbookStatus:
    """Read-only projection of the active corpus for status endpoints."""

    has_handbook: bool
    sections: int
    section_titles: list[str]
    is_default_handbook: bool
    version: int = 0


@dataclass(slots=True)
class UploadResult:
    """Summary returned after a handbook upload replaced the corpus."""

    filename: str
    content_length: int
    sections: int
    section_titles: list[str]
    is_default_handbook: bool = False


@dataclass(slots=True)
class QueryAnswer:
    """Generated answer plus the titles of sections used as context."""

    question: str
    answer: str
    used_sections: list[str] = field(default_factory=list)
    fallback: bool = False
