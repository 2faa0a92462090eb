from __future__ import annotations

import re
from typing import Callable

from .errors import SegmentationInputError
from .schema import Section

DEFAULT_TITLE = "Introduction"

_LABELED_HEADING = re.compile(r"^[A-Z][\w\s-]+:")
# The keyword may carry its own number ("SECTION 2 Overview", "Article 4.1 Leave").
# Case is ignored, so prose opening with a keyword ("chapter 3 of ...") is a header too.
_STRUCTURAL_HEADING = re.compile(
    r"^(?:(?:SECTION|ARTICLE|CHAPTER)(?:\s+\d+(?:\.\d+)*\.?)?|\d+\.)\s+[A-Z]",
    re.IGNORECASE,
)


def is_all_caps_heading(line: str) -> bool:
    """Return True for upper-case lines longer than ten characters."""
    return len(line) > 10 and line.upper() == line


def is_labeled_heading(line: str) -> bool:
    """Return True for capitalised labels ending in a colon, e.g. ``Vacation Policy:``."""
    return _LABELED_HEADING.match(line) is not None


def is_structural_heading(line: str) -> bool:
    """Return True for ``SECTION 2 ...``, ``Article IV ...`` or ``3. Benefits`` style lines."""
    return _STRUCTURAL_HEADING.match(line) is not None


HEADER_RULES: tuple[Callable[[str], bool], ...] = (
    is_all_caps_heading,
    is_labeled_heading,
    is_structural_heading,
)


def is_header_line(line: str, rules: tuple[Callable[[str], bool], ...] = HEADER_RULES) -> bool:
    """Classify a trimmed line as a header if any rule fires, in rule order."""
    return any(rule(line) for rule in rules)


def segment(text: str, rules: tuple[Callable[[str], bool], ...] = HEADER_RULES) -> list[Section]:
    """Split raw handbook text into titled sections in document order.

    Text before the first detected header lands in an ``Introduction`` section.
    Blank lines are dropped and sections with no content are discarded, so a
    header on the very first line replaces the empty introduction.

    Args:
        text: Raw extracted document text.
        rules: Header predicates evaluated against each trimmed line.

    Returns:
        Sections whose content holds the untrimmed body lines, each followed by
        a newline.

    Raises:
        SegmentationInputError: If ``text`` is not a string.
    """
    if not isinstance(text, str):
        raise SegmentationInputError(f"Expected handbook text as str, got {type(text).__name__}")

    sections: list[Section] = []
    title = DEFAULT_TITLE
    lines: list[str] = []

    def _commit() -> None:
        content = "".join(lines)
        if content.strip():
            sections.append(Section(title=title, content=content))

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not lines and not line:
            continue

        if is_header_line(line, rules):
            _commit()
            title = line
            lines = []
        elif line:
            lines.append(raw_line + "\n")

    _commit()
    return sections


def segment_handbook(text: str) -> list[Section]:
    """Segment a whole handbook, guaranteeing at least one section for non-blank text.

    A document made only of header-like lines segments to nothing; it is kept
    as a single introduction section instead so the corpus is never empty.
    """
    sections = segment(text)
    if not sections and text.strip():
        body = "".join(line + "\n" for line in text.split("\n") if line.strip())
        sections = [Section(title=DEFAULT_TITLE, content=body)]
    return sections
