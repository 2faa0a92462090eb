from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
import logging
import re

from .errors import NoCorpusLoaded, RankingComputationError
from .schema import ScoredSection, Section
from .taxonomy import DEFAULT_TAXONOMY, TopicTaxonomy, expand_terms

logger = logging.getLogger(__name__)

POLICY_PATTERN = re.compile(r"policy|procedure|guideline|standard|requirement", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    """Per-term score contributions and the policy-language multiplier.

    ``strict_word_match`` switches the whole-word signal from the legacy rule
    (any search term found as a whole word in the section, or the term found
    inside any search term, itself included) to a per-term check against the
    section text only.
    """

    title: float = 3
    exact: float = 2
    word: float = 1
    policy_boost: float = 1.5
    strict_word_match: bool = False


DEFAULT_WEIGHTS = ScoringWeights()


@lru_cache(maxsize=1024)
def _word_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(term)}\b")


def _has_word(term: str, text: str) -> bool:
    return _word_pattern(term).search(text) is not None


def normalize_terms(key_terms: Iterable[str]) -> list[str]:
    """Lowercase and trim key terms, dropping blanks and duplicates."""
    cleaned = (term.strip().lower() for term in key_terms)
    return list(dict.fromkeys(term for term in cleaned if term))


def score_section(section: Section, search_terms: Sequence[str], weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    """Score one section against expanded search terms.

    Args:
        section: Section to score.
        search_terms: Lowercase search terms after taxonomy expansion.
        weights: Score contributions and policy boost.

    Returns:
        Summed per-term score, multiplied by the policy boost when the section
        contains policy language.
    """
    title = section.title.lower()
    text = f"{section.title} {section.content}".lower()
    any_term_in_text = any(_has_word(term, text) for term in search_terms)

    score = 0.0
    for term in search_terms:
        if term in title:
            score += weights.title
        if term in text:
            score += weights.exact
        if weights.strict_word_match:
            word_hit = _has_word(term, text)
        else:
            word_hit = any_term_in_text or any(_has_word(term, other) for other in search_terms)
        if word_hit:
            score += weights.word

    if POLICY_PATTERN.search(text):
        score *= weights.policy_boost
    return score


def score_sections(
    sections: Sequence[Section], search_terms: Sequence[str], weights: ScoringWeights = DEFAULT_WEIGHTS
) -> list[ScoredSection]:
    """Score every section independently, preserving corpus order."""
    return [ScoredSection(section=section, score=score_section(section, search_terms, weights)) for section in sections]


def _with_neighbors(selected: list[Section], sections: Sequence[Section]) -> list[Section]:
    """Append the corpus neighbours of the top section, skipping known titles.

    The top section is located by the first corpus index carrying its title.
    """
    top_title = selected[0].title
    main_index = next(idx for idx, section in enumerate(sections) if section.title == top_title)

    result = list(selected)
    neighbor_indices = (main_index - 1, main_index + 1)
    for idx in neighbor_indices:
        if 0 <= idx < len(sections):
            neighbor = sections[idx]
            if all(existing.title != neighbor.title for existing in result):
                result.append(neighbor)
    return result


def rank_sections(
    key_terms: Iterable[str],
    sections: Sequence[Section],
    taxonomy: TopicTaxonomy = DEFAULT_TAXONOMY,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    top_n: int = 3,
) -> list[Section]:
    """Select the sections most relevant to a question's key terms.

    Key terms are broadened through the topic taxonomy, every section is
    scored, and the best ``top_n`` positive-scoring sections are kept in score
    order (ties keep corpus order). The sections immediately before and after
    the best match are then appended when not already present.

    Args:
        key_terms: Words or phrases extracted from the question.
        sections: Corpus sections in document order.
        taxonomy: Topic -> keywords configuration used for term expansion.
        weights: Score contributions and policy boost.
        top_n: Maximum number of scored survivors.

    Returns:
        At most ``top_n + 2`` sections; empty when nothing scored above zero.

    Raises:
        NoCorpusLoaded: If ``sections`` is empty.
        RankingComputationError: If term expansion or scoring fails.
    """
    if not sections:
        raise NoCorpusLoaded("No handbook sections are loaded.")

    try:
        search_terms = expand_terms(normalize_terms(key_terms), taxonomy)
        logger.debug("Search terms including topic keywords: %s", search_terms)
        scored = score_sections(sections, search_terms, weights)
    except Exception as exc:
        raise RankingComputationError(f"Could not rank handbook sections: {exc}") from exc
    logger.debug("Section scores: %s", [(row.title, row.score) for row in scored])

    ranked = sorted(scored, key=lambda row: row.score, reverse=True)
    selected = [row.section for row in ranked if row.score > 0][:top_n]
    if not selected:
        return []
    return _with_neighbors(selected, sections)


def fallback_sections(sections: Sequence[Section], count: int = 3) -> list[Section]:
    """Return the first ``count`` corpus sections, unscored."""
    return list(sections[:count])
