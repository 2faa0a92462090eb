from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

TopicTaxonomy = Mapping[str, tuple[str, ...]]


def build_taxonomy(mapping: Mapping[str, Iterable[str]]) -> TopicTaxonomy:
    """Freeze a topic -> keywords mapping into immutable ranking configuration.

    Args:
        mapping: Topic names mapped to related keywords or phrases.

    Returns:
        Read-only mapping of topic name to a lowercase keyword tuple.
    """
    return MappingProxyType(
        {topic: tuple(keyword.lower() for keyword in keywords) for topic, keywords in mapping.items()}
    )


DEFAULT_TAXONOMY: TopicTaxonomy = build_taxonomy(
    {
        "reporting issues": [
            "grievance",
            "complaint",
            "report",
            "issue",
            "concern",
            "problem",
            "misconduct",
            "violation",
            "harassment",
            "discrimination",
            "safety",
            "ethics",
        ],
        "leave": ["vacation", "sick", "pto", "time off", "holiday", "leave", "absence"],
        "benefits": [
            "health",
            "insurance",
            "retirement",
            "medical",
            "dental",
            "vision",
            "401k",
            "pension",
            "perks",
            "wellness",
            "gym",
            "fitness",
            "mental health",
            "wellbeing",
            "programs",
            "benefits",
        ],
        "conduct": ["behavior", "conduct", "discipline", "policy", "standard", "rule", "guideline", "expectation"],
        "safety": ["safety", "security", "emergency", "hazard", "incident", "accident", "injury", "health"],
        "wellness": [
            "wellness",
            "mental health",
            "gym",
            "fitness",
            "health",
            "wellbeing",
            "work-life",
            "balance",
            "programs",
            "resources",
            "memberships",
        ],
    }
)


def _related(term: str, keyword: str) -> bool:
    return term in keyword or keyword in term


def expand_terms(key_terms: Iterable[str], taxonomy: TopicTaxonomy = DEFAULT_TAXONOMY) -> list[str]:
    """Broaden key terms with the full keyword list of every related topic.

    A topic is related when any key term and any of its keywords contain one
    another. The whole keyword list of each related topic joins the result.

    Args:
        key_terms: Lowercase words or phrases extracted from a question.
        taxonomy: Topic -> keywords configuration.

    Returns:
        Deduplicated search terms, original key terms first, then pulled-in
        keywords in taxonomy order.
    """
    terms = list(dict.fromkeys(key_terms))
    pulled: list[str] = []
    for keywords in taxonomy.values():
        if any(_related(term, keyword) for term in terms for keyword in keywords):
            pulled.extend(keywords)
    return list(dict.fromkeys([*terms, *pulled]))
