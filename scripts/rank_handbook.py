from __future__ import annotations

import argparse
from pathlib import Path

from handbook_assistant.extraction import load_document
from handbook_assistant.ranking import ScoringWeights, rank_sections, score_sections
from handbook_assistant.schema import Section
from handbook_assistant.segmentation import segment_handbook
from handbook_assistant.taxonomy import DEFAULT_TAXONOMY, expand_terms


def ranked_with_scores(
    key_terms: list[str], sections: list[Section], weights: ScoringWeights
) -> list[tuple[Section, float]]:
    """Pair each ranked section with its own score.

    Titles repeat in real handbooks, so scores are matched by section object, not title.
    """
    search_terms = expand_terms(key_terms, DEFAULT_TAXONOMY)
    scores = {id(row.section): row.score for row in score_sections(sections, search_terms, weights)}
    return [(section, scores[id(section)]) for section in rank_sections(key_terms, sections, weights=weights)]


def main() -> None:
    """Segment a handbook and print the sections ranked for comma-separated key terms."""
    parser = argparse.ArgumentParser(description="Rank handbook sections for key terms (no LLM calls)")
    parser.add_argument("--handbook", required=True, help="Path to a handbook PDF or text file")
    parser.add_argument("--terms", required=True, help="Comma-separated key terms, e.g. 'vacation,time off'")
    parser.add_argument(
        "--strict-word-match",
        action="store_true",
        help="Only award the whole-word bonus when the term itself appears in the section",
    )
    args = parser.parse_args()

    sections = segment_handbook(load_document(Path(args.handbook)))
    key_terms = [term.strip().lower() for term in args.terms.split(",") if term.strip()]
    weights = ScoringWeights(strict_word_match=args.strict_word_match)

    print(f"{len(sections)} sections")
    for rank, (section, score) in enumerate(ranked_with_scores(key_terms, sections, weights), start=1):
        print(f"{rank}. {section.title} (score {score:.1f})")


if __name__ == "__main__":
    main()
