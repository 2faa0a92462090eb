"""Shared pytest fixtures for handbook_assistant unit tests."""
from __future__ import annotations

import pytest

from handbook_assistant.corpus import CorpusStore
from handbook_assistant.schema import Section

HANDBOOK_TEXT = """Welcome to Acme Corp. This handbook explains how we work.

LEAVE AND TIME OFF
Employees accrue 15 days of paid vacation per year.
Sick leave is separate and does not roll over.

Benefits Overview: what we offer
Health insurance starts on your first day.
Dental and vision plans are optional.

SECTION 4 Workplace Safety
Report any incident or injury to security within one hour.
Follow the emergency procedure posted on each floor.

3. Code Of Conduct
Harassment and discrimination are never tolerated.
"""


@pytest.fixture()
def handbook_text() -> str:
    return HANDBOOK_TEXT


@pytest.fixture()
def sample_sections() -> list[Section]:
    return [
        Section(title="Welcome", content="We are glad you joined the team.\n"),
        Section(title="Leave Of Absence", content="Employees receive paid leave each year.\n"),
        Section(title="Parking", content="Parking spaces are assigned by lot.\n"),
    ]


@pytest.fixture()
def loaded_store(sample_sections) -> CorpusStore:
    store = CorpusStore()
    store.replace_corpus(sample_sections, source="fixture.txt")
    return store


@pytest.fixture()
def fake_term_extractor():
    """Key-term extractor that returns fixed terms without calling a model."""

    def _extract(question: str) -> list[str]:
        return ["leave"]

    return _extract


@pytest.fixture()
def fake_answer_fn():
    """Answer generator that records its inputs and echoes a fixed reply."""
    calls: list[tuple[str, str]] = []

    def _answer(question: str, context: str) -> str:
        calls.append((question, context))
        return "You get paid leave each year."

    _answer.calls = calls
    return _answer
