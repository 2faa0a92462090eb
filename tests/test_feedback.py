"""Tests for feedback.py — in-memory feedback log and statistics."""
from __future__ import annotations

from handbook_assistant.feedback import HELPFUL, NOT_HELPFUL, FeedbackStore


class TestFeedbackStore:
    def test_record_returns_entry(self):
        store = FeedbackStore()
        entry = store.record("m-1", HELPFUL, question="Q?", answer="A", sections=["Leave"])
        assert entry.message_id == "m-1"
        assert entry.sections == ["Leave"]
        assert entry.timestamp is not None

    def test_entries_are_copied(self):
        store = FeedbackStore()
        store.record("m-1", HELPFUL)
        store.entries().clear()
        assert len(store.entries()) == 1

    def test_sections_default_empty(self):
        assert FeedbackStore().record("m-1", NOT_HELPFUL).sections == []


class TestFeedbackStats:
    def test_empty(self):
        stats = FeedbackStore().stats()
        assert (stats.total, stats.helpful, stats.not_helpful) == (0, 0, 0)
        assert stats.most_helpful_sections == []

    def test_counts(self):
        store = FeedbackStore()
        store.record("m-1", HELPFUL)
        store.record("m-2", NOT_HELPFUL)
        store.record("m-3", HELPFUL)
        stats = store.stats()
        assert (stats.total, stats.helpful, stats.not_helpful) == (3, 2, 1)

    def test_most_helpful_sections_ignore_negative_feedback(self):
        store = FeedbackStore()
        store.record("m-1", HELPFUL, sections=["Leave", "Benefits"])
        store.record("m-2", HELPFUL, sections=["Leave"])
        store.record("m-3", NOT_HELPFUL, sections=["Parking", "Parking", "Parking"])
        assert store.stats().most_helpful_sections == [("Leave", 2), ("Benefits", 1)]

    def test_ties_keep_first_seen_order(self):
        store = FeedbackStore()
        store.record("m-1", HELPFUL, sections=["Safety", "Conduct"])
        assert store.stats().most_helpful_sections == [("Safety", 1), ("Conduct", 1)]

    def test_top_five_only(self):
        store = FeedbackStore()
        store.record("m-1", HELPFUL, sections=[f"S{idx}" for idx in range(8)])
        assert len(store.stats().most_helpful_sections) == 5
