"""Tests for keystride.ui.models – word stream render states."""

from __future__ import annotations

from keystride.ui.models import RenderedWord, WordState, build_word_states


TARGETS = ["sad", "lad", "fall", "ask", "flask"]


# ===========================================================================
# build_word_states
# ===========================================================================

class TestBuildWordStates:
    def test_fresh_round(self):
        words = build_word_states(TARGETS, [], 0, "")
        assert words[0] == RenderedWord("sad", WordState.ACTIVE, "")
        assert all(w.state is WordState.PENDING for w in words[1:])

    def test_completed_and_missed(self):
        words = build_word_states(TARGETS, ["sad", "lsd"], 2, "fa")
        assert words[0].state is WordState.COMPLETED
        assert words[1] == RenderedWord("lad", WordState.MISSED, "lsd")
        assert words[2] == RenderedWord("fall", WordState.ACTIVE, "fa")
        assert words[3].state is WordState.PENDING

    def test_window_starts_one_word_back(self):
        words = build_word_states(TARGETS, ["sad", "lad", "fall"], 3, "", window=2)
        assert [w.text for w in words] == ["fall", "ask"]

    def test_window_at_start(self):
        words = build_word_states(TARGETS, [], 0, "", window=3)
        assert [w.text for w in words] == ["sad", "lad", "fall"]

    def test_window_past_end(self):
        words = build_word_states(TARGETS, ["sad"] * 4, 4, "", window=10)
        assert [w.text for w in words] == ["ask", "flask"]

    def test_empty(self):
        assert build_word_states([], [], 0, "") == []
