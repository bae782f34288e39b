"""Tests for keystride.ui.formatting – durations and metrics as text."""

from __future__ import annotations

from keystride.ui.formatting import format_accuracy, format_countdown, format_play_time, format_wpm


class TestFormatCountdown:
    def test_minutes_and_seconds(self):
        assert format_countdown(75) == "01:15"

    def test_zero(self):
        assert format_countdown(0) == "00:00"

    def test_negative_clamped(self):
        assert format_countdown(-3) == "00:00"

    def test_fraction_truncated(self):
        assert format_countdown(59.9) == "00:59"


class TestFormatPlayTime:
    def test_under_an_hour(self):
        assert format_play_time(249) == "04m 09s"

    def test_over_an_hour(self):
        assert format_play_time(3600 + 5 * 60 + 30) == "1h 05m"


class TestMetrics:
    def test_wpm_truncates(self):
        assert format_wpm(41.9) == "41"

    def test_accuracy(self):
        assert format_accuracy(93.7) == "93%"

    def test_accuracy_clamped(self):
        assert format_accuracy(120) == "100%"
