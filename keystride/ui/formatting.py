"""Text formatting for durations and typing metrics."""

from __future__ import annotations


def format_countdown(seconds: float) -> str:
    """``MM:SS`` for the timed-round clock."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_play_time(seconds: float) -> str:
    """``1h 05m`` once past an hour, ``04m 09s`` below it."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes:02d}m {secs:02d}s"


def format_wpm(wpm: float) -> str:
    return f"{int(wpm)}"


def format_accuracy(accuracy: float) -> str:
    a = max(0.0, min(100.0, float(accuracy)))
    return f"{int(a)}%"
