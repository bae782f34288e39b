"""Statistics records shared by the session engine and the progress store.

Profiles are exchanged as a JSON list of plain dictionaries. ``profile_to_dict``
and ``profile_from_dict`` define that shape; the parser validates every field
and raises ``SnapshotError`` on the first mismatch.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from keystride.core.layouts import MAX_LEVEL


class SnapshotError(ValueError):
    """Raised when a serialized profile collection cannot be used."""


@dataclass
class KeyStat:
    char: str
    attempts: int = 0
    errors: int = 0

    @property
    def error_rate(self) -> float:
        return self.errors / self.attempts if self.attempts > 0 else 0.0

    def record(self, is_error: bool) -> None:
        self.attempts += 1
        if is_error:
            self.errors += 1


@dataclass(frozen=True)
class KeyEvent:
    """Judgment of the most recent key, used for on-screen feedback."""

    char: str
    is_correct: bool


@dataclass
class LevelStat:
    best_wpm: float = 0.0
    best_accuracy: float = 0.0
    games_played: int = 0
    total_time: float = 0.0
    last_wpm: float = 0.0


@dataclass
class DailyStat:
    date: date
    wpm: float = 0.0
    accuracy: float = 0.0
    games_played: int = 0


@dataclass
class UserStats:
    average_wpm: float = 0.0
    average_accuracy: float = 100.0
    games_played: int = 0
    total_time_played: float = 0.0
    key_stats: Dict[str, KeyStat] = field(default_factory=dict)
    level_stats: Dict[int, LevelStat] = field(default_factory=dict)
    history: List[DailyStat] = field(default_factory=list)


@dataclass
class UserProfile:
    name: str
    avatar: str
    current_level: int = 1
    max_unlocked_level: int = 1
    stats: UserStats = field(default_factory=UserStats)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class SessionSummary:
    """What a finished round contributes to a profile."""

    wpm: float
    accuracy: float
    level: int
    duration: float = 0.0
    key_stats: Dict[str, KeyStat] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def profile_to_dict(profile: UserProfile) -> Dict[str, Any]:
    stats = profile.stats
    return {
        "id": profile.id,
        "name": profile.name,
        "avatar": profile.avatar,
        "current_level": profile.current_level,
        "max_unlocked_level": profile.max_unlocked_level,
        "stats": {
            "average_wpm": stats.average_wpm,
            "average_accuracy": stats.average_accuracy,
            "games_played": stats.games_played,
            "total_time_played": stats.total_time_played,
            "key_stats": {
                char: {"char": ks.char, "attempts": ks.attempts, "errors": ks.errors}
                for char, ks in stats.key_stats.items()
            },
            "level_stats": {
                str(level): {
                    "best_wpm": ls.best_wpm,
                    "best_accuracy": ls.best_accuracy,
                    "games_played": ls.games_played,
                    "total_time": ls.total_time,
                    "last_wpm": ls.last_wpm,
                }
                for level, ls in sorted(stats.level_stats.items())
            },
            "history": [
                {
                    "date": day.date.isoformat(),
                    "wpm": day.wpm,
                    "accuracy": day.accuracy,
                    "games_played": day.games_played,
                }
                for day in stats.history
            ],
        },
    }


def profile_from_dict(raw: Any) -> UserProfile:
    if not isinstance(raw, dict):
        raise SnapshotError("profile record must be an object")
    profile_id = _text(raw, "id")
    name = _text(raw, "name")
    avatar = _text(raw, "avatar", allow_empty=True)
    current_level = _integer(raw, "current_level")
    max_unlocked = _integer(raw, "max_unlocked_level")
    if not 1 <= max_unlocked <= MAX_LEVEL:
        raise SnapshotError(f"profile {profile_id}: max_unlocked_level out of range")
    if not 1 <= current_level <= max_unlocked:
        raise SnapshotError(f"profile {profile_id}: current_level out of range")
    return UserProfile(
        id=profile_id,
        name=name,
        avatar=avatar,
        current_level=current_level,
        max_unlocked_level=max_unlocked,
        stats=_stats_from_dict(raw.get("stats")),
    )


def _stats_from_dict(raw: Any) -> UserStats:
    if not isinstance(raw, dict):
        raise SnapshotError("'stats' must be an object")

    key_stats: Dict[str, KeyStat] = {}
    raw_keys = raw.get("key_stats", {})
    if not isinstance(raw_keys, dict):
        raise SnapshotError("'key_stats' must be an object")
    for char, value in raw_keys.items():
        if not isinstance(value, dict):
            raise SnapshotError(f"key stat for {char!r} must be an object")
        attempts = _integer(value, "attempts")
        errors = _integer(value, "errors")
        if not 0 <= errors <= attempts:
            raise SnapshotError(f"key stat for {char!r}: errors must be within 0..attempts")
        key_stats[char] = KeyStat(char=char, attempts=attempts, errors=errors)

    level_stats: Dict[int, LevelStat] = {}
    raw_levels = raw.get("level_stats", {})
    if not isinstance(raw_levels, dict):
        raise SnapshotError("'level_stats' must be an object")
    for level_key, value in raw_levels.items():
        try:
            level = int(level_key)
        except (TypeError, ValueError):
            raise SnapshotError(f"invalid level key {level_key!r}") from None
        if not isinstance(value, dict):
            raise SnapshotError(f"level stat {level} must be an object")
        level_stats[level] = LevelStat(
            best_wpm=_number(value, "best_wpm"),
            best_accuracy=_number(value, "best_accuracy"),
            games_played=_integer(value, "games_played"),
            total_time=_number(value, "total_time"),
            last_wpm=_number(value, "last_wpm"),
        )

    history: List[DailyStat] = []
    raw_history = raw.get("history", [])
    if not isinstance(raw_history, list):
        raise SnapshotError("'history' must be a list")
    seen = set()
    for value in raw_history:
        if not isinstance(value, dict):
            raise SnapshotError("history entries must be objects")
        try:
            day = date.fromisoformat(str(value.get("date")))
        except ValueError:
            raise SnapshotError(f"invalid history date {value.get('date')!r}") from None
        if day in seen:
            raise SnapshotError(f"duplicate history entry for {day.isoformat()}")
        seen.add(day)
        history.append(
            DailyStat(
                date=day,
                wpm=_number(value, "wpm"),
                accuracy=_number(value, "accuracy"),
                games_played=_integer(value, "games_played"),
            )
        )
    history.sort(key=lambda d: d.date)

    return UserStats(
        average_wpm=_number(raw, "average_wpm"),
        average_accuracy=_number(raw, "average_accuracy"),
        games_played=_integer(raw, "games_played"),
        total_time_played=_number(raw, "total_time_played"),
        key_stats=key_stats,
        level_stats=level_stats,
        history=history,
    )


def _text(raw: Dict[str, Any], key: str, allow_empty: bool = False) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or (not allow_empty and not value.strip()):
        raise SnapshotError(f"missing or invalid '{key}'")
    return value


def _integer(raw: Dict[str, Any], key: str) -> int:
    value = raw.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SnapshotError(f"missing or invalid '{key}'")
    return value


def _number(raw: Dict[str, Any], key: str) -> float:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise SnapshotError(f"missing or invalid '{key}'")
    return float(value)
