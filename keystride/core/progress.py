from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from keystride.core.layouts import MAX_LEVEL
from keystride.core.stats import (
    DailyStat,
    KeyStat,
    LevelStat,
    SessionSummary,
    SnapshotError,
    UserProfile,
    profile_from_dict,
    profile_to_dict,
)

logger = logging.getLogger(__name__)

UNLOCK_MIN_WPM = 40.0
UNLOCK_MIN_ACCURACY = 90.0


class ProfileNotFoundError(KeyError):
    """Raised for a profile id the store does not hold."""


@dataclass
class RecordResult:
    """Outcome of folding one session into a profile."""

    profile: UserProfile
    level_stat: LevelStat
    unlocked: bool
    previous_max_level: int
    improved: bool


@dataclass
class ImportResult:
    added: int = 0
    replaced: int = 0


def default_profiles_path() -> Path:
    home = os.environ.get("KEYSTRIDE_HOME")
    base = Path(home).expanduser() if home else Path.home() / ".keystride"
    return base / "profiles.json"


def dump_snapshot(profiles: List[UserProfile]) -> str:
    return json.dumps([profile_to_dict(p) for p in profiles], indent=2, ensure_ascii=False)


def load_snapshot(serialized: Union[str, bytes]) -> List[UserProfile]:
    """Parse a snapshot, raising ``SnapshotError`` if any part is unusable.

    Bytes are decoded as UTF-8 first.
    """
    if isinstance(serialized, bytes):
        try:
            serialized = serialized.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SnapshotError(f"snapshot is not UTF-8 text: {e}") from e
    try:
        payload: Any = json.loads(serialized)
    except (TypeError, ValueError, RecursionError) as e:
        raise SnapshotError(f"snapshot is not valid JSON: {e}") from e
    if not isinstance(payload, list):
        raise SnapshotError("snapshot must be a list of profiles")
    return [profile_from_dict(item) for item in payload]


class ProgressStore:
    """Owns user profiles and every change to their statistics.

    Profiles change only by folding in a finished session or by importing a
    snapshot. The collection is written to ``profiles.json`` after each change;
    a missing or unreadable file starts an empty collection.
    """

    def __init__(
        self,
        file_path: Optional[Path] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._file_path = file_path or default_profiles_path()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._today = today
        self._profiles: List[UserProfile] = self._load()
        self._current_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def profiles(self) -> List[UserProfile]:
        return list(self._profiles)

    @property
    def current_profile(self) -> Optional[UserProfile]:
        if self._current_id is None:
            return None
        return self._find(self._current_id)

    def get_profile(self, profile_id: str) -> UserProfile:
        profile = self._find(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    def create_profile(self, name: str, avatar: str) -> UserProfile:
        if not name or not name.strip():
            raise ValueError("profile name must not be blank")
        profile = UserProfile(name=name.strip(), avatar=avatar)
        self._profiles.append(profile)
        self._current_id = profile.id
        logger.info("Created profile %s (%s)", profile.name, profile.id)
        self._save()
        return profile

    def select_profile(self, profile_id: str) -> UserProfile:
        profile = self.get_profile(profile_id)
        self._current_id = profile.id
        return profile

    # ------------------------------------------------------------------
    # Session aggregation
    # ------------------------------------------------------------------

    def record_session(self, profile_id: str, summary: SessionSummary) -> RecordResult:
        profile = self.get_profile(profile_id)
        stats = profile.stats

        games = stats.games_played
        stats.average_wpm = (stats.average_wpm * games + summary.wpm) / (games + 1)
        stats.average_accuracy = (stats.average_accuracy * games + summary.accuracy) / (games + 1)
        stats.games_played = games + 1
        stats.total_time_played += summary.duration

        for char, session_stat in summary.key_stats.items():
            existing = stats.key_stats.get(char)
            if existing is None:
                existing = stats.key_stats[char] = KeyStat(char)
            existing.attempts += session_stat.attempts
            existing.errors += session_stat.errors

        level_stat = stats.level_stats.get(summary.level)
        if level_stat is None:
            level_stat = stats.level_stats[summary.level] = LevelStat()
        improved = summary.wpm >= level_stat.last_wpm
        level_stat.games_played += 1
        level_stat.total_time += summary.duration
        level_stat.last_wpm = summary.wpm
        level_stat.best_wpm = max(level_stat.best_wpm, summary.wpm)
        level_stat.best_accuracy = max(level_stat.best_accuracy, summary.accuracy)

        self._fold_into_history(profile, summary)

        previous_max = profile.max_unlocked_level
        if (
            summary.wpm >= UNLOCK_MIN_WPM
            and summary.accuracy >= UNLOCK_MIN_ACCURACY
            and summary.level == profile.max_unlocked_level
            and summary.level < MAX_LEVEL
        ):
            profile.max_unlocked_level += 1
            logger.info("Profile %s unlocked level %d", profile.name, profile.max_unlocked_level)
        if summary.level < profile.max_unlocked_level:
            profile.current_level = min(summary.level + 1, profile.max_unlocked_level)

        self._save()
        return RecordResult(
            profile=profile,
            level_stat=replace(level_stat),
            unlocked=profile.max_unlocked_level > previous_max,
            previous_max_level=previous_max,
            improved=improved,
        )

    def _fold_into_history(self, profile: UserProfile, summary: SessionSummary) -> None:
        history = profile.stats.history
        today = self._today()
        for day in history:
            if day.date == today:
                games = day.games_played
                day.wpm = (day.wpm * games + summary.wpm) / (games + 1)
                day.accuracy = (day.accuracy * games + summary.accuracy) / (games + 1)
                day.games_played = games + 1
                return
        history.append(DailyStat(date=today, wpm=summary.wpm, accuracy=summary.accuracy, games_played=1))
        history.sort(key=lambda d: d.date)

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_all(self) -> str:
        return dump_snapshot(self._profiles)

    def import_snapshot(self, serialized: Union[str, bytes]) -> ImportResult:
        """Merge a snapshot by profile id; matching local profiles are replaced whole.

        Nothing changes unless the whole snapshot parses.
        """
        incoming = load_snapshot(serialized)
        result = ImportResult()
        positions: Dict[str, int] = {p.id: i for i, p in enumerate(self._profiles)}
        for profile in incoming:
            index = positions.get(profile.id)
            if index is None:
                positions[profile.id] = len(self._profiles)
                self._profiles.append(profile)
                result.added += 1
            else:
                self._profiles[index] = profile
                result.replaced += 1
        logger.info("Imported %d new and %d replaced profiles", result.added, result.replaced)
        self._save()
        return result

    def save(self) -> None:
        """Write every profile to ``profiles.json``; the window calls this on close."""
        self._save()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _find(self, profile_id: str) -> Optional[UserProfile]:
        for profile in self._profiles:
            if profile.id == profile_id:
                return profile
        return None

    def _load(self) -> List[UserProfile]:
        if not self._file_path.exists():
            return []
        try:
            return load_snapshot(self._file_path.read_bytes())
        except (SnapshotError, OSError) as e:
            logger.warning("Could not load profiles from %s: %s", self._file_path, e)
            return []

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._file_path.write_text(self.export_all(), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save profiles to %s: %s", self._file_path, e)
