"""Round modes: fixed-level lessons, countdown rounds and weak-key drills."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class LevelMode:
    """Lesson made of words typeable at the session's current level."""

    @property
    def display_name(self) -> str:
        return "Levels"


@dataclass(frozen=True)
class TimedMode:
    """Countdown round over all characters; ends only when time runs out."""

    duration: int = 60

    @property
    def display_name(self) -> str:
        return f"Timed ({self.duration // 60} min)"


@dataclass(frozen=True)
class AdaptiveMode:
    """Drill of words containing the learner's weakest keys."""

    focus_keys: Tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return "Adaptive Training"


RoundMode = Union[LevelMode, TimedMode, AdaptiveMode]
