from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Dict, List, Optional, Protocol

from keystride.core.layouts import Layout
from keystride.core.modes import AdaptiveMode, LevelMode, RoundMode, TimedMode
from keystride.core.stats import KeyEvent, KeyStat, SessionSummary
from keystride.core.words import WordGenerator

logger = logging.getLogger(__name__)

BACKSPACE = "\b"
BOUNDARY_KEYS = frozenset({" ", "\n", "\r"})
EXCESS_KEY = "excess"

LEVEL_BATCH_SIZE = 50
TIMED_BATCH_SIZE = 200
TIMED_REFILL_SIZE = 50
ADAPTIVE_BATCH_SIZE = 30
REFILL_MARGIN = 5

WORST_KEYS_LIMIT = 5
WORST_KEYS_MIN_ATTEMPTS = 5
TICK_SECONDS = 1


class RoundState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"


class TickHandle(Protocol):
    def cancel(self) -> None: ...


class TickScheduler(Protocol):
    """Runs *callback* every *interval* seconds until the handle is cancelled."""

    def every(self, interval: float, callback: Callable[[], None]) -> TickHandle: ...


class TypingSession:
    """Word-by-word typing round: judges keys and keeps live speed metrics.

    Speed is gross WPM, ``(characters typed / 5) / elapsed minutes``, timed
    from the first key of the round. Accuracy is
    ``typed / (typed + 2 * errors) * 100``; stored history was computed with
    the doubled error term, so it stays.

    A mismatched word is abandoned on the boundary key and costs exactly one
    error, however many of its characters were wrong.
    """

    def __init__(
        self,
        layout: Layout,
        word_generator: WordGenerator,
        level: int = 1,
        scheduler: Optional[TickScheduler] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._layout = layout
        self._words = word_generator
        self._level = level
        self._scheduler = scheduler
        self._clock = clock
        self._mode: RoundMode = LevelMode()
        self._timer: Optional[TickHandle] = None
        self._round_id = 0

        self._state = RoundState.IDLE
        self._target_words: List[str] = []
        self._index = 0
        self._input = ""
        self._submitted: List[str] = []
        self._start_time: Optional[float] = None
        self._time_remaining = 0
        self._chars_typed = 0
        self._total_errors = 0
        self._wpm = 0.0
        self._accuracy = 100.0
        self._key_stats: Dict[str, KeyStat] = {}
        self._last_key_event: Optional[KeyEvent] = None

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is RoundState.ACTIVE

    @property
    def mode(self) -> RoundMode:
        return self._mode

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def level(self) -> int:
        return self._level

    @property
    def target_words(self) -> List[str]:
        return list(self._target_words)

    @property
    def current_word_index(self) -> int:
        return self._index

    @property
    def current_input(self) -> str:
        return self._input

    @property
    def submitted_inputs(self) -> List[str]:
        return list(self._submitted)

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    @property
    def time_remaining(self) -> int:
        return self._time_remaining

    @property
    def chars_typed(self) -> int:
        return self._chars_typed

    @property
    def total_errors(self) -> int:
        return self._total_errors

    @property
    def wpm(self) -> float:
        return self._wpm

    @property
    def accuracy(self) -> float:
        return self._accuracy

    @property
    def key_stats(self) -> Dict[str, KeyStat]:
        return {c: KeyStat(c, s.attempts, s.errors) for c, s in self._key_stats.items()}

    @property
    def last_key_event(self) -> Optional[KeyEvent]:
        return self._last_key_event

    @property
    def current_word(self) -> Optional[str]:
        if self._index < len(self._target_words):
            return self._target_words[self._index]
        return None

    @property
    def next_expected_char(self) -> Optional[str]:
        """Next character to type, or a space once the word is complete."""
        target = self.current_word
        if target is None:
            return None
        if len(self._input) < len(target):
            return target[len(self._input)]
        return " "

    @property
    def active_keys(self) -> str:
        return self._layout.unlocked_characters(self._level)

    def elapsed_seconds(self) -> float:
        if self._start_time is None:
            return 0.0
        return max(0.0, self._clock() - self._start_time)

    # ------------------------------------------------------------------
    # Round lifecycle
    # ------------------------------------------------------------------

    def set_level(self, level: int) -> None:
        self._level = level

    def set_layout(self, layout: Layout) -> None:
        self._layout = layout

    def start_round(self, mode: Optional[RoundMode] = None) -> None:
        if mode is not None:
            self._mode = mode
        self._disarm_timer()
        self._round_id += 1

        self._index = 0
        self._input = ""
        self._submitted = []
        self._start_time = None
        self._chars_typed = 0
        self._total_errors = 0
        self._wpm = 0.0
        self._accuracy = 100.0
        self._key_stats = {}
        self._last_key_event = None
        self._state = RoundState.ACTIVE

        mode = self._mode
        if isinstance(mode, TimedMode):
            self._target_words = self._words.sample(TIMED_BATCH_SIZE, self._layout, self._layout.max_level)
            self._time_remaining = mode.duration
            self._arm_timer()
        elif isinstance(mode, AdaptiveMode):
            self._target_words = self._words.sample_adaptive(mode.focus_keys, ADAPTIVE_BATCH_SIZE)
            self._time_remaining = 0
        else:
            self._target_words = self._words.sample(LEVEL_BATCH_SIZE, self._layout, self._level)
            self._time_remaining = 0
        logger.debug(
            "Round %d started: %s, level %d, %d words",
            self._round_id, mode.display_name, self._level, len(self._target_words),
        )

    def finish_round(self) -> None:
        self._disarm_timer()
        if self._state is RoundState.ACTIVE:
            self._state = RoundState.FINISHED
            logger.debug("Round %d finished: %.1f wpm, %.1f%%", self._round_id, self._wpm, self._accuracy)

    def close(self) -> None:
        """Tear the session down; no timer survives it."""
        self.finish_round()

    def summary(self) -> SessionSummary:
        return SessionSummary(
            wpm=self._wpm,
            accuracy=self._accuracy,
            level=self._level,
            duration=self.elapsed_seconds(),
            key_stats=self.key_stats,
        )

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def submit_key(self, raw_key: str) -> None:
        if self._state is not RoundState.ACTIVE:
            return
        if not raw_key or (len(raw_key) != 1 and raw_key != BACKSPACE):
            return
        if self.current_word is None:
            self.finish_round()
            return

        if self._start_time is None:
            self._start_time = self._clock()

        if raw_key == BACKSPACE:
            self._input = self._input[:-1]
        elif raw_key in BOUNDARY_KEYS:
            self._submit_word()
        else:
            self._type_character(self._layout.map_input_character(raw_key))
        self._update_metrics()

    def _submit_word(self) -> None:
        target = self._target_words[self._index]
        typed = self._input
        self._submitted.append(typed)
        if typed == target:
            self._last_key_event = KeyEvent(" ", True)
        else:
            self._total_errors += 1
            self._last_key_event = KeyEvent(" ", False)
        self._index += 1
        self._input = ""

        if isinstance(self._mode, TimedMode):
            if self._index >= len(self._target_words) - REFILL_MARGIN:
                more = self._words.sample(TIMED_REFILL_SIZE, self._layout, self._layout.max_level)
                self._target_words.extend(more)
                logger.debug("Round %d: appended %d words", self._round_id, len(more))
        elif self._index >= len(self._target_words):
            self.finish_round()

    def _type_character(self, char: str) -> None:
        target = self._target_words[self._index]
        self._input += char
        self._chars_typed += 1

        position = len(self._input) - 1
        if position < len(target):
            expected = target[position]
            is_correct = char == expected
            self._track_key(expected, is_error=not is_correct)
        else:
            is_correct = False
            self._track_key(EXCESS_KEY, is_error=True)
        if not is_correct:
            self._total_errors += 1
        self._last_key_event = KeyEvent(char, is_correct)

    def _track_key(self, char: str, is_error: bool) -> None:
        stat = self._key_stats.get(char)
        if stat is None:
            stat = self._key_stats[char] = KeyStat(char)
        stat.record(is_error)

    def _update_metrics(self) -> None:
        if self._start_time is None:
            return
        minutes = (self._clock() - self._start_time) / 60.0
        if minutes > 0:
            self._wpm = (self._chars_typed / 5.0) / minutes
        total = self._chars_typed + self._total_errors
        if total > 0:
            self._accuracy = self._chars_typed / (total + self._total_errors) * 100.0

    # ------------------------------------------------------------------
    # Weak keys
    # ------------------------------------------------------------------

    def worst_keys(self) -> List[str]:
        """Up to five keys with the highest error rate this round.

        Keys with five attempts or fewer are skipped so one slip does not
        flag a key. Equal rates are ordered by character.
        """
        candidates = [
            stat for char, stat in self._key_stats.items()
            if char != EXCESS_KEY and stat.attempts > WORST_KEYS_MIN_ATTEMPTS
        ]
        candidates.sort(key=lambda s: (-s.error_rate, s.char))
        return [s.char for s in candidates[:WORST_KEYS_LIMIT]]

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if self._state is not RoundState.ACTIVE or not isinstance(self._mode, TimedMode):
            return
        if self._time_remaining > 0:
            self._time_remaining -= TICK_SECONDS
            if self._time_remaining <= 0:
                self._time_remaining = 0
                self.finish_round()

    def _arm_timer(self) -> None:
        self._disarm_timer()
        if self._scheduler is None:
            return
        round_id = self._round_id

        def on_tick() -> None:
            if round_id == self._round_id:
                self.tick()

        self._timer = self._scheduler.every(TICK_SECONDS, on_tick)

    def _disarm_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
