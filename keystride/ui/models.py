"""Render models for the word stream."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional


class WordState(enum.Enum):
    COMPLETED = "completed"
    MISSED = "missed"
    ACTIVE = "active"
    PENDING = "pending"


@dataclass
class RenderedWord:
    """One target word as the word stream should draw it."""

    text: str
    state: WordState
    typed: str = ""


def build_word_states(
    targets: List[str],
    submitted: List[str],
    current_index: int,
    current_input: str,
    window: Optional[int] = None,
) -> List[RenderedWord]:
    """Pair every target word with what was typed for it.

    *window* limits the result to that many words starting at the word before
    the cursor, which is what fits on one line of the typing screen.
    """
    start = 0
    end = len(targets)
    if window is not None:
        start = max(0, current_index - 1)
        end = min(len(targets), start + window)

    words: List[RenderedWord] = []
    for i in range(start, end):
        target = targets[i]
        if i < current_index:
            typed = submitted[i] if i < len(submitted) else ""
            state = WordState.COMPLETED if typed == target else WordState.MISSED
            words.append(RenderedWord(target, state, typed))
        elif i == current_index:
            words.append(RenderedWord(target, WordState.ACTIVE, current_input))
        else:
            words.append(RenderedWord(target, WordState.PENDING))
    return words
