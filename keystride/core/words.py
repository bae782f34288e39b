from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import yaml

from keystride.core.layouts import Layout

logger = logging.getLogger(__name__)

FALLBACK_CHARACTER = "a"


def load_word_list(data_file: Optional[Path] = None) -> Tuple[str, ...]:
    """Read the master word list from ``data/words.yaml``.

    ``words`` may be a YAML list or a whitespace separated block. Words are
    lowercased and de-duplicated, keeping their first position.
    """
    path = data_file or Path(__file__).resolve().parent.parent / "data" / "words.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Word list not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected YAML with 'words'")
    content = raw.get("words")
    if content is None:
        raise ValueError(f"{path.name}: missing 'words'")
    if isinstance(content, list):
        tokens: Iterable[str] = (str(item) for item in content)
    else:
        tokens = str(content).split()
    words = tuple(dict.fromkeys(t.strip().lower() for t in tokens if t.strip()))
    if not words:
        raise ValueError(f"{path.name}: 'words' is empty")
    return words


class WordGenerator:
    """Draws practice words from the master list, with replacement."""

    def __init__(self, words: Optional[Sequence[str]] = None, rng: Optional[random.Random] = None) -> None:
        self._words: Tuple[str, ...] = tuple(words) if words is not None else load_word_list()
        self._rng = rng or random.Random()

    @property
    def words(self) -> Tuple[str, ...]:
        return self._words

    def sample(self, count: int, layout: Layout, level: int) -> List[str]:
        """Words typeable with the characters unlocked at *level*.

        When no word qualifies, two-character tokens built from the unlocked
        characters are returned instead, so a round can always start.
        """
        if count <= 0:
            return []
        allowed = layout.unlocked_characters(level)
        allowed_set = set(allowed)
        filtered = [w for w in self._words if all(c in allowed_set for c in w.lower())]
        if not filtered:
            logger.debug("No words for layout %s level %d; using fallback tokens", layout.key, level)
            pool = allowed or FALLBACK_CHARACTER
            return [self._rng.choice(pool) + self._rng.choice(pool) for _ in range(count)]
        return [self._rng.choice(filtered) for _ in range(count)]

    def sample_adaptive(self, weak_characters: Iterable[str], count: int) -> List[str]:
        """Words containing at least one of *weak_characters*."""
        if count <= 0:
            return []
        weak = {c.lower() for c in weak_characters if c}
        pool: Sequence[str] = self._words
        if weak:
            matching = [w for w in self._words if not weak.isdisjoint(w.lower())]
            if matching:
                pool = matching
            else:
                logger.debug("No words contain %s; sampling from the full list", sorted(weak))
        return [self._rng.choice(pool) for _ in range(count)]
