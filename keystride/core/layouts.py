from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

MAX_LEVEL = 7
DEFAULT_LAYOUT_KEY = "us_qwerty"


@dataclass(frozen=True)
class Layout:
    """A keyboard layout and the order in which its characters are taught.

    Level ``N`` unlocks tiers ``1..N``. Reaching ``max_level`` replaces the tier
    union with the complete ``full_set`` (plus ``extra`` symbols), so keys that
    no tier mentions become available at the top level.
    """

    key: str
    name: str
    tiers: Tuple[str, ...]
    full_set: str
    extra: str = ""
    max_level: int = MAX_LEVEL

    def unlocked_characters(self, level: int) -> str:
        if level < 1:
            return ""
        if level >= self.max_level:
            return _unique(self.full_set + self.extra)
        return _unique("".join(self.tiers[:level]))

    def map_input_character(self, raw: str) -> str:
        """Translate a typed character into this layout's logical character.

        Every shipped layout types what it shows, so this returns ``raw``. Keep
        routing input through it: layouts that remap keys override it here.
        """
        return raw


def _unique(chars: str) -> str:
    return "".join(dict.fromkeys(chars))


class LayoutRepository:
    def __init__(self, data_file: Optional[Path] = None) -> None:
        self._data_file = data_file or Path(__file__).resolve().parent.parent / "data" / "layouts.yaml"
        self._layouts = self._load_layouts()

    def all(self) -> List[Layout]:
        return list(self._layouts.values())

    def get(self, key: str) -> Layout:
        return self._layouts[key]

    def default(self) -> Layout:
        if DEFAULT_LAYOUT_KEY in self._layouts:
            return self._layouts[DEFAULT_LAYOUT_KEY]
        return next(iter(self._layouts.values()))

    def _load_layouts(self) -> Dict[str, Layout]:
        path = self._data_file
        if not path.exists():
            raise FileNotFoundError(f"Layouts file not found: {path}")

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{path.name}: expected YAML mapping with 'layouts'")
        max_level = raw.get("max_level", MAX_LEVEL)
        if not isinstance(max_level, int) or max_level < 1:
            raise ValueError(f"{path.name}: invalid 'max_level'")
        entries = raw.get("layouts")
        if not isinstance(entries, list) or not entries:
            raise ValueError(f"{path.name}: 'layouts' must be a non-empty list")

        layouts: Dict[str, Layout] = {}
        for entry in entries:
            if not isinstance(entry, dict):
                raise ValueError(f"{path.name}: layout entries must be mappings")
            key = entry.get("key")
            name = entry.get("name")
            if not key or not isinstance(key, str):
                raise ValueError(f"{path.name}: layout missing or invalid 'key'")
            if not name or not isinstance(name, str):
                raise ValueError(f"{path.name}: layout '{key}' missing or invalid 'name'")
            tiers = entry.get("tiers", raw.get("tiers"))
            if not isinstance(tiers, list) or not tiers:
                raise ValueError(f"{path.name}: layout '{key}' has no tiers")
            full_set = entry.get("full_set", raw.get("full_set"))
            if not full_set or not isinstance(full_set, str):
                raise ValueError(f"{path.name}: layout '{key}' missing 'full_set'")
            layouts[key] = Layout(
                key=key,
                name=name.strip(),
                tiers=tuple(str(tier) for tier in tiers),
                full_set=full_set,
                extra=str(entry.get("extra") or ""),
                max_level=max_level,
            )
        return layouts
