"""Palette and colour helpers for the typing screen."""

from typing import Optional


class Palette:
    """Dark trainer theme."""

    BACKGROUND = "#1e2430"
    SURFACE = "#283142"
    SURFACE_RAISED = "#323d52"

    ACCENT = "#4fc3f7"
    ACCENT_DARK = "#0288d1"

    TEXT_PRIMARY = "#eceff4"
    TEXT_MUTED = "#8a95a8"

    WORD_DONE = "#66bb6a"
    WORD_MISSED = "#ef5350"
    WORD_PENDING = "#8a95a8"
    CHAR_CORRECT = "#eceff4"
    CHAR_WRONG = "#ff7043"

    KEY_OK = "#43a047"
    KEY_ERROR = "#e53935"

    OVERLAY = "rgba(30, 36, 48, 0.92)"


def _parse_hex(value: str) -> Optional[tuple]:
    value = value.strip()
    if not (value.startswith("#") and len(value) == 7):
        return None
    try:
        return tuple(int(value[i:i + 2], 16) for i in (1, 3, 5))
    except ValueError:
        return None


def blend_hex(a: str, b: str, t: float) -> str:
    """Mix two ``#RRGGBB`` colours; ``t=0`` gives *a*, ``t=1`` gives *b*.

    Anything that is not a ``#RRGGBB`` string makes the blend return *a*.
    """
    ca, cb = _parse_hex(a), _parse_hex(b)
    if ca is None or cb is None:
        return a
    t = max(0.0, min(1.0, float(t)))
    r, g, bl = (int(x + (y - x) * t) for x, y in zip(ca, cb))
    return f"#{r:02X}{g:02X}{bl:02X}"


def key_feedback_color(is_correct: bool, fade: float) -> str:
    """Colour of the key-feedback badge, fading into the surface as *fade* goes to 1."""
    base = Palette.KEY_OK if is_correct else Palette.KEY_ERROR
    return blend_hex(base, Palette.SURFACE, fade)
