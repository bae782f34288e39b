"""Tests for keystride.ui.colors – palette and colour blending."""

from __future__ import annotations

import pytest

from keystride.ui.colors import Palette, blend_hex, key_feedback_color


# ===========================================================================
# Palette – constants exist
# ===========================================================================

class TestPalette:
    @pytest.mark.parametrize("name", ["BACKGROUND", "SURFACE", "ACCENT", "KEY_OK", "KEY_ERROR", "TEXT_PRIMARY"])
    def test_is_hex(self, name):
        value = getattr(Palette, name)
        assert value.startswith("#")
        assert len(value) == 7

    def test_overlay_is_rgba(self):
        assert Palette.OVERLAY.startswith("rgba(")


# ===========================================================================
# blend_hex
# ===========================================================================

class TestBlendHex:
    def test_t_zero_returns_a(self):
        assert blend_hex("#FF0000", "#0000FF", 0.0) == "#FF0000"

    def test_t_one_returns_b(self):
        assert blend_hex("#FF0000", "#0000FF", 1.0) == "#0000FF"

    def test_midpoint(self):
        result = blend_hex("#000000", "#FFFFFF", 0.5)
        assert result == "#7F7F7F"

    def test_lowercase_input_gives_uppercase_output(self):
        assert blend_hex("#ff0000", "#ff0000", 0.3) == "#FF0000"

    def test_t_clamped(self):
        assert blend_hex("#000000", "#FFFFFF", 2.0) == "#FFFFFF"
        assert blend_hex("#000000", "#FFFFFF", -1.0) == "#000000"

    def test_invalid_a_returned_unchanged(self):
        assert blend_hex("red", "#FFFFFF", 0.5) == "red"

    def test_invalid_b_returns_a(self):
        assert blend_hex("#000000", "#FFF", 0.5) == "#000000"

    def test_non_hex_digits_return_a(self):
        assert blend_hex("#GG0000", "#FFFFFF", 0.5) == "#GG0000"


# ===========================================================================
# key_feedback_color
# ===========================================================================

class TestKeyFeedbackColor:
    def test_fresh_correct_is_ok_colour(self):
        assert key_feedback_color(True, 0.0) == Palette.KEY_OK.upper()

    def test_fresh_error_is_error_colour(self):
        assert key_feedback_color(False, 0.0) == Palette.KEY_ERROR.upper()

    def test_fully_faded_is_surface(self):
        assert key_feedback_color(False, 1.0) == Palette.SURFACE.upper()
