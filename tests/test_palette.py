"""Tests for colour packing and theme-driven palettes."""

import numpy as np
import pytest

from pychladni.config import DEFAULT_THEME
from pychladni.palette import ColorCycle, ColorPalette, gray, pack_rgb, resolve_color, unpack_rgb


class TestPacking:
    def test_pack_layout(self):
        assert pack_rgb(0x11, 0x22, 0x33) == 0xFF332211

    def test_resolve_hex_and_names(self):
        assert resolve_color("#ff0000") == pack_rgb(255, 0, 0)
        assert resolve_color("white") == pack_rgb(255, 255, 255)

    def test_resolve_invalid(self):
        with pytest.raises(ValueError):
            resolve_color("not-a-colour")

    def test_unpack(self):
        buffer = np.array([[pack_rgb(1, 2, 3), pack_rgb(250, 128, 0)]], dtype=np.uint32)
        rgb = unpack_rgb(buffer)
        assert rgb.shape == (1, 2, 3)
        assert rgb.dtype == np.uint8
        assert rgb.tolist() == [[[1, 2, 3], [250, 128, 0]]]

    def test_gray(self):
        assert gray(np.array([0, 64])).tolist() == [pack_rgb(0, 0, 0), pack_rgb(64, 64, 64)]


class TestColorPalette:
    def test_from_theme_reads_numbered_colours_until_gap(self):
        theme = {
            "background-color": "black",
            "non-resonant-color": "#808080",
            "particle-color-1": "#ff0000",
            "particle-color-2": "#00ff00",
            "particle-color-4": "#0000ff",
        }
        palette = ColorPalette.from_theme(theme)
        assert palette.colors == (pack_rgb(255, 0, 0), pack_rgb(0, 255, 0))
        assert palette.non_resonant == pack_rgb(128, 128, 128)
        assert palette.background == pack_rgb(0, 0, 0)

    def test_default_theme(self):
        palette = ColorPalette.from_theme(DEFAULT_THEME)
        assert len(palette) == 6

    def test_needs_particle_colours(self):
        with pytest.raises(ValueError):
            ColorPalette.from_theme({"background-color": "black", "non-resonant-color": "gray"})

    def test_missing_named_colour(self):
        with pytest.raises(ValueError, match="background-color"):
            ColorPalette.from_theme({"non-resonant-color": "gray", "particle-color-1": "red"})


class TestColorCycle:
    def test_wraps(self):
        cycle = ColorCycle(3)
        assert [cycle.advance() for _ in range(5)] == [1, 2, 0, 1, 2]
