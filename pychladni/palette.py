"""
Particle colours.

Pixels are packed into uint32 as 0xAABBGGRR, the byte order a little-endian
RGBA canvas uses, with alpha always opaque.
"""

from dataclasses import dataclass
from typing import Mapping, Tuple

import matplotlib.colors as mcolors
import numpy as np

OPAQUE = 0xFF000000


def pack_rgb(r: int, g: int, b: int) -> int:
    return OPAQUE | (b & 0xFF) << 16 | (g & 0xFF) << 8 | (r & 0xFF)


def resolve_color(value: str) -> int:
    """Packs any matplotlib colour string ('#ff8800', 'orange', 'C1', ...)."""
    r, g, b = mcolors.to_rgb(value)
    return pack_rgb(round(r * 255), round(g * 255), round(b * 255))


def unpack_rgb(buffer: np.ndarray) -> np.ndarray:
    """(height, width) packed pixels to a (height, width, 3) uint8 RGB array."""
    return np.stack(
        [(buffer >> shift) & 0xFF for shift in (0, 8, 16)],
        axis=-1
    ).astype(np.uint8)


def gray(levels: np.ndarray) -> np.ndarray:
    """Packs an array of 0..255 levels into opaque gray pixels."""
    levels = levels.astype(np.uint32)
    return np.uint32(OPAQUE) | levels << 16 | levels << 8 | levels


@dataclass(frozen=True)
class ColorPalette:
    """
    Attributes:
        colors (tuple[int, ...]): Particle colours cycled through per resonant bake.
        non_resonant (int): Particle colour while no field is active.
        background (int): Framebuffer fill colour.
    """
    colors: Tuple[int, ...]
    non_resonant: int
    background: int

    def __post_init__(self):
        if not self.colors:
            raise ValueError("A palette needs at least one particle colour")

    def __len__(self) -> int:
        return len(self.colors)

    @classmethod
    def from_theme(cls, theme: Mapping[str, str]) -> "ColorPalette":
        """
        Reads `particle-color-1`, `particle-color-2`, ... until the first
        missing index, plus `non-resonant-color` and `background-color`.
        """
        colors = []
        index = 1
        while f"particle-color-{index}" in theme:
            colors.append(resolve_color(theme[f"particle-color-{index}"]))
            index += 1
        try:
            non_resonant = resolve_color(theme["non-resonant-color"])
            background = resolve_color(theme["background-color"])
        except KeyError as e:
            raise ValueError(f"Theme is missing colour {e.args[0]!r}") from e
        return cls(tuple(colors), non_resonant, background)


class ColorCycle:
    """Index into a palette, advanced once per fresh field."""

    def __init__(self, length: int):
        self.length = length
        self.index = 0

    def advance(self) -> int:
        self.index = (self.index + 1) % self.length
        return self.index
