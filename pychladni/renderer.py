"""
Rasterises the particle swarm into a packed-pixel framebuffer and presents
it through pygame.

Classes:
    DrawMode: Which fill the framebuffer gets before particles are drawn.
    Renderer: Owns the framebuffer, the palette and the colour cycle.
"""

from enum import Enum
from typing import Optional

import numpy as np
import pygame

from pychladni.config import DEBUG_LUMINOSITY
from pychladni.field_channel import FieldMessage
from pychladni.palette import ColorCycle, ColorPalette, gray, unpack_rgb
from pychladni.particles import inside, pixel_coordinates


class DrawMode(Enum):
    PARTICLES = "particles"
    VIBRATION = "vibration"  # grayscale field under the particles, for debugging


class Renderer:
    """
    Handles the framebuffer and drawing with Pygame.

    Attributes:
        palette (ColorPalette): Background, non-resonant and particle colours.
        color_cycle (ColorCycle): Current particle colour index.
        debug_luminosity (float): Gray level of a vibration value of 1.0.
        framebuffer (np.ndarray): (height, width) uint32 packed pixels.
    """

    def __init__(self, palette: ColorPalette, debug_luminosity: float = DEBUG_LUMINOSITY):
        self.palette = palette
        self.color_cycle = ColorCycle(len(palette))
        self.debug_luminosity = debug_luminosity
        self.framebuffer = np.zeros((0, 0), dtype=np.uint32)
        self._fills = {
            DrawMode.PARTICLES: self._fill_background,
            DrawMode.VIBRATION: self._fill_vibration,
        }

    @property
    def color_index(self) -> int:
        return self.color_cycle.index

    def resize(self, width: int, height: int):
        """Recreates the framebuffer for new dimensions."""
        self.framebuffer = np.full((max(height, 0), max(width, 0)), self.palette.background, dtype=np.uint32)

    def on_field(self, message: FieldMessage):
        """Moves to the next particle colour whenever a fresh field arrives."""
        if message.resonant:
            self.color_cycle.advance()

    def draw_frame(self, positions: np.ndarray, field: Optional[FieldMessage], mode: DrawMode = DrawMode.PARTICLES):
        """
        Fills the framebuffer for the given mode, then plots every particle
        as one pixel at its rounded position. Particles off the framebuffer
        are skipped.
        Args:
            positions (np.ndarray): Shape (n, 2) particle positions.
            field (FieldMessage | None): Latest accepted field message.
            mode (DrawMode): Background fill strategy.
        """
        self._fills[mode](field)

        if field is not None and field.resonant:
            color = self.palette.colors[self.color_cycle.index]
        else:
            color = self.palette.non_resonant

        height, width = self.framebuffer.shape
        columns, rows = pixel_coordinates(positions)
        visible = inside(columns, rows, width, height)
        self.framebuffer[rows[visible], columns[visible]] = color

    def _fill_background(self, field: Optional[FieldMessage]):
        self.framebuffer.fill(self.palette.background)

    def _fill_vibration(self, field: Optional[FieldMessage]):
        self._fill_background(field)
        if field is None or field.vibration_values is None:
            return
        # A field baked for other dimensions only covers the overlap
        height = min(self.framebuffer.shape[0], field.vibration_values.shape[0])
        width = min(self.framebuffer.shape[1], field.vibration_values.shape[1])
        levels = np.clip(field.vibration_values[:height, :width] * self.debug_luminosity, 0, 255)
        self.framebuffer[:height, :width] = gray(levels)

    def to_surface(self) -> pygame.Surface:
        """Framebuffer as a pygame surface (surfarray wants x-major order)."""
        rgb = unpack_rgb(self.framebuffer)
        return pygame.surfarray.make_surface(np.transpose(rgb, (1, 0, 2)))

    def present(self, screen: pygame.Surface):
        """Scales the framebuffer up to the window and flips the display."""
        if self.framebuffer.size == 0:
            screen.fill(unpack_rgb(np.array([[self.palette.background]], dtype=np.uint32))[0, 0].tolist())
        else:
            surface = pygame.transform.scale(self.to_surface(), screen.get_size())
            screen.blit(surface, (0, 0))
        pygame.display.flip()
