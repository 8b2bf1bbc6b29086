"""
Particle swarm advected over the descent field.

Classes:
    ParticleSystem: Fixed-size array of positions, moved once per frame.
    StraySweep: Periodic respawn of particles that wandered far off the grid.
"""

import logging
from typing import Optional

import numpy as np

from pychladni.config import MAX_GRADIENT_INTENSITY, NUM_PARTICLES

logger = logging.getLogger(__name__)


def pixel_coordinates(positions: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Nearest grid cell of every position, rounding halves up.
    Args:
        positions (np.ndarray): Shape (n, 2) array of (x, y).
    Returns: Tuple of integer arrays (columns, rows).
    """
    cells = np.floor(positions + 0.5).astype(np.int64)
    return cells[:, 0], cells[:, 1]


def inside(columns: np.ndarray, rows: np.ndarray, width: int, height: int) -> np.ndarray:
    """Mask of cells that lie on a width x height grid."""
    return (columns >= 0) & (columns < width) & (rows >= 0) & (rows < height)


def sample_gradients(gradients: np.ndarray, positions: np.ndarray) -> np.ndarray:
    """
    Nearest-neighbour lookup of the descent direction under each position.
    Positions off the grid get (0, 0), as if no field were active for them.
    Args:
        gradients (np.ndarray): Shape (height, width, 2).
        positions (np.ndarray): Shape (n, 2).
    Returns: np.ndarray: Shape (n, 2) directions.
    """
    height, width = gradients.shape[:2]
    columns, rows = pixel_coordinates(positions)
    valid = inside(columns, rows, width, height)
    directions = np.zeros(positions.shape, dtype=positions.dtype)
    directions[valid] = gradients[rows[valid], columns[valid]]
    return directions


class ParticleSystem:
    """
    Owns the particle positions.

    Attributes:
        count (int): Number of particles; fixed for the system's lifetime.
        gradient_strength (float): Step length along a descent direction.
        positions (np.ndarray): Shape (count, 2) array of (x, y).
        width (int), height (int): Current grid bounds.
    """

    def __init__(self, count: int = NUM_PARTICLES,
                 gradient_strength: float = MAX_GRADIENT_INTENSITY,
                 rng: Optional[np.random.Generator] = None):
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count!r}")
        self.count = count
        self.gradient_strength = gradient_strength
        self.rng = rng if rng is not None else np.random.default_rng()
        self.positions = np.zeros((count, 2), dtype=np.float64)
        self.width = 0
        self.height = 0

    def configure(self, width: int, height: int):
        """Scatters every particle uniformly over the new bounds."""
        self.width = width
        self.height = height
        self.positions[:, 0] = self.rng.uniform(0, max(width, 0), size=self.count)
        self.positions[:, 1] = self.rng.uniform(0, max(height, 0), size=self.count)

    def advance(self, gradients: Optional[np.ndarray], intensity: float):
        """
        Moves every particle one step: along its descent direction when a
        field is active, then by uniform jitter in [-intensity/2, intensity/2)
        on each axis. Positions are not clamped.
        """
        if gradients is not None:
            self.positions += self.gradient_strength * sample_gradients(gradients, self.positions)
        half = intensity / 2
        self.positions += self.rng.uniform(-half, half, size=self.positions.shape)

    def respawn_strays(self, margin: float) -> int:
        """
        Moves particles further than `margin` outside the bounds back to a
        random position inside them.
        Returns: int: Number of particles respawned.
        """
        x = self.positions[:, 0]
        y = self.positions[:, 1]
        strays = (
            (x < -margin) | (x >= self.width + margin) |
            (y < -margin) | (y >= self.height + margin)
        )
        count = int(np.count_nonzero(strays))
        if count:
            self.positions[strays, 0] = self.rng.uniform(0, max(self.width, 0), size=count)
            self.positions[strays, 1] = self.rng.uniform(0, max(self.height, 0), size=count)
            logger.debug("Respawned %d stray particles", count)
        return count


class StraySweep:
    """Runs ParticleSystem.respawn_strays every `interval` seconds of frame time."""

    def __init__(self, interval: float = 10.0, margin: float = 50.0):
        self.interval = interval
        self.margin = margin
        self.elapsed = 0.0

    def update(self, particles: ParticleSystem, dt: float) -> int:
        self.elapsed += dt
        if self.elapsed < self.interval:
            return 0
        self.elapsed = 0.0
        return particles.respawn_strays(self.margin)
