import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from pychladni.chladni_params import ChladniParameters
from pychladni.config import MIN_NODE_THRESHOLD

logger = logging.getLogger(__name__)

# (dx, dy) of the 8 neighbours, scanned row by row from the top-left
NEIGHBOUR_OFFSETS = np.array(
    [(dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)],
    dtype=np.int8,
)


@dataclass(frozen=True, eq=False)
class Bake:
    """
    /**
     * Result of one bake: the vibration magnitude grid and the descent
     * direction grid computed from it, plus the phase offsets used.
     *
     * @param vibration  float32 array, shape (height, width), values >= 0.
     * @param gradients  float32 array, shape (height, width, 2), (dx, dy) in {-1, 0, 1}.
     */
    """
    params: ChladniParameters
    phase_x: float
    phase_y: float
    vibration: np.ndarray
    gradients: np.ndarray


def compute_vibration(
    width: int,
    height: int,
    params: ChladniParameters,
    phase_x: float = 0.0,
    phase_y: float = 0.0
) -> np.ndarray:
    """
    /**
     * Evaluate the interference magnitude on a width x height grid.
     *
     * value(x, y) = |cos(n*sx)*cos(m*sy) - cos(m*sx)*cos(n*sy)| / 2
     * with sx = x*l + phase_x and sy = y*l + phase_y.
     *
     * @param width    Grid width in cells.
     * @param height   Grid height in cells.
     * @param params   Harmonic indices and spatial frequency.
     * @param phase_x  Translation added to scaled x coordinates.
     * @param phase_y  Translation added to scaled y coordinates.
     * @return         float32 array of shape (height, width), indexed [y, x].
     */
    """
    x = np.arange(max(width, 0), dtype=np.float64)
    y = np.arange(max(height, 0), dtype=np.float64)
    xx, yy = np.meshgrid(x, y)

    sx = xx * params.l + phase_x
    sy = yy * params.l + phase_y

    raw = (
        np.cos(params.n * sx) * np.cos(params.m * sy) -
        np.cos(params.m * sx) * np.cos(params.n * sy)
    )
    return (np.abs(raw) / 2).astype(np.float32)


def compute_gradients(
    vibration: np.ndarray,
    rng: np.random.Generator,
    threshold: float = MIN_NODE_THRESHOLD
) -> np.ndarray:
    """
    /**
     * Discrete steepest-descent direction for every cell.
     *
     * Border cells stay (0, 0). An interior cell whose own value is below
     * the node threshold also stays (0, 0). Every other interior cell points
     * at the neighbour holding the lowest value among its 8 neighbours;
     * ties are broken uniformly at random.
     *
     * @param vibration  Array of shape (height, width).
     * @param rng        Source of the tie-breaking randomness.
     * @param threshold  Node threshold below which no pull is applied.
     * @return           float32 array of shape (height, width, 2) holding (dx, dy).
     */
    """
    height, width = vibration.shape
    gradients = np.zeros((height, width, 2), dtype=np.float32)
    if height < 3 or width < 3:
        return gradients

    windows = np.stack([
        vibration[1 + dy:height - 1 + dy, 1 + dx:width - 1 + dx]
        for dx, dy in NEIGHBOUR_OFFSETS.tolist()
    ])
    lowest = windows.min(axis=0)

    # A random key per candidate; non-minimal neighbours can never win
    keys = rng.random(windows.shape)
    keys[windows != lowest] = -1.0
    chosen = NEIGHBOUR_OFFSETS[keys.argmax(axis=0)]

    chosen[vibration[1:-1, 1:-1] < threshold] = 0
    gradients[1:-1, 1:-1] = chosen
    return gradients


def bake(
    width: int,
    height: int,
    params: ChladniParameters,
    rng: np.random.Generator,
    threshold: float = MIN_NODE_THRESHOLD,
    phase: Optional[Tuple[float, float]] = None
) -> Bake:
    """
    /**
     * One full field computation. Phase offsets are drawn uniformly from
     * [0, height) unless given, so every bake shows the same pattern at a
     * different translation.
     *
     * @param phase  Optional fixed (phase_x, phase_y).
     * @return       Freshly allocated Bake; nothing is reused between bakes.
     */
    """
    if phase is None:
        phase_x, phase_y = rng.uniform(0, max(height, 0), size=2)
    else:
        phase_x, phase_y = phase

    start_time = time.perf_counter()
    vibration = compute_vibration(width, height, params, phase_x, phase_y)
    gradients = compute_gradients(vibration, rng, threshold)
    end_time = time.perf_counter()

    logger.info(
        "Baked %dx%d field (m=%d, n=%d, l=%g) in %.4f s",
        width, height, params.m, params.n, params.l, end_time - start_time
    )
    return Bake(params, float(phase_x), float(phase_y), vibration, gradients)
