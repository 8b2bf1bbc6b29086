"""
Simulation tunables and colour theme loading.

The theme is a flat mapping of named colours, read the same way a
stylesheet's custom properties would be: a background colour, a colour
for particles while no field is active, and a numbered run of particle
colours starting at 1.
"""

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

NUM_PARTICLES = 30000
CANVAS_SCALE = 1.5
DEFAULT_RANDOM_VIBRATION_INTENSITY = 2.0
MODERATE_RANDOM_VIBRATION_INTENSITY = 3.0
AGGRESSIVE_RANDOM_VIBRATION_INTENSITY = 6.0
MAX_GRADIENT_INTENSITY = 0.4
MIN_NODE_THRESHOLD = 1e-2
BAKE_PERIOD = 2.2
DEBUG_LUMINOSITY = 64


@dataclass
class SimulationConfig:
    """Configuration for the plate simulation."""

    num_particles: int = NUM_PARTICLES
    canvas_scale: float = CANVAS_SCALE
    window_width: int = 1280
    window_height: int = 720
    fps: int = 60

    # Jitter applied before any field arrives, during resonant rounds and
    # during rest rounds
    default_intensity: float = DEFAULT_RANDOM_VIBRATION_INTENSITY
    moderate_intensity: float = MODERATE_RANDOM_VIBRATION_INTENSITY
    aggressive_intensity: float = AGGRESSIVE_RANDOM_VIBRATION_INTENSITY

    gradient_strength: float = MAX_GRADIENT_INTENSITY
    node_threshold: float = MIN_NODE_THRESHOLD
    bake_period: float = BAKE_PERIOD

    debug: bool = False
    debug_luminosity: float = DEBUG_LUMINOSITY

    resize_debounce: float = 0.35

    # Stray particle sweep
    sweep_enabled: bool = True
    sweep_interval: float = 10.0
    sweep_margin: float = 50.0

    initial_preset: int = 0
    frequency: Optional[float] = None
    seed: Optional[int] = None

    def grid_size(self, window_width: int, window_height: int) -> tuple[int, int]:
        """Simulation grid for a window of the given size."""
        return (
            max(1, math.ceil(window_width / self.canvas_scale)),
            max(1, math.ceil(window_height / self.canvas_scale)),
        )


DEFAULT_THEME: Dict[str, str] = {
    "background-color": "#0f1216",
    "non-resonant-color": "#4a5360",
    "particle-color-1": "#f4d35e",
    "particle-color-2": "#ee964b",
    "particle-color-3": "#f95738",
    "particle-color-4": "#e0aaff",
    "particle-color-5": "#3bceac",
    "particle-color-6": "#7cc6fe",
}


def load_theme(path: Union[str, Path, None] = None) -> Mapping[str, str]:
    """
    Returns the default theme, overridden by the entries of a JSON file.
    Args:
        path: Optional JSON file mapping colour names to colour strings.
    Returns: Mapping of colour names to colour strings.
    """
    theme = dict(DEFAULT_THEME)
    if path is None:
        return theme
    with open(path, "r", encoding="utf-8") as f:
        overrides = json.load(f)
    if not isinstance(overrides, dict):
        raise ValueError(f"Theme file '{path}' must contain a JSON object")
    if any(key.startswith("particle-color-") for key in overrides):
        # A theme that defines its own particle colours replaces the whole run
        theme = {k: v for k, v in theme.items() if not k.startswith("particle-color-")}
    theme.update(overrides)
    return theme
