"""
Harmonic parameters for one bake and the partial reconfiguration message
the foreground sends to the field generator.

Classes:
    ChladniParameters: Immutable (m, n, l) triple used for a single bake.
    Reconfiguration: Optional width/height/frequency/parameter update.
"""

import math
from dataclasses import dataclass, replace
from numbers import Integral, Real
from typing import Optional, Tuple


def _check_positive_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, Integral) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


def _check_non_negative_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, Integral) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")


def _check_positive_real(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a positive finite number, got {value!r}")


@dataclass(frozen=True)
class ChladniParameters:
    """
    Harmonic indices and spatial frequency of the interference pattern.

    Attributes:
        m (int): First harmonic index.
        n (int): Second harmonic index.
        l (float): Spatial frequency applied to grid coordinates.
    """
    m: int
    n: int
    l: float

    def __post_init__(self):
        _check_positive_int("m", self.m)
        _check_positive_int("n", self.n)
        _check_positive_real("l", self.l)

    def with_frequency(self, l: float) -> "ChladniParameters":
        """Returns a copy with a different spatial frequency."""
        return replace(self, l=l)


PRESETS: Tuple[ChladniParameters, ...] = (
    ChladniParameters(1, 2, 0.04),
    ChladniParameters(1, 3, 0.018),
    ChladniParameters(1, 4, 0.02),
    ChladniParameters(1, 5, 0.02),
    ChladniParameters(2, 3, 0.02),
    ChladniParameters(2, 5, 0.02),
    ChladniParameters(3, 4, 0.02),
    ChladniParameters(3, 5, 0.02),
    ChladniParameters(3, 7, 0.02),
)

DEFAULT_PARAMETERS = PRESETS[0]


@dataclass(frozen=True)
class Reconfiguration:
    """
    Partial update sent to the field generator. Only the fields that are
    set are applied; the rest keep their previous values.

    Sending a frequency or parameter change without the matching
    dimensions leaves the generator baking for whatever size it last saw,
    so callers should always include width and height. A zero dimension
    is allowed and bakes empty fields.
    """
    width: Optional[int] = None
    height: Optional[int] = None
    frequency: Optional[float] = None
    chladni_params: Optional[ChladniParameters] = None

    def __post_init__(self):
        if self.width is not None:
            _check_non_negative_int("width", self.width)
        if self.height is not None:
            _check_non_negative_int("height", self.height)
        if self.frequency is not None:
            _check_positive_real("frequency", self.frequency)
        if self.frequency is not None and self.chladni_params is not None:
            raise ValueError("frequency and chladni_params are mutually exclusive")

    def apply(self, width: int, height: int,
              params: ChladniParameters) -> Tuple[int, int, ChladniParameters]:
        """
        Merges this update into the current state.
        Args:
            width (int): Current grid width.
            height (int): Current grid height.
            params (ChladniParameters): Current parameters.
        Returns: Tuple of (width, height, params) after the update.
        """
        if self.width is not None:
            width = self.width
        if self.height is not None:
            height = self.height
        if self.chladni_params is not None:
            params = self.chladni_params
        elif self.frequency is not None:
            params = params.with_frequency(self.frequency)
        return width, height, params
