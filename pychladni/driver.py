"""
Per-frame loop logic, independent of any window.

Classes:
    Debouncer: Fires a callback once input has been quiet for a delay.
    Driver: Pause/debug state, reconfiguration and the per-frame update.
"""

import logging
from typing import Callable, Optional

from pychladni.chladni_params import PRESETS, ChladniParameters
from pychladni.field_channel import FieldReceiver
from pychladni.field_generator import FieldGenerator
from pychladni.particles import ParticleSystem, StraySweep
from pychladni.renderer import DrawMode, Renderer

logger = logging.getLogger(__name__)


class Debouncer:
    """Keeps only the last callback set and runs it `delay` seconds later."""

    def __init__(self, delay: float):
        self.delay = delay
        self._callback: Optional[Callable[[], None]] = None
        self._due = 0.0

    @property
    def pending(self) -> bool:
        return self._callback is not None

    def set(self, callback: Callable[[], None], now: float):
        self._callback = callback
        self._due = now + self.delay

    def poll(self, now: float) -> bool:
        """Runs the pending callback if it is due. Returns True if it ran."""
        if self._callback is None or now < self._due:
            return False
        callback, self._callback = self._callback, None
        callback()
        return True


class Driver:
    """
    Ties the particle system and renderer to the frame loop and forwards
    reconfiguration to the field generator.

    Attributes:
        running (bool): False while paused.
        mode (DrawMode): Current draw mode.
        width (int), height (int): Grid size.
        params (ChladniParameters): Parameters last sent to the generator.
    """

    def __init__(
        self,
        particles: ParticleSystem,
        renderer: Renderer,
        generator: FieldGenerator,
        receiver: FieldReceiver,
        params: ChladniParameters = PRESETS[0],
        sweep: Optional[StraySweep] = None,
        mode: DrawMode = DrawMode.PARTICLES
    ):
        self.particles = particles
        self.renderer = renderer
        self.generator = generator
        self.receiver = receiver
        self.sweep = sweep
        self.params = params
        self.mode = mode
        self.running = True
        self.width = 0
        self.height = 0

    def toggle_running(self):
        self.running = not self.running
        logger.info("Simulation %s", "resumed" if self.running else "paused")

    def toggle_debug(self):
        self.mode = DrawMode.PARTICLES if self.mode is DrawMode.VIBRATION else DrawMode.VIBRATION
        logger.info("Draw mode: %s", self.mode.value)

    def resize(self, width: int, height: int):
        """New grid size: rescatter particles, new framebuffer, rebake."""
        self.width = width
        self.height = height
        self.particles.configure(width, height)
        self.renderer.resize(width, height)
        self._reconfigure()

    def select_preset(self, index: int):
        if not 0 <= index < len(PRESETS):
            raise IndexError(f"No preset {index}; there are {len(PRESETS)}")
        self.set_params(PRESETS[index])

    def scale_frequency(self, factor: float):
        self.set_params(self.params.with_frequency(self.params.l * factor))

    def set_params(self, params: ChladniParameters):
        self.params = params
        self.particles.configure(self.width, self.height)
        self._reconfigure()

    def _reconfigure(self):
        # Dimensions always travel with the parameters
        epoch = self.generator.configure(self.width, self.height, self.params)
        self.receiver.expect(epoch)

    def frame(self, dt: float) -> bool:
        """
        One frame. Field messages are always consumed; while paused nothing
        moves and nothing is drawn.
        Args:
            dt (float): Seconds since the previous frame.
        Returns: bool: True if a new frame was drawn.
        """
        for message in self.receiver.poll():
            self.renderer.on_field(message)

        if not self.running:
            return False

        self.particles.advance(self.receiver.gradients, self.receiver.intensity)
        if self.sweep is not None:
            self.sweep.update(self.particles, dt)
        self.renderer.draw_frame(self.particles.positions, self.receiver.current, self.mode)
        return True
