"""
Field generator: bakes vibration and descent fields on the background
context and emits them on a breathing schedule.

After every (re)configuration the generator bakes and emits at once, then
ticks every period, alternating rest rounds (no field, stronger jitter)
and resonant rounds (fresh bake with new phase offsets).
"""

import itertools
import logging
import time
from typing import Optional

import numpy as np

from pychladni.chladni_field import bake
from pychladni.chladni_params import DEFAULT_PARAMETERS, ChladniParameters, Reconfiguration
from pychladni.config import (
    AGGRESSIVE_RANDOM_VIBRATION_INTENSITY,
    BAKE_PERIOD,
    MIN_NODE_THRESHOLD,
    MODERATE_RANDOM_VIBRATION_INTENSITY,
)
from pychladni.field_channel import FieldChannel, FieldMessage
from pychladni.scheduler import ScheduledTask

logger = logging.getLogger(__name__)


class FieldGenerator:
    """
    Owns the bake schedule. `configure` and `request` may be called from
    any thread; they allocate an epoch and post the work to the context.
    Everything else runs on the context's thread.

    Attributes:
        channel (FieldChannel): Where messages are sent.
        context: BackgroundContext (or anything with post/call_every).
        period (float): Seconds between schedule ticks.
        width (int), height (int): Grid size used by the next bake.
        params (ChladniParameters): Parameters used by the next bake.
    """

    def __init__(
        self,
        channel: FieldChannel,
        context,
        period: float = BAKE_PERIOD,
        rng: Optional[np.random.Generator] = None,
        params: ChladniParameters = DEFAULT_PARAMETERS,
        moderate_intensity: float = MODERATE_RANDOM_VIBRATION_INTENSITY,
        aggressive_intensity: float = AGGRESSIVE_RANDOM_VIBRATION_INTENSITY,
        node_threshold: float = MIN_NODE_THRESHOLD
    ):
        self.channel = channel
        self.context = context
        self.period = period
        self.rng = rng if rng is not None else np.random.default_rng()
        self.moderate_intensity = moderate_intensity
        self.aggressive_intensity = aggressive_intensity
        self.node_threshold = node_threshold

        self.width = 0
        self.height = 0
        self.params = params

        self._epochs = itertools.count(1)
        self._epoch = 0
        self._task: Optional[ScheduledTask] = None
        self._resonant_next = False

    def configure(self, width: int, height: int, params: ChladniParameters) -> int:
        """Full reconfiguration. Returns the epoch its messages will carry."""
        return self.request(Reconfiguration(width=width, height=height, chladni_params=params))

    def request(self, reconfiguration: Reconfiguration) -> int:
        """Partial reconfiguration. Returns the epoch its messages will carry."""
        epoch = next(self._epochs)
        self.context.post(self._reconfigure, reconfiguration, epoch)
        return epoch

    def shutdown(self):
        """Disarms the schedule (runs on the context)."""
        self.context.post(self._cancel)

    def _cancel(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _reconfigure(self, reconfiguration: Reconfiguration, epoch: int):
        self._cancel()
        self.width, self.height, self.params = reconfiguration.apply(self.width, self.height, self.params)
        self._epoch = epoch
        logger.info(
            "Configured %dx%d grid, m=%d n=%d l=%g (epoch %d)",
            self.width, self.height, self.params.m, self.params.n, self.params.l, epoch
        )

        self._resonant_round()
        self._resonant_next = False
        self._task = self.context.call_every(self.period, self._tick)

    def _tick(self):
        if self._resonant_next:
            self._resonant_round()
        else:
            self._rest_round()
        self._resonant_next = not self._resonant_next

    def _resonant_round(self):
        start_time = time.perf_counter()
        result = bake(self.width, self.height, self.params, self.rng, self.node_threshold)
        elapsed = time.perf_counter() - start_time
        if elapsed > self.period:
            logger.warning("Bake took %.2f s, longer than the %.2f s schedule period", elapsed, self.period)

        logger.debug("Resonant round (epoch %d, phase %.1f/%.1f)", self._epoch, result.phase_x, result.phase_y)
        self.channel.send(FieldMessage(
            epoch=self._epoch,
            vibration_intensity=self.moderate_intensity,
            vibration_values=result.vibration,
            gradients=result.gradients,
        ))

    def _rest_round(self):
        logger.debug("Rest round (epoch %d)", self._epoch)
        self.channel.send(FieldMessage(epoch=self._epoch, vibration_intensity=self.aggressive_intensity))
