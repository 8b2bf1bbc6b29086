"""Pytest configuration and shared fixtures."""

import logging

import numpy as np
import pytest

from pychladni.palette import ColorPalette, pack_rgb
from pychladni.scheduler import ScheduledTask


class ManualContext:
    """
    Stand-in for BackgroundContext that runs posted calls immediately and
    fires timers only when the test advances its clock.
    """

    def __init__(self):
        self.now = 0.0
        self.tasks = []

    def post(self, fn, *args):
        fn(*args)

    def call_every(self, period, callback):
        task = ScheduledTask(period, callback, self.now + period)
        self.tasks.append(task)
        return task

    @property
    def active_tasks(self):
        return [task for task in self.tasks if task.active]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [task for task in self.active_tasks if task.deadline <= target + 1e-9]
            if not due:
                break
            task = min(due, key=lambda t: t.deadline)
            self.now = task.deadline
            task.callback()
            if task.active:
                task.deadline += task.period
        self.now = target


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random source for reproducible tests."""
    return np.random.default_rng(1234)


@pytest.fixture
def manual_context() -> ManualContext:
    return ManualContext()


@pytest.fixture
def palette() -> ColorPalette:
    """Three particle colours on a black background."""
    return ColorPalette(
        colors=(pack_rgb(255, 0, 0), pack_rgb(0, 255, 0), pack_rgb(0, 0, 255)),
        non_resonant=pack_rgb(128, 128, 128),
        background=pack_rgb(0, 0, 0),
    )


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo any handlers a test installed through setup_logging."""
    yield
    logger = logging.getLogger("pychladni")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
