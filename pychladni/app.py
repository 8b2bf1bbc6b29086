"""
Pygame front end for the Chladni plate simulation.

Classes:
    ChladniApp: Wires generator, channel, particles and renderer together and
                runs either the windowed loop or a fixed number of headless frames.

Controls:
    space   pause / resume
    d       toggle the vibration field visualisation
    1-9     select a harmonic preset
    + / -   raise / lower the spatial frequency
    Esc     quit
"""

import logging
import time
from typing import Optional

import numpy as np
import pygame

from pychladni.chladni_params import PRESETS
from pychladni.config import SimulationConfig
from pychladni.driver import Debouncer, Driver
from pychladni.field_channel import FieldChannel, FieldReceiver
from pychladni.field_generator import FieldGenerator
from pychladni.palette import ColorPalette
from pychladni.particles import ParticleSystem, StraySweep
from pychladni.renderer import DrawMode, Renderer
from pychladni.scheduler import BackgroundContext

logger = logging.getLogger(__name__)

FREQUENCY_STEP = 1.05
PRESET_KEYS = {getattr(pygame, f"K_{i + 1}"): i for i in range(len(PRESETS))}
UP_KEYS = (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS)
DOWN_KEYS = (pygame.K_MINUS, pygame.K_KP_MINUS)


class ChladniApp:
    """
    The main application class.

    Attributes:
        config (SimulationConfig): Tunables.
        context (BackgroundContext): Thread the generator bakes on.
        driver (Driver): Frame loop logic.
    """

    def __init__(self, config: SimulationConfig, palette: ColorPalette):
        self.config = config
        rng_generator, rng_particles = (
            np.random.default_rng(s) for s in np.random.SeedSequence(config.seed).spawn(2)
        )

        params = PRESETS[config.initial_preset]
        if config.frequency is not None:
            params = params.with_frequency(config.frequency)

        self.channel = FieldChannel()
        self.context = BackgroundContext()
        self.generator = FieldGenerator(
            self.channel,
            self.context,
            period=config.bake_period,
            rng=rng_generator,
            params=params,
            moderate_intensity=config.moderate_intensity,
            aggressive_intensity=config.aggressive_intensity,
            node_threshold=config.node_threshold,
        )
        self.receiver = FieldReceiver(self.channel, default_intensity=config.default_intensity)
        self.particles = ParticleSystem(config.num_particles, config.gradient_strength, rng=rng_particles)
        self.renderer = Renderer(palette, debug_luminosity=config.debug_luminosity)
        sweep = StraySweep(config.sweep_interval, config.sweep_margin) if config.sweep_enabled else None
        self.driver = Driver(
            self.particles,
            self.renderer,
            self.generator,
            self.receiver,
            params=params,
            sweep=sweep,
            mode=DrawMode.VIBRATION if config.debug else DrawMode.PARTICLES,
        )
        self.debouncer = Debouncer(config.resize_debounce)
        self.screen: Optional[pygame.Surface] = None

    def _start(self, window_width: int, window_height: int):
        self.context.start()
        width, height = self.config.grid_size(window_width, window_height)
        logger.info(
            "Starting with %d particles on a %dx%d grid (window %dx%d)",
            self.config.num_particles, width, height, window_width, window_height
        )
        self.driver.resize(width, height)

    def _stop(self):
        self.generator.shutdown()
        self.context.stop()

    def run_headless(self, frames: int) -> int:
        """
        Advances a fixed number of frames without opening a window.
        Returns: int: Number of frames drawn.
        """
        self._start(self.config.window_width, self.config.window_height)
        dt = 1.0 / self.config.fps
        drawn = 0
        try:
            for _ in range(frames):
                drawn += self.driver.frame(dt)
        finally:
            self._stop()
        logger.info("Headless run finished: %d frames, colour index %d", drawn, self.renderer.color_index)
        return drawn

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Applies one input event. Returns False when the app should quit."""
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.VIDEORESIZE:
            size = (event.w, event.h)
            self.debouncer.set(lambda: self._apply_window_size(*size), time.monotonic())
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_SPACE:
                self.driver.toggle_running()
            elif event.key == pygame.K_d:
                self.driver.toggle_debug()
            elif event.key in PRESET_KEYS:
                self.driver.select_preset(PRESET_KEYS[event.key])
            elif event.key in UP_KEYS:
                self.driver.scale_frequency(FREQUENCY_STEP)
            elif event.key in DOWN_KEYS:
                self.driver.scale_frequency(1 / FREQUENCY_STEP)
        return True

    def _apply_window_size(self, window_width: int, window_height: int):
        width, height = self.config.grid_size(window_width, window_height)
        logger.info("Window resized to %dx%d, grid %dx%d", window_width, window_height, width, height)
        self.driver.resize(width, height)

    def run(self):
        """Main loop: events, one simulation frame, present, tick the clock."""
        pygame.init()
        self.screen = pygame.display.set_mode(
            (self.config.window_width, self.config.window_height), pygame.RESIZABLE
        )
        pygame.display.set_caption("Chladni Plate")
        clock = pygame.time.Clock()
        self._start(self.config.window_width, self.config.window_height)

        fps_count = 0
        fps_started = time.monotonic()
        running = True
        try:
            while running:
                for event in pygame.event.get():
                    running = self.handle_event(event) and running
                now = time.monotonic()
                self.debouncer.poll(now)

                dt = clock.tick(self.config.fps) / 1000.0
                if self.driver.frame(dt):
                    self.renderer.present(self.screen)

                fps_count += 1
                if now - fps_started >= 1.0:
                    pygame.display.set_caption(f"Chladni Plate - {fps_count} fps")
                    fps_count = 0
                    fps_started = now
        finally:
            self._stop()
            pygame.quit()
