"""
pyChladni: animated Chladni-plate particle simulation.

A background context bakes a standing-wave vibration field and a discrete
steepest-descent direction field; the foreground advects a swarm of
particles along those directions and rasterises them with pygame.
"""

from pychladni.chladni_params import PRESETS, ChladniParameters, Reconfiguration
from pychladni.chladni_field import Bake, bake, compute_gradients, compute_vibration
from pychladni.field_channel import FieldChannel, FieldMessage, FieldReceiver
from pychladni.field_generator import FieldGenerator
from pychladni.particles import ParticleSystem, StraySweep
from pychladni.renderer import DrawMode, Renderer

__version__ = "0.2.0"

__all__ = [
    "PRESETS",
    "Bake",
    "ChladniParameters",
    "DrawMode",
    "FieldChannel",
    "FieldGenerator",
    "FieldMessage",
    "FieldReceiver",
    "ParticleSystem",
    "Reconfiguration",
    "Renderer",
    "StraySweep",
    "bake",
    "compute_gradients",
    "compute_vibration",
]
