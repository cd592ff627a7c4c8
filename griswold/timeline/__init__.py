"""
Timeline module for Griswold.
Provides the actor/keyframe model, interpolation, undo/redo, cue export and
project storage.
"""

from .models import Actor, KeyFrame, Shape, InterpolationType, GrisFile, ExportedCue
from .interpolation import value_at, color_at
from .cue_sampler import generate_cues
from .history import HistoryManager
from .migration import migrate, load_gris
from .store import ProjectStore

__all__ = [
    'Actor',
    'KeyFrame',
    'Shape',
    'InterpolationType',
    'GrisFile',
    'ExportedCue',
    'value_at',
    'color_at',
    'generate_cues',
    'HistoryManager',
    'migrate',
    'load_gris',
    'ProjectStore',
]
