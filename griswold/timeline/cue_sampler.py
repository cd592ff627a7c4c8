"""
Cue Sampler for Griswold.
Turns continuous actor state into a discrete, time-ordered cue list.
"""

import json
import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from .interpolation import round_half_up, value_at
from .models import Actor, ExportedCue

logger = logging.getLogger('cue_sampler')

MIN_TICK_RATE = 0.001
MAX_TICK_RATE = 1.0
DEFAULT_TICK_RATE = 0.1

# Absorbs float drift when duration is an exact multiple of the tick rate
_GRID_TOLERANCE = 1e-9


def clamp_tick_rate(
    tick_rate: Optional[float],
    low: float = MIN_TICK_RATE,
    high: float = MAX_TICK_RATE,
    default: float = DEFAULT_TICK_RATE
) -> float:
    """Clamp a user-entered tick rate into [low, high]; unusable input gives ``default``."""
    if tick_rate is None or not math.isfinite(tick_rate) or tick_rate <= 0:
        return default
    return max(low, min(high, tick_rate))


def sample_times(duration: float, tick_rate: float) -> np.ndarray:
    """Sample instants 0, tick_rate, 2*tick_rate, ... up to and including ``duration``."""
    if tick_rate <= 0:
        raise ValueError(f"tick_rate must be positive, got {tick_rate}")
    count = int(np.floor(duration / tick_rate + _GRID_TOLERANCE)) + 1
    return np.arange(count, dtype=np.float64) * tick_rate


def generate_cues(actors: Sequence[Actor], duration: float, tick_rate: float) -> List[ExportedCue]:
    """
    Sample every actor into a cue list.

    With no audio loaded (``duration`` of 0) each actor contributes its
    value at t=0 plus one cue per keyframe. Otherwise every actor is sampled
    on a regular grid with times and states rounded to 3 decimals.

    Cues are ordered by time, then by actor label.
    """
    cues: List[ExportedCue] = []

    if not duration or duration <= 0:
        for actor in actors:
            cues.append(ExportedCue(t=0.0, id=actor.label, state=value_at(actor, 0.0)))
            for kf in actor.keyframes:
                cues.append(ExportedCue(t=kf.time, id=actor.label, state=kf.value))
    else:
        for t in sample_times(duration, tick_rate):
            t = float(t)
            rounded_t = round_half_up(t, 3)
            for actor in actors:
                cues.append(ExportedCue(
                    t=rounded_t,
                    id=actor.label,
                    state=round_half_up(value_at(actor, t), 3)
                ))

    cues.sort(key=lambda c: (c.t, c.id))
    logger.debug(f"Generated {len(cues)} cues for {len(actors)} actors")
    return cues


def estimate_cue_count(actors: Sequence[Actor], duration: float, tick_rate: float) -> int:
    """Number of cues ``generate_cues`` will produce for these inputs."""
    if not duration or duration <= 0:
        return sum(1 + len(actor.keyframes) for actor in actors)
    return len(sample_times(duration, tick_rate)) * len(actors)


def cues_to_json(cues: Sequence[ExportedCue], indent: Optional[int] = 2) -> str:
    return json.dumps([cue.to_dict() for cue in cues], indent=indent)


def cue_export_filename(project_name: str) -> str:
    return f"{project_name or 'project'}-cues.json"
