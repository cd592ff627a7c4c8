"""
Value and color interpolation for actor state curves.

Everything here is pure: renderers and the cue sampler call these with the
store's current actors and never get side effects back.
"""

import bisect
import math
import re
from typing import List, NamedTuple, Optional, Tuple

from .models import Actor, InterpolationType, KeyFrame

_HEX_COLOR = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


class RGB(NamedTuple):
    r: int
    g: int
    b: int

    def css(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"


BLACK = RGB(0, 0, 0)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` places with halves going up (towards +inf)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def surrounding_keyframes(
    keyframes: List[KeyFrame], time: float
) -> Tuple[Optional[KeyFrame], Optional[KeyFrame]]:
    """
    Find the keyframes bracketing ``time``.

    Returns (before, after): the last keyframe at or before ``time`` and the
    first keyframe at or after it. Both are the same keyframe when ``time``
    lands exactly on one. Keyframes must be time-sorted.
    """
    times = [kf.time for kf in keyframes]
    i = bisect.bisect_right(times, time)
    j = bisect.bisect_left(times, time)
    before = keyframes[i - 1] if i > 0 else None
    after = keyframes[j] if j < len(keyframes) else None
    return before, after


def value_at(actor: Actor, time: float) -> float:
    """
    Get the interpolated state of an actor at a given time.

    Values before the first keyframe hold the first keyframe's value and
    values after the last keyframe hold the last one's. An actor without
    keyframes is off (0).
    """
    if not actor.keyframes:
        return 0.0

    before, after = surrounding_keyframes(actor.keyframes, time)

    if before is None:
        return after.value
    if after is None:
        return before.value
    if before.time == after.time:
        return before.value

    if actor.interpolation == InterpolationType.LINEAR:
        t = (time - before.time) / (after.time - before.time)
        return before.value + t * (after.value - before.value)

    return before.value


def parse_hex_color(hex_color: str) -> RGB:
    """Parse ``#rrggbb`` (``#`` optional). Anything else reads as black."""
    match = _HEX_COLOR.match(hex_color or "")
    if not match:
        return BLACK
    return RGB(*(int(channel, 16) for channel in match.groups()))


def color_at(off_color: str, on_color: str, value: float) -> RGB:
    """Blend each channel linearly from ``off_color`` (0) to ``on_color`` (1)."""
    off = parse_hex_color(off_color)
    on = parse_hex_color(on_color)
    return RGB(*(
        int(round_half_up(lo + (hi - lo) * value))
        for lo, hi in zip(off, on)
    ))


def curve_points(actor: Actor, end_time: float) -> List[Tuple[float, float]]:
    """
    Polyline of (time, value) points tracing the actor's state curve.

    Step curves get a horizontal segment at the old value followed by a
    vertical jump at each keyframe; linear curves connect keyframes directly.
    The curve is extended flat to ``end_time``.
    """
    if not actor.keyframes:
        return []

    start_value = value_at(actor, 0.0)
    points = [(0.0, start_value)]

    if actor.interpolation == InterpolationType.STEP:
        prev_value = start_value
        for kf in actor.keyframes:
            points.append((kf.time, prev_value))
            points.append((kf.time, kf.value))
            prev_value = kf.value
    else:
        for kf in actor.keyframes:
            points.append((kf.time, kf.value))

    last_time = actor.keyframes[-1].time
    points.append((max(end_time, last_time), actor.keyframes[-1].value))
    return points
