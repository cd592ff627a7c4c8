"""
In-flight keyframe value edits.

The timeline lets the operator type a new value for a keyframe; Enter
commits it, Escape throws it away.
"""

import logging
from typing import Optional

logger = logging.getLogger('keyframe_edit')


class KeyframeEdit:
    """An uncommitted value edit for the keyframe at ``time`` on one actor."""

    def __init__(self, store, actor_id: str, time: float):
        self.store = store
        self.actor_id = actor_id
        self.time = time

        actor = store.get_actor(actor_id)
        kf = actor.keyframe_at(time) if actor else None
        self.text = f"{kf.value:.2f}" if kf else "0.00"
        self.active = kf is not None

    def set_text(self, text: str):
        if self.active:
            self.text = text

    def parsed_value(self) -> float:
        """Typed value clamped to [0, 1]; unparseable text reads as 0."""
        try:
            value = float(self.text)
        except (TypeError, ValueError):
            value = 0.0
        if value != value:  # NaN
            value = 0.0
        return max(0.0, min(1.0, value))

    def commit(self) -> Optional[float]:
        """Write the edit to the store. Returns the value written, or None if inactive."""
        if not self.active:
            return None
        value = self.parsed_value()
        self.store.update_keyframe(self.actor_id, self.time, value)
        self.active = False
        logger.debug(f"Keyframe {self.actor_id}@{self.time} set to {value}")
        return value

    def cancel(self):
        self.active = False
