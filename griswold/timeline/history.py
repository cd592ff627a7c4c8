"""
Bounded undo/redo history over the tracked slice.
"""

import logging
from collections import deque
from typing import Deque, List, Optional

from .models import TrackedSlice

logger = logging.getLogger('history')

DEFAULT_HISTORY_LIMIT = 100


class HistoryManager:
    """
    Snapshot history with a fixed undo depth.

    ``past`` holds older snapshots oldest-first, ``future`` holds redo
    snapshots nearest-first. Every snapshot is a deep copy taken on the way
    in, and callers get deep copies on the way out, so nothing outside the
    manager can alias a stored snapshot.
    """

    def __init__(self, initial: Optional[TrackedSlice] = None, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"History limit must be at least 1, got {limit}")
        self.limit = limit
        self._past: Deque[TrackedSlice] = deque(maxlen=limit)
        self._future: Deque[TrackedSlice] = deque()
        self._present: TrackedSlice = (initial or TrackedSlice()).copy()

    @property
    def present(self) -> TrackedSlice:
        """Copy of the current snapshot."""
        return self._present.copy()

    @property
    def past(self) -> List[TrackedSlice]:
        return [s.copy() for s in self._past]

    @property
    def future(self) -> List[TrackedSlice]:
        return [s.copy() for s in self._future]

    @property
    def can_undo(self) -> bool:
        return len(self._past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._future) > 0

    def record(self, new_state: TrackedSlice):
        """Make ``new_state`` the present. Clears the redo stack."""
        if len(self._past) == self.limit:
            logger.debug(f"History full ({self.limit}), dropping oldest snapshot")
        # deque(maxlen) evicts from the left, i.e. the oldest entry
        self._past.append(self._present)
        self._present = new_state.copy()
        self._future.clear()

    def undo(self) -> Optional[TrackedSlice]:
        """Step back one snapshot. Returns the new present, or None if nothing to undo."""
        if not self._past:
            return None
        self._future.appendleft(self._present)
        self._present = self._past.pop()
        return self._present.copy()

    def redo(self) -> Optional[TrackedSlice]:
        """Step forward one snapshot. Returns the new present, or None if nothing to redo."""
        if not self._future:
            return None
        self._past.append(self._present)
        self._present = self._future.popleft()
        return self._present.copy()

    def clear(self, initial: Optional[TrackedSlice] = None):
        """Forget all history, starting again from ``initial``."""
        self._past.clear()
        self._future.clear()
        if initial is not None:
            self._present = initial.copy()
