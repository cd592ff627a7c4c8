"""
Drawing tool state machine.

Turns pointer input from the canvas into pending shapes and hands them to
an actor. Nothing here is persisted; the store only sees the finished shape.
"""

import logging
import math
from enum import Enum
from typing import List, Optional, Tuple

from ..timeline.models import (
    DEFAULT_OFF_COLOR,
    DEFAULT_ON_COLOR,
    ArbitraryPolygon,
    Polygon,
    RectanglePolygon,
    Shape,
    Tool,
)

logger = logging.getLogger('drawing')

MIN_RECT_SIZE = 10.0      # canvas units, both dimensions must exceed this
CLOSE_RADIUS = 15.0       # screen pixels, divided by zoom
MIN_POLYGON_POINTS = 3


class DrawState(Enum):
    IDLE = "idle"
    RECTANGLE_DRAGGING = "rectangle-dragging"
    POLYGON_COLLECTING = "polygon-collecting"
    AWAITING_ASSIGNMENT = "awaiting-assignment"


class DrawingTool:
    """
    Pointer-driven shape drawing.

    ``tool`` is read from the store's UI state on each event, so switching
    tools in the toolbar takes effect immediately.
    """

    def __init__(self, store):
        self.store = store
        self.state = DrawState.IDLE
        self.zoom: float = 1.0  # canvas view zoom, not the timeline zoom

        self.start: Optional[Tuple[float, float]] = None
        self.cursor: Optional[Tuple[float, float]] = None
        self.points: List[Tuple[float, float]] = []
        self.pending_shape: Optional[Polygon] = None

    @property
    def tool(self) -> Tool:
        return self.store.ui.tool

    def _reset(self):
        self.start = None
        self.cursor = None
        self.points = []

    def _finish(self, polygon: Polygon):
        self._reset()
        self.pending_shape = polygon
        self.state = DrawState.AWAITING_ASSIGNMENT
        logger.debug(f"Pending shape: {polygon}")

    # === Pointer events ===

    def pointer_down(self, x: float, y: float):
        if self.state == DrawState.IDLE and self.tool == Tool.RECTANGLE:
            self.start = (x, y)
            self.cursor = (x, y)
            self.state = DrawState.RECTANGLE_DRAGGING

    def pointer_move(self, x: float, y: float):
        if self.state in (DrawState.RECTANGLE_DRAGGING, DrawState.POLYGON_COLLECTING):
            self.cursor = (x, y)

    def pointer_up(self, x: float, y: float) -> Optional[Polygon]:
        """Finish a rectangle drag. Returns the pending rectangle, or None if too small."""
        if self.state != DrawState.RECTANGLE_DRAGGING:
            return None

        sx, sy = self.start
        width = abs(x - sx)
        height = abs(y - sy)
        if width > MIN_RECT_SIZE and height > MIN_RECT_SIZE:
            self._finish(RectanglePolygon(x=min(sx, x), y=min(sy, y), width=width, height=height))
            return self.pending_shape

        self._reset()
        self.state = DrawState.IDLE
        return None

    def click(self, x: float, y: float) -> Optional[Polygon]:
        """Add a polygon vertex, or close the polygon when clicking near the first one."""
        if self.tool != Tool.POLYGON:
            return None
        if self.state not in (DrawState.IDLE, DrawState.POLYGON_COLLECTING):
            return None

        if len(self.points) >= MIN_POLYGON_POINTS:
            fx, fy = self.points[0]
            if math.hypot(x - fx, y - fy) < CLOSE_RADIUS / self.zoom:
                self._finish(ArbitraryPolygon(points=list(self.points)))
                return self.pending_shape

        self.points.append((x, y))
        self.cursor = (x, y)
        self.state = DrawState.POLYGON_COLLECTING
        return None

    def double_click(self) -> Optional[Polygon]:
        if self.state == DrawState.POLYGON_COLLECTING and len(self.points) >= MIN_POLYGON_POINTS:
            self._finish(ArbitraryPolygon(points=list(self.points)))
            return self.pending_shape
        return None

    def cancel(self):
        """Escape: drop whatever is in progress, including an unassigned shape."""
        self._reset()
        self.pending_shape = None
        self.state = DrawState.IDLE

    # === Assignment ===

    def assign_to(self, actor_id: str) -> bool:
        """
        Give the pending shape to an actor.

        The shape reuses the actor's existing color pair, if it has shapes
        already, so all of an actor's shapes stay the same color.
        """
        if self.state != DrawState.AWAITING_ASSIGNMENT or self.pending_shape is None:
            return False

        actor = self.store.get_actor(actor_id)
        existing = actor.shapes[0] if actor and actor.shapes else None
        shape = Shape(
            geometry=self.pending_shape,
            off_color=existing.off_color if existing else DEFAULT_OFF_COLOR,
            on_color=existing.on_color if existing else DEFAULT_ON_COLOR
        )
        added = self.store.add_actor_shape(actor_id, shape)

        self.pending_shape = None
        self.state = DrawState.IDLE
        self.store.set_tool(Tool.SELECT)
        return added
