"""
Polygon geometry for canvas shapes: bounds, centroids, point containment
and hit testing.

Containment edge policy
-----------------------
Rectangles are inclusive on every edge. Arbitrary polygons use even-odd ray
casting with a half-open crossing test, so for an axis-aligned square the
min-x / min-y edges count as inside and the max-x / max-y edges as outside:
on ``[(0, 0), (10, 0), (10, 10), (0, 10)]`` the point ``(0, 0)`` is inside
and ``(10, 10)`` is not.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..timeline.models import Actor, ArbitraryPolygon, CanvasBackground, Polygon, RectanglePolygon


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of a polygon."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def center_x(self) -> float:
        return (self.min_x + self.max_x) / 2

    @property
    def center_y(self) -> float:
        return (self.min_y + self.max_y) / 2

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def polygon_points(polygon: Polygon) -> List[Tuple[float, float]]:
    """Vertices of either polygon variant, in drawing order."""
    match polygon:
        case RectanglePolygon(x=x, y=y, width=w, height=h):
            return [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
        case ArbitraryPolygon(points=points):
            return list(points)
    raise TypeError(f"Not a polygon: {polygon!r}")


def bounds_of(polygon: Polygon) -> Bounds:
    """
    Bounding box of a polygon.

    ``center_x``/``center_y`` is where labels go: the rectangle's centre, or
    the centre of an arbitrary polygon's bounding box (not its centroid).
    """
    match polygon:
        case RectanglePolygon(x=x, y=y, width=w, height=h):
            return Bounds(x, y, x + w, y + h)
        case ArbitraryPolygon(points=points):
            if not points:
                return Bounds(0.0, 0.0, 0.0, 0.0)
            pts = np.asarray(points, dtype=np.float64)
            lo = pts.min(axis=0)
            hi = pts.max(axis=0)
            return Bounds(float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1]))
    raise TypeError(f"Not a polygon: {polygon!r}")


def centroid(polygon: Polygon) -> Tuple[float, float]:
    """Area-weighted centroid (shoelace). Degenerate polygons fall back to the vertex mean."""
    pts = np.asarray(polygon_points(polygon), dtype=np.float64)
    if len(pts) == 0:
        return 0.0, 0.0

    x, y = pts[:, 0], pts[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)
    cross = x * y_next - x_next * y
    area = cross.sum() / 2

    if abs(area) < 1e-12:
        mean = pts.mean(axis=0)
        return float(mean[0]), float(mean[1])

    cx = ((x + x_next) * cross).sum() / (6 * area)
    cy = ((y + y_next) * cross).sum() / (6 * area)
    return float(cx), float(cy)


def contains_point(polygon: Polygon, x: float, y: float) -> bool:
    """Test whether (x, y) lies inside the polygon (see module docstring for edges)."""
    match polygon:
        case RectanglePolygon(x=rx, y=ry, width=w, height=h):
            return rx <= x <= rx + w and ry <= y <= ry + h
        case ArbitraryPolygon(points=points):
            return _ray_cast(points, x, y)
    raise TypeError(f"Not a polygon: {polygon!r}")


def _ray_cast(points: Sequence[Tuple[float, float]], x: float, y: float) -> bool:
    # Even-odd rule with a ray towards +x. An edge only counts when it
    # straddles the ray, so horizontal edges (yi == yj) never divide by zero.
    inside = False
    j = len(points) - 1
    for i in range(len(points)):
        xi, yi = points[i]
        xj, yj = points[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def hit_test(actors: Sequence[Actor], x: float, y: float) -> Optional[str]:
    """
    Id of the topmost actor with a shape under (x, y).

    Later actors are drawn over earlier ones, so they are tested first.
    """
    for actor in reversed(actors):
        for shape in actor.shapes:
            if contains_point(shape.geometry, x, y):
                return actor.id
    return None


def background_at(backgrounds: Sequence[CanvasBackground], x: float, y: float) -> Optional[str]:
    """Id of the topmost background image under (x, y)."""
    for bg in sorted(backgrounds, key=lambda b: b.z_index, reverse=True):
        if bg.contains(x, y):
            return bg.id
    return None
