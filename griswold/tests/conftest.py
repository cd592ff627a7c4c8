"""Shared pytest fixtures for the Griswold test suite."""

from __future__ import annotations

import pytest

from griswold.timeline.models import (
    Actor,
    ArbitraryPolygon,
    InterpolationType,
    KeyFrame,
    RectanglePolygon,
    Shape,
)
from griswold.timeline.store import ProjectStore


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_actor(label="A", keyframes=(), interpolation=InterpolationType.STEP, shapes=(), actor_id=None):
    """Build an actor from (time, value) pairs."""
    actor = Actor(
        label=label,
        keyframes=[KeyFrame(time=t, value=v) for t, v in keyframes],
        interpolation=interpolation,
        shapes=list(shapes),
    )
    if actor_id is not None:
        actor.id = actor_id
    return actor


def square(size=10.0, x=0.0, y=0.0) -> ArbitraryPolygon:
    return ArbitraryPolygon(points=[(x, y), (x + size, y), (x + size, y + size), (x, y + size)])


def rect_shape(x=0.0, y=0.0, width=10.0, height=10.0, **colors) -> Shape:
    return Shape(geometry=RectanglePolygon(x=x, y=y, width=width, height=height), **colors)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def store() -> ProjectStore:
    return ProjectStore()


@pytest.fixture()
def actor_id(store: ProjectStore) -> str:
    return store.add_actor("Lamp")
