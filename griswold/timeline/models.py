"""
Data models for the choreography timeline.

Wire names (camelCase) follow the ``.gris`` project file format; attribute
names are snake_case.
"""

import copy
import json
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

DEFAULT_OFF_COLOR = "#333333"
DEFAULT_ON_COLOR = "#ffcc00"
DEFAULT_CANVAS_WIDTH = 1920
DEFAULT_CANVAS_HEIGHT = 1080
DEFAULT_PROJECT_NAME = "Untitled Project"


def new_id() -> str:
    return str(uuid.uuid4())


class InterpolationType(Enum):
    STEP = "step"       # Hold previous value until the next keyframe
    LINEAR = "linear"   # Straight line between neighbouring keyframes


class Tool(Enum):
    SELECT = "select"
    RECTANGLE = "rectangle"
    POLYGON = "polygon"


# === Geometry ===

@dataclass
class RectanglePolygon:
    """Axis-aligned rectangle in canvas units."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def to_dict(self) -> dict:
        return {
            "type": "rectangle",
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height
        }


@dataclass
class ArbitraryPolygon:
    """Closed polygon given by its vertices (at least three)."""
    points: List[Tuple[float, float]] = field(default_factory=list)

    def __post_init__(self):
        self.points = [(float(px), float(py)) for px, py in self.points]

    def to_dict(self) -> dict:
        return {
            "type": "polygon",
            "points": [[px, py] for px, py in self.points]
        }


Polygon = Union[RectanglePolygon, ArbitraryPolygon]


def polygon_from_dict(data: dict) -> Polygon:
    """Build the polygon variant named by ``data["type"]``."""
    match data.get("type"):
        case "rectangle":
            return RectanglePolygon(
                x=data.get("x", 0.0),
                y=data.get("y", 0.0),
                width=data.get("width", 0.0),
                height=data.get("height", 0.0)
            )
        case "polygon":
            return ArbitraryPolygon(points=[tuple(p) for p in data.get("points", [])])
        case other:
            raise ValueError(f"Unknown polygon type: {other!r}")


@dataclass
class Shape:
    """One drawn polygon plus the color pair it blends between."""
    geometry: Polygon
    off_color: str = DEFAULT_OFF_COLOR  # state = 0
    on_color: str = DEFAULT_ON_COLOR    # state = 1

    def to_dict(self) -> dict:
        return {
            "geometry": self.geometry.to_dict(),
            "offColor": self.off_color,
            "onColor": self.on_color
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Shape':
        return cls(
            geometry=polygon_from_dict(data["geometry"]),
            off_color=data.get("offColor", DEFAULT_OFF_COLOR),
            on_color=data.get("onColor", DEFAULT_ON_COLOR)
        )


# === Actors ===

@dataclass
class KeyFrame:
    """A fixed (time, value) anchor on an actor's state curve."""
    time: float = 0.0   # seconds
    value: float = 0.0  # 0-1

    def to_dict(self) -> dict:
        return {"time": self.time, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> 'KeyFrame':
        value = data.get("value", 0.0)
        return cls(time=data.get("time", 0.0), value=max(0.0, min(1.0, value)))


def normalize_keyframes(keyframes: List[KeyFrame]) -> List[KeyFrame]:
    """Sort by time, keeping only the last keyframe given for any time."""
    by_time: Dict[float, KeyFrame] = {}
    for kf in keyframes:
        by_time[kf.time] = kf
    return sorted(by_time.values(), key=lambda k: k.time)


@dataclass
class Actor:
    """A named choreography track driving one or more shapes."""
    id: str = field(default_factory=new_id)
    label: str = ""
    shapes: List[Shape] = field(default_factory=list)
    keyframes: List[KeyFrame] = field(default_factory=list)
    interpolation: InterpolationType = InterpolationType.STEP

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "shapes": [shape.to_dict() for shape in self.shapes],
            "keyframes": [kf.to_dict() for kf in self.keyframes],
            "interpolation": self.interpolation.value
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Actor':
        return cls(
            id=data.get("id") or new_id(),
            label=data.get("label", ""),
            shapes=[Shape.from_dict(s) for s in data.get("shapes", [])],
            keyframes=normalize_keyframes(
                [KeyFrame.from_dict(k) for k in data.get("keyframes", [])]
            ),
            interpolation=InterpolationType(data.get("interpolation", "step"))
        )

    def keyframe_at(self, time: float) -> Optional[KeyFrame]:
        """Keyframe at exactly ``time``, if any."""
        for kf in self.keyframes:
            if kf.time == time:
                return kf
        return None


# === Canvas ===

@dataclass
class CanvasBackground:
    """A reference image placed on the canvas. Painted in ``z_index`` order."""
    id: str = field(default_factory=new_id)
    image_data: str = ""  # data URL
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    z_index: int = 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "dataUrl": self.image_data,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "zIndex": self.z_index
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CanvasBackground':
        return cls(
            id=data.get("id") or new_id(),
            image_data=data.get("dataUrl", ""),
            x=data.get("x", 0.0),
            y=data.get("y", 0.0),
            width=data.get("width", 0.0),
            height=data.get("height", 0.0),
            z_index=data.get("zIndex", 1)
        )

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


@dataclass
class CanvasSize:
    width: float = DEFAULT_CANVAS_WIDTH
    height: float = DEFAULT_CANVAS_HEIGHT

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict) -> 'CanvasSize':
        return cls(
            width=data.get("width", DEFAULT_CANVAS_WIDTH),
            height=data.get("height", DEFAULT_CANVAS_HEIGHT)
        )


@dataclass
class Project:
    """Project metadata."""
    name: str = DEFAULT_PROJECT_NAME
    song_filename: str = ""
    canvas_size: CanvasSize = field(default_factory=CanvasSize)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "songFilename": self.song_filename,
            "canvasSize": self.canvas_size.to_dict()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Project':
        return cls(
            name=data.get("name", DEFAULT_PROJECT_NAME),
            song_filename=data.get("songFilename", ""),
            canvas_size=CanvasSize.from_dict(data.get("canvasSize", {}))
        )


# === Session state ===

@dataclass
class TrackedSlice:
    """The part of the session that undo/redo operates on."""
    project: Project = field(default_factory=Project)
    actors: List[Actor] = field(default_factory=list)
    backgrounds: List[CanvasBackground] = field(default_factory=list)

    def copy(self) -> 'TrackedSlice':
        return copy.deepcopy(self)

    def find_actor(self, actor_id: str) -> Optional[Actor]:
        for actor in self.actors:
            if actor.id == actor_id:
                return actor
        return None

    def find_background(self, background_id: str) -> Optional[CanvasBackground]:
        for bg in self.backgrounds:
            if bg.id == background_id:
                return bg
        return None


@dataclass
class PlaybackState:
    """Playback position. Not tracked by undo/redo."""
    current_time: float = 0.0
    is_playing: bool = False
    duration: float = 0.0


@dataclass
class UIState:
    """Editor selection and view settings. Not tracked by undo/redo."""
    selected_actor_id: Optional[str] = None
    selected_background_id: Optional[str] = None
    zoom: float = 100.0  # timeline pixels per second
    scroll_x: float = 0.0
    scroll_y: float = 0.0
    tool: Tool = Tool.SELECT
    background_opacity: float = 1.0


# === Files and exports ===

@dataclass
class GrisFile:
    """Serialized project: the tracked slice plus a schema version."""
    version: int
    project: Project = field(default_factory=Project)
    actors: List[Actor] = field(default_factory=list)
    backgrounds: List[CanvasBackground] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "project": self.project.to_dict(),
            "actors": [actor.to_dict() for actor in self.actors],
            "backgrounds": [bg.to_dict() for bg in self.backgrounds]
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GrisFile':
        return cls(
            version=data["version"],
            project=Project.from_dict(data.get("project", {})),
            actors=[Actor.from_dict(a) for a in data.get("actors", [])],
            backgrounds=[CanvasBackground.from_dict(b) for b in data.get("backgrounds", [])]
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def tracked_slice(self) -> TrackedSlice:
        return TrackedSlice(
            project=copy.deepcopy(self.project),
            actors=copy.deepcopy(self.actors),
            backgrounds=copy.deepcopy(self.backgrounds)
        )


@dataclass
class ExportedCue:
    """One sampled (time, actor label, state) triple."""
    t: float
    id: str
    state: float

    def to_dict(self) -> Dict[str, Any]:
        return {"t": self.t, "id": self.id, "state": self.state}
