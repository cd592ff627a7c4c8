"""
Project file migration.

``.gris`` payloads are upgraded one schema version at a time, then validated
against the current schema before they are turned into models:

    v1  actors carry a single nullable ``shape``
    v2  actors carry a ``shapes`` list (current)

Payloads without a version are treated as v1.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import MigrationError, ProjectLoadError
from .models import GrisFile

logger = logging.getLogger('migration')

LEGACY_VERSION = 1
CURRENT_VERSION = 2


# ---------------------------------------------------------------------------
# Upgrade steps: one pure function per version transition
# ---------------------------------------------------------------------------


def _upgrade_v1_to_v2(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Single nullable ``shape`` becomes a ``shapes`` list."""
    actors = []
    for actor in payload.get("actors") or []:
        upgraded = {k: v for k, v in actor.items() if k != "shape"}
        shape = actor.get("shape")
        upgraded["shapes"] = [shape] if shape else []
        upgraded["keyframes"] = actor.get("keyframes") or []
        upgraded["interpolation"] = actor.get("interpolation") or "step"
        actors.append(upgraded)

    return {
        **payload,
        "version": 2,
        "actors": actors,
        "backgrounds": payload.get("backgrounds") or [],
    }


UPGRADES: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    1: _upgrade_v1_to_v2,
}


def _check_collections(data: Dict[str, Any]):
    """Upgrades walk ``actors`` and ``backgrounds``; both must be lists of objects."""
    for key in ("actors", "backgrounds"):
        items = data.get(key)
        if items is None:
            continue
        if not isinstance(items, list):
            raise MigrationError(f"Project '{key}' must be a list, got {type(items).__name__}")
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise MigrationError(
                    f"Project '{key}' entry {index} must be an object, got {type(item).__name__}"
                )


def migrate(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Upgrade a decoded project payload to ``CURRENT_VERSION``.

    The input is never modified. Migrating an already-current payload
    returns an equal copy, so ``migrate(migrate(x)) == migrate(x)``.

    Raises:
        MigrationError: the payload is not an object, or its version is
            unknown or newer than this build supports.
    """
    if not isinstance(payload, dict):
        raise MigrationError(f"Project payload must be a JSON object, got {type(payload).__name__}")

    data = copy.deepcopy(payload)
    version = data.get("version") or LEGACY_VERSION
    if not isinstance(version, int) or isinstance(version, bool):
        raise MigrationError(f"Invalid project version: {version!r}")
    if version > CURRENT_VERSION:
        raise MigrationError(
            f"Project version {version} is newer than supported version {CURRENT_VERSION}"
        )
    data["version"] = version
    _check_collections(data)

    while version < CURRENT_VERSION:
        upgrade = UPGRADES.get(version)
        if upgrade is None:
            raise MigrationError(f"No upgrade path from project version {version}")
        data = upgrade(data)
        logger.debug(f"Migrated project payload v{version} -> v{data['version']}")
        version = data["version"]

    return data


# ---------------------------------------------------------------------------
# Current-version schema
# ---------------------------------------------------------------------------


class _Schema(BaseModel):
    model_config = ConfigDict(extra="allow")


class CanvasSizeSchema(_Schema):
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)


class ProjectSchema(_Schema):
    name: str
    songFilename: str = ""
    canvasSize: CanvasSizeSchema


class RectangleSchema(_Schema):
    type: Literal["rectangle"]
    x: float
    y: float
    width: float
    height: float


class PolygonSchema(_Schema):
    type: Literal["polygon"]
    points: List[Tuple[float, float]] = Field(..., min_length=3)


class ShapeSchema(_Schema):
    geometry: Union[RectangleSchema, PolygonSchema] = Field(..., discriminator="type")
    offColor: str
    onColor: str


class KeyFrameSchema(_Schema):
    time: float = Field(..., ge=0, allow_inf_nan=False)
    value: float = Field(..., allow_inf_nan=False)  # clamped to [0, 1] on load


class ActorSchema(_Schema):
    id: str = Field(..., min_length=1)
    label: str
    shapes: List[ShapeSchema] = []
    keyframes: List[KeyFrameSchema] = []
    interpolation: Literal["step", "linear"] = "step"


class BackgroundSchema(_Schema):
    id: str = Field(..., min_length=1)
    dataUrl: str
    x: float = 0
    y: float = 0
    width: float
    height: float
    zIndex: int


class GrisFileSchema(_Schema):
    version: Literal[2]
    project: ProjectSchema
    actors: List[ActorSchema] = []
    backgrounds: List[BackgroundSchema] = []


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_gris(source: Union[str, bytes, Dict[str, Any]], origin: Optional[str] = None) -> GrisFile:
    """
    Parse, migrate and validate a project file.

    Args:
        source: JSON text, or an already-decoded payload
        origin: Where the payload came from, for error messages

    Raises:
        ProjectLoadError: the payload is not valid JSON, cannot be migrated,
            or does not match the current schema.
    """
    where = f" ({origin})" if origin else ""

    if isinstance(source, (str, bytes)):
        try:
            payload = json.loads(source)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProjectLoadError(f"Project file is not valid JSON{where}: {e}") from e
    else:
        payload = source

    try:
        data = migrate(payload)
    except MigrationError as e:
        raise MigrationError(f"{e}{where}") from e

    try:
        GrisFileSchema.model_validate(data)
    except ValidationError as e:
        raise ProjectLoadError(f"Project file failed validation{where}: {e}") from e

    gris = GrisFile.from_dict(data)
    logger.info(
        f"Loaded project file{where}: {gris.project.name} (v{gris.version})",
        extra={"project": gris.project.name, "path": origin}
    )
    return gris
