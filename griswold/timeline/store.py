"""
Project State Store for Griswold.

Owns the project, its actors and background images (the tracked slice),
plus playback and editor UI state that undo/redo never touches.
"""

import copy
import logging
from dataclasses import fields
from typing import Callable, List, Optional

from ..canvas import geometry
from .history import DEFAULT_HISTORY_LIMIT, HistoryManager
from .interpolation import value_at
from .migration import CURRENT_VERSION
from .models import (
    Actor,
    CanvasBackground,
    CanvasSize,
    GrisFile,
    InterpolationType,
    KeyFrame,
    PlaybackState,
    Project,
    Shape,
    Tool,
    TrackedSlice,
    UIState,
    new_id,
)

logger = logging.getLogger('store')

MIN_ZOOM = 10.0
MAX_ZOOM = 500.0

Listener = Callable[['ProjectStore'], None]

_PROJECT_FIELDS = {f.name for f in fields(Project)}
_BACKGROUND_FIELDS = {f.name for f in fields(CanvasBackground)} - {"id"}
_PLAYBACK_FIELDS = {f.name for f in fields(PlaybackState)}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ProjectStore:
    """
    Mutable aggregate root for one editing session.

    Tracked actions never edit the live slice: each works on a deep copy
    and swaps it in whole through ``_commit``, which also records the
    previous slice in the history. Actions aimed at ids that do not exist
    change nothing and record nothing.

    The ``project``, ``actors`` and ``backgrounds`` properties hand out the
    live objects for rendering; treat them as read-only.
    """

    def __init__(self, initial: Optional[TrackedSlice] = None, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self._history = HistoryManager(initial or TrackedSlice(), limit=history_limit)
        self._state: TrackedSlice = self._history.present

        # Untracked
        self.playback = PlaybackState()
        self.ui = UIState()

        # Runtime only, never serialized
        self.audio_filename: Optional[str] = None

        self._listeners: List[Listener] = []

    @classmethod
    def from_settings(cls, settings) -> 'ProjectStore':
        return cls(history_limit=settings.history_limit)

    # === Tracked state access ===

    @property
    def project(self) -> Project:
        return self._state.project

    @property
    def actors(self) -> List[Actor]:
        return self._state.actors

    @property
    def backgrounds(self) -> List[CanvasBackground]:
        return self._state.backgrounds

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def snapshot(self) -> TrackedSlice:
        """Independent copy of the tracked slice."""
        return self._state.copy()

    # === Change notification ===

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(store)`` after every tracked change, undo and redo.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Store listener {listener!r} failed: {e}")

    # === Internal ===

    def _commit(self, draft: TrackedSlice, action: str) -> bool:
        if draft == self._state:
            logger.debug(f"{action}: no change")
            return False
        self._history.record(draft)
        self._state = draft
        logger.debug(f"{action}: committed")
        self._notify()
        return True

    def _edit_actor(self, actor_id: str, action: str, edit: Callable[[Actor], None]) -> bool:
        draft = self._state.copy()
        actor = draft.find_actor(actor_id)
        if actor is None:
            logger.debug(f"{action}: no actor {actor_id}")
            return False
        edit(actor)
        return self._commit(draft, action)

    def _revalidate_selection(self):
        """Drop selections that point at ids which no longer exist."""
        if self.ui.selected_actor_id and self._state.find_actor(self.ui.selected_actor_id) is None:
            self.ui.selected_actor_id = None
        if (self.ui.selected_background_id
                and self._state.find_background(self.ui.selected_background_id) is None):
            self.ui.selected_background_id = None

    # === Project actions ===

    def set_project(self, **updates) -> bool:
        """Merge project metadata fields (name, song_filename, canvas_size)."""
        draft = self._state.copy()
        for key, value in updates.items():
            if key not in _PROJECT_FIELDS:
                logger.warning(f"Ignoring unknown project field: {key}")
                continue
            if key == "canvas_size" and isinstance(value, dict):
                value = CanvasSize.from_dict(value)
            setattr(draft.project, key, value)
        return self._commit(draft, "set_project")

    def load_project(self, project: Project, actors: List[Actor], backgrounds: List[CanvasBackground]):
        """Replace the whole tracked slice (file load). UI goes back to defaults."""
        draft = TrackedSlice(
            project=copy.deepcopy(project),
            actors=copy.deepcopy(actors),
            backgrounds=copy.deepcopy(backgrounds)
        )
        self.ui = UIState()
        self._commit(draft, "load_project")
        logger.info(f"Loaded project: {project.name} ({len(actors)} actors, {len(backgrounds)} backgrounds)")

    def load_file(self, gris_file: GrisFile):
        self.load_project(gris_file.project, gris_file.actors, gris_file.backgrounds)

    def reset_project(self):
        """Start a blank project. Playback, UI and audio are reset too."""
        self.ui = UIState()
        self.playback = PlaybackState()
        self.audio_filename = None
        self._commit(TrackedSlice(), "reset_project")
        logger.info("Reset to blank project")

    def to_file(self) -> GrisFile:
        """Serializable copy of the tracked slice at the current file version."""
        state = self._state.copy()
        return GrisFile(
            version=CURRENT_VERSION,
            project=state.project,
            actors=state.actors,
            backgrounds=state.backgrounds
        )

    # === Actor actions ===

    def add_actor(self, label: str) -> str:
        """Append a new actor with no shapes or keyframes. Returns its id."""
        actor = Actor(id=new_id(), label=label)
        draft = self._state.copy()
        draft.actors.append(actor)
        self._commit(draft, "add_actor")
        logger.info(f"Added actor: {label} ({actor.id})")
        return actor.id

    def remove_actor(self, actor_id: str) -> bool:
        if self.ui.selected_actor_id == actor_id:
            self.ui.selected_actor_id = None
        draft = self._state.copy()
        draft.actors = [a for a in draft.actors if a.id != actor_id]
        return self._commit(draft, "remove_actor")

    def update_actor(
        self,
        actor_id: str,
        label: Optional[str] = None,
        interpolation: Optional[InterpolationType] = None
    ) -> bool:
        """Change an actor's label and/or interpolation. Shapes and keyframes are untouched."""
        if interpolation is not None and not isinstance(interpolation, InterpolationType):
            try:
                interpolation = InterpolationType(interpolation)
            except ValueError:
                logger.warning(f"Ignoring unknown interpolation: {interpolation!r}")
                interpolation = None

        def edit(actor: Actor):
            if label is not None:
                actor.label = label
            if interpolation is not None:
                actor.interpolation = interpolation

        return self._edit_actor(actor_id, "update_actor", edit)

    def reorder_actors(self, from_index: int, to_index: int) -> bool:
        """Move the actor at ``from_index`` so it ends up at ``to_index``."""
        count = len(self._state.actors)
        if not (0 <= from_index < count and 0 <= to_index < count):
            logger.debug(f"reorder_actors: index out of range ({from_index} -> {to_index})")
            return False
        draft = self._state.copy()
        actor = draft.actors.pop(from_index)
        draft.actors.insert(to_index, actor)
        return self._commit(draft, "reorder_actors")

    # === Shape actions ===

    def add_actor_shape(self, actor_id: str, shape: Shape) -> bool:
        return self._edit_actor(
            actor_id, "add_actor_shape", lambda actor: actor.shapes.append(copy.deepcopy(shape))
        )

    def clear_actor_shapes(self, actor_id: str) -> bool:
        return self._edit_actor(actor_id, "clear_actor_shapes", lambda actor: actor.shapes.clear())

    def update_actor_shape_colors(
        self,
        actor_id: str,
        off_color: Optional[str] = None,
        on_color: Optional[str] = None
    ) -> bool:
        """Recolor every shape the actor owns; shapes always share one color pair."""
        def edit(actor: Actor):
            for shape in actor.shapes:
                if off_color is not None:
                    shape.off_color = off_color
                if on_color is not None:
                    shape.on_color = on_color

        return self._edit_actor(actor_id, "update_actor_shape_colors", edit)

    # === Keyframe actions ===

    def add_keyframe(self, actor_id: str, keyframe: KeyFrame) -> bool:
        """Insert a keyframe, replacing any keyframe at exactly the same time."""
        kf = KeyFrame(time=max(0.0, keyframe.time), value=_clamp(keyframe.value, 0.0, 1.0))

        def edit(actor: Actor):
            kept = [k for k in actor.keyframes if k.time != kf.time]
            kept.append(kf)
            actor.keyframes = sorted(kept, key=lambda k: k.time)

        return self._edit_actor(actor_id, "add_keyframe", edit)

    def remove_keyframe(self, actor_id: str, time: float) -> bool:
        def edit(actor: Actor):
            actor.keyframes = [k for k in actor.keyframes if k.time != time]

        return self._edit_actor(actor_id, "remove_keyframe", edit)

    def update_keyframe(self, actor_id: str, time: float, value: float) -> bool:
        """Set the value of the keyframe at exactly ``time``, if there is one."""
        value = _clamp(value, 0.0, 1.0)

        def edit(actor: Actor):
            kf = actor.keyframe_at(time)
            if kf is not None:
                kf.value = value

        return self._edit_actor(actor_id, "update_keyframe", edit)

    def move_keyframe(self, actor_id: str, from_time: float, to_time: float) -> bool:
        """
        Move a keyframe to a new time, keeping its value.

        The target time is clamped to the audio duration when audio is
        loaded. A keyframe already at the target time is replaced.
        """
        to_time = max(0.0, to_time)
        if self.playback.duration > 0:
            to_time = min(to_time, self.playback.duration)

        def edit(actor: Actor):
            kf = actor.keyframe_at(from_time)
            if kf is None:
                return
            kept = [k for k in actor.keyframes if k.time not in (from_time, to_time)]
            kept.append(KeyFrame(time=to_time, value=kf.value))
            actor.keyframes = sorted(kept, key=lambda k: k.time)

        return self._edit_actor(actor_id, "move_keyframe", edit)

    def toggle_keyframe(self, actor_id: str, time: float) -> Optional[float]:
        """
        Add a keyframe that flips the actor's state at ``time``.

        The new value is 0 if the actor is currently mostly on (> 0.5),
        otherwise 1. Returns the value written, or None for an unknown actor.
        """
        actor = self._state.find_actor(actor_id)
        if actor is None:
            return None
        new_value = 0.0 if value_at(actor, time) > 0.5 else 1.0
        self.add_keyframe(actor_id, KeyFrame(time=time, value=new_value))
        return new_value

    # === Background actions ===

    def add_background(self, image_data: str, width: float, height: float) -> str:
        """
        Add a background image on top of the existing ones. Returns its id.

        The canvas grows to fit the image in each dimension; it never shrinks.
        """
        draft = self._state.copy()
        max_z = max([0] + [bg.z_index for bg in draft.backgrounds])
        bg = CanvasBackground(
            id=new_id(),
            image_data=image_data,
            width=width,
            height=height,
            z_index=max_z + 1
        )
        draft.backgrounds.append(bg)

        size = draft.project.canvas_size
        size.width = max(size.width, width)
        size.height = max(size.height, height)

        self._commit(draft, "add_background")
        logger.info(f"Added background {bg.id} ({width}x{height}, z={bg.z_index})")
        return bg.id

    def remove_background(self, background_id: str) -> bool:
        if self.ui.selected_background_id == background_id:
            self.ui.selected_background_id = None
        draft = self._state.copy()
        draft.backgrounds = [b for b in draft.backgrounds if b.id != background_id]
        return self._commit(draft, "remove_background")

    def update_background(self, background_id: str, **updates) -> bool:
        """Merge position, size, z_index or image_data into a background."""
        draft = self._state.copy()
        bg = draft.find_background(background_id)
        if bg is None:
            logger.debug(f"update_background: no background {background_id}")
            return False
        for key, value in updates.items():
            if key not in _BACKGROUND_FIELDS:
                logger.warning(f"Ignoring unknown background field: {key}")
                continue
            setattr(bg, key, value)
        return self._commit(draft, "update_background")

    # === Undo / redo ===

    def undo(self) -> bool:
        state = self._history.undo()
        if state is None:
            return False
        self._state = state
        self._revalidate_selection()
        logger.debug("undo")
        self._notify()
        return True

    def redo(self) -> bool:
        state = self._history.redo()
        if state is None:
            return False
        self._state = state
        self._revalidate_selection()
        logger.debug("redo")
        self._notify()
        return True

    # === Playback (untracked) ===

    def set_playback(self, **updates):
        for key, value in updates.items():
            if key in _PLAYBACK_FIELDS:
                setattr(self.playback, key, value)
            else:
                logger.warning(f"Ignoring unknown playback field: {key}")

    def play(self):
        self.playback.is_playing = True

    def pause(self):
        self.playback.is_playing = False

    def seek(self, time: float):
        self.playback.current_time = _clamp(time, 0.0, self.playback.duration)

    def set_audio(self, filename: str, duration: float):
        """Record the loaded audio track. Decoding happens elsewhere."""
        self.audio_filename = filename
        self.playback.duration = max(0.0, duration)
        self.playback.current_time = _clamp(self.playback.current_time, 0.0, self.playback.duration)
        logger.info(f"Audio loaded: {filename} ({self.playback.duration:.2f}s)")

    def clear_audio(self):
        self.audio_filename = None
        self.playback = PlaybackState()

    # === UI (untracked) ===

    def select_actor(self, actor_id: Optional[str]):
        """Select an actor (or nothing). Selecting an actor deselects any background."""
        if actor_id is not None and self._state.find_actor(actor_id) is None:
            actor_id = None
        self.ui.selected_actor_id = actor_id
        self.ui.selected_background_id = None

    def select_background(self, background_id: Optional[str]):
        if background_id is not None and self._state.find_background(background_id) is None:
            background_id = None
        self.ui.selected_background_id = background_id
        self.ui.selected_actor_id = None

    def set_tool(self, tool: Tool):
        self.ui.tool = Tool(tool)

    def set_zoom(self, zoom: float):
        self.ui.zoom = _clamp(zoom, MIN_ZOOM, MAX_ZOOM)

    def set_background_opacity(self, opacity: float):
        self.ui.background_opacity = _clamp(opacity, 0.0, 1.0)

    # === Queries ===

    def get_actor(self, actor_id: str) -> Optional[Actor]:
        return self._state.find_actor(actor_id)

    def selected_actor(self) -> Optional[Actor]:
        if self.ui.selected_actor_id is None:
            return None
        return self._state.find_actor(self.ui.selected_actor_id)

    def actor_at_point(self, x: float, y: float) -> Optional[str]:
        return geometry.hit_test(self._state.actors, x, y)

    def background_at_point(self, x: float, y: float) -> Optional[str]:
        return geometry.background_at(self._state.backgrounds, x, y)

    def value_at(self, actor_id: str, time: Optional[float] = None) -> float:
        """State of an actor at ``time`` (default: the playhead). Unknown actors read 0."""
        actor = self._state.find_actor(actor_id)
        if actor is None:
            return 0.0
        return value_at(actor, self.playback.current_time if time is None else time)
