"""
Project Storage for Griswold.
Handles saving and loading ``.gris`` project files, cue exports, and the
debounced autosave slot.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..errors import ProjectLoadError
from .cue_sampler import cue_export_filename, cues_to_json
from .migration import load_gris
from .models import ExportedCue, GrisFile

logger = logging.getLogger('project_storage')

PROJECT_SUFFIX = ".gris"
AUTOSAVE_MAX_BYTES = 4 * 1024 * 1024
AUTOSAVE_DELAY = 1.0  # seconds


def read_project_text(path: Path) -> str:
    """
    Read a project file as UTF-8 text.

    Raises:
        ProjectLoadError: the file is missing, unreadable or not UTF-8
    """
    try:
        return Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ProjectLoadError(f"Cannot read project file {path}: {e}") from e


def safe_filename(name: str, fallback: str = "project") -> str:
    """Replace anything but letters, digits, ``-``, ``_`` and spaces."""
    safe = "".join(c if c.isalnum() or c in "-_ " else "_" for c in name).strip()
    return safe or fallback


class ProjectStorage:
    """
    Manages project files in a directory.
    """

    def __init__(self, storage_dir: Optional[str] = None):
        """
        Initialize project storage.

        Args:
            storage_dir: Directory for project files. Defaults to 'projects/'
                in the current working directory.
        """
        self.storage_dir = Path(storage_dir) if storage_dir else Path.cwd() / "projects"
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Project storage directory: {self.storage_dir}")

    @classmethod
    def from_settings(cls, settings) -> 'ProjectStorage':
        return cls(str(settings.storage_dir))

    def path_for(self, name: str) -> Path:
        return self.storage_dir / f"{safe_filename(name)}{PROJECT_SUFFIX}"

    def save(self, gris_file: GrisFile, name: Optional[str] = None) -> str:
        """
        Save a project file.

        Args:
            gris_file: Project to save
            name: File name without suffix. Defaults to the project name.

        Returns:
            Path to saved file
        """
        filepath = self.path_for(name or gris_file.project.name)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(gris_file.to_json(indent=2))

        logger.info(f"Saved project: {filepath}", extra={"project": gris_file.project.name, "path": str(filepath)})
        return str(filepath)

    def load(self, filepath: str) -> GrisFile:
        """
        Load, migrate and validate a project file.

        Raises:
            ProjectLoadError: the file is missing, unreadable or invalid
        """
        path = Path(filepath)
        return load_gris(read_project_text(path), origin=str(path))

    def load_by_name(self, name: str) -> GrisFile:
        return self.load(str(self.path_for(name)))

    def list_projects(self) -> List[Dict[str, Any]]:
        """
        List all readable projects, newest first.

        Returns:
            List of summaries (name, actors, version, modified_at, filepath)
        """
        projects = []
        for filepath in self.storage_dir.glob(f"*{PROJECT_SUFFIX}"):
            try:
                gris = self.load(str(filepath))
            except ProjectLoadError as e:
                logger.warning(f"Skipping unreadable project {filepath}: {e}")
                continue
            projects.append({
                "name": gris.project.name,
                "actors": len(gris.actors),
                "version": gris.version,
                "modified_at": filepath.stat().st_mtime,
                "filepath": str(filepath)
            })

        projects.sort(key=lambda p: p["modified_at"], reverse=True)
        return projects

    def delete(self, name: str) -> bool:
        """
        Delete a project by name.

        Returns:
            True if deleted, False if not found
        """
        filepath = self.path_for(name)
        if not filepath.exists():
            logger.warning(f"Project not found for deletion: {name}")
            return False
        filepath.unlink()
        logger.info(f"Deleted project: {filepath}")
        return True

    def export_cues(self, cues: Sequence[ExportedCue], project_name: str) -> str:
        """Write a cue list next to the projects. Returns the file path."""
        filepath = self.storage_dir / cue_export_filename(safe_filename(project_name))
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(cues_to_json(cues, indent=2))
        logger.info(
            f"Exported {len(cues)} cues: {filepath}",
            extra={"project": project_name, "path": str(filepath), "cue_count": len(cues)}
        )
        return str(filepath)


class AutosaveSlot:
    """
    A single named blob holding the latest autosaved project JSON.

    Each write replaces the previous one. Payloads over ``max_bytes`` are
    skipped rather than written.
    """

    def __init__(self, path: str, max_bytes: int = AUTOSAVE_MAX_BYTES):
        self.path = Path(path)
        self.max_bytes = max_bytes

    def write(self, payload: str) -> bool:
        size = len(payload.encode('utf-8'))
        if size > self.max_bytes:
            logger.warning(
                f"Project too large for autosave ({size} bytes > {self.max_bytes}), skipping"
            )
            return False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(payload, encoding='utf-8')
        tmp.replace(self.path)
        logger.debug(f"Autosaved {size} bytes to {self.path}", extra={"path": str(self.path), "bytes": size})
        return True

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding='utf-8')

    def restore(self) -> Optional[GrisFile]:
        """Load the autosaved project, or None if the slot is empty or unreadable."""
        if not self.path.exists():
            return None
        try:
            return load_gris(read_project_text(self.path), origin="autosave")
        except ProjectLoadError as e:
            logger.error(f"Autosave slot is unreadable: {e}")
            return None

    def clear(self):
        if self.path.exists():
            self.path.unlink()


class Autosaver:
    """
    Debounced, fire-and-forget autosave for a ProjectStore.

    Every store change cancels the pending save and schedules a new one
    ``delay`` seconds out, so a burst of edits produces a single write.
    Store actions never wait on it, and a failed save is only logged.
    """

    def __init__(self, store, slot: AutosaveSlot, delay: float = AUTOSAVE_DELAY):
        self.store = store
        self.slot = slot
        self.delay = delay
        self.last_saved_at: Optional[float] = None

        self._save_task: Optional[asyncio.Task] = None
        self._unsubscribe = store.subscribe(self._on_change)

    @classmethod
    def from_settings(cls, store, settings) -> 'Autosaver':
        slot = AutosaveSlot(str(settings.autosave_path), max_bytes=settings.autosave_max_bytes)
        return cls(store, slot, delay=settings.autosave_delay)

    def _on_change(self, store):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (scripts, CLI): write straight away
            self.flush()
            return

        if self._save_task and not self._save_task.done():
            self._save_task.cancel()
            logger.debug("Cancelled previous pending autosave")

        self._save_task = loop.create_task(self._debounced_save())
        logger.debug(f"Queued autosave (debounce: {self.delay * 1000:.0f}ms)")

    async def _debounced_save(self):
        await asyncio.sleep(self.delay)
        self.flush()

    @property
    def pending(self) -> bool:
        return self._save_task is not None and not self._save_task.done()

    def flush(self) -> bool:
        """Write the current project now. Failures are logged, never raised."""
        try:
            saved = self.slot.write(self.store.to_file().to_json(indent=None))
        except Exception as e:
            logger.error(f"Autosave failed: {e}")
            return False
        if saved:
            self.last_saved_at = time.time()
        return saved

    def close(self):
        """Stop listening and drop any pending save."""
        self._unsubscribe()
        if self._save_task and not self._save_task.done():
            self._save_task.cancel()
        self._save_task = None
