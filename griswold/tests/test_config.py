"""
Tests for environment-driven settings and the objects built from them.

Run with: python -m pytest griswold/tests/test_config.py -v
"""

from griswold.config import Settings
from griswold.timeline.project_storage import Autosaver, ProjectStorage
from griswold.timeline.store import ProjectStore


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.history_limit == 100
        assert settings.default_tick_rate == 0.1
        assert settings.autosave_max_bytes == 4 * 1024 * 1024

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("GRISWOLD_HISTORY_LIMIT", "5")
        monkeypatch.setenv("GRISWOLD_AUTOSAVE_DELAY", "0.25")
        settings = Settings()
        assert settings.history_limit == 5
        assert settings.autosave_delay == 0.25

    def test_invalid_values_are_sanitised(self, monkeypatch):
        monkeypatch.setenv("GRISWOLD_MIN_TICK_RATE", "-1")
        monkeypatch.setenv("GRISWOLD_MAX_TICK_RATE", "0.0001")
        monkeypatch.setenv("GRISWOLD_HISTORY_LIMIT", "0")
        settings = Settings()
        assert settings.min_tick_rate == 0.001
        assert settings.max_tick_rate == 0.001
        assert settings.history_limit == 1


class TestFromSettings:
    def test_store_history_limit(self):
        store = ProjectStore.from_settings(Settings(history_limit=2))
        for i in range(4):
            store.add_actor(f"a{i}")
        assert store.undo() and store.undo()
        assert not store.undo()

    def test_storage_directory(self, tmp_path):
        storage = ProjectStorage.from_settings(Settings(storage_dir=tmp_path / "shows"))
        assert storage.storage_dir == tmp_path / "shows"
        assert storage.storage_dir.is_dir()

    def test_autosaver(self, tmp_path):
        settings = Settings(
            autosave_path=tmp_path / "auto.gris",
            autosave_delay=0.5,
            autosave_max_bytes=1024,
        )
        saver = Autosaver.from_settings(ProjectStore(), settings)
        assert saver.delay == 0.5
        assert saver.slot.max_bytes == 1024
        assert saver.slot.path == tmp_path / "auto.gris"
