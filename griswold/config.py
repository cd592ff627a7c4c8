"""Griswold configuration via pydantic-settings."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    All variables are prefixed with ``GRISWOLD_`` (e.g. ``GRISWOLD_HISTORY_LIMIT``).
    """

    # Storage
    storage_dir: Path = Path("projects")
    autosave_path: Path = Path("projects") / "griswold-autosave.gris"

    # Autosave (debounced, fire-and-forget)
    autosave_delay: float = 1.0  # seconds
    autosave_max_bytes: int = 4 * 1024 * 1024

    # Undo/redo depth
    history_limit: int = 100

    # Cue export
    default_tick_rate: float = 0.1  # seconds
    min_tick_rate: float = 0.001
    max_tick_rate: float = 1.0

    model_config = SettingsConfigDict(
        env_prefix="GRISWOLD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def model_post_init(self, __context: object) -> None:
        """Keep the tick-rate range and history limit usable."""
        if self.min_tick_rate <= 0:
            _logger.warning(
                f"GRISWOLD_MIN_TICK_RATE must be positive, got {self.min_tick_rate}; using 0.001"
            )
            self.min_tick_rate = 0.001
        if self.max_tick_rate < self.min_tick_rate:
            _logger.warning(
                "GRISWOLD_MAX_TICK_RATE below GRISWOLD_MIN_TICK_RATE; using the minimum"
            )
            self.max_tick_rate = self.min_tick_rate
        if self.history_limit < 1:
            _logger.warning(f"GRISWOLD_HISTORY_LIMIT must be >= 1, got {self.history_limit}; using 1")
            self.history_limit = 1


@lru_cache
def get_settings() -> Settings:
    return Settings()
