"""
Tests for log formatting and handler setup.

Run with: python -m pytest griswold/tests/test_logging_config.py -v
"""

import json
import logging

import pytest

from griswold.logging_config import JSONFormatter, configure_logging, use_json_logs


def make_record(**extra):
    record = logging.LogRecord("project_storage", logging.INFO, __file__, 1, "Saved %s", ("show",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture()
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(make_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "project_storage"
        assert entry["msg"] == "Saved show"

    def test_context_fields(self):
        entry = json.loads(JSONFormatter().format(make_record(project="Porch", cue_count=12, other=1)))
        assert entry["project"] == "Porch"
        assert entry["cue_count"] == 12
        assert "other" not in entry


class TestConfigureLogging:
    def test_env_selects_json(self, monkeypatch):
        monkeypatch.setenv("GRISWOLD_ENV", "production")
        assert use_json_logs()
        monkeypatch.setenv("GRISWOLD_ENV", "dev")
        assert not use_json_logs()

    def test_single_handler(self, restore_root):
        configure_logging(logging.DEBUG, json_logs=True)
        configure_logging(logging.DEBUG, json_logs=True)
        assert len(restore_root.handlers) == 1
        assert isinstance(restore_root.handlers[0].formatter, JSONFormatter)
        assert restore_root.level == logging.DEBUG
