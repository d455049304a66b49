"""Tests for configure_logging and the JSON line formatter."""

from __future__ import annotations

import json
import logging

import pytest

from meal_plan_organizer.config import LoggingConfig
from meal_plan_organizer.utils.logging import JsonFormatter, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers = handlers
    root.setLevel(level)


class TestJsonFormatter:
    def test_fields(self):
        record = logging.makeLogRecord(
            {"name": "meal_plan_organizer.test", "levelname": "INFO", "msg": "hello %s", "args": ("world",)}
        )
        payload = json.loads(JsonFormatter().format(record))
        assert payload["msg"] == "hello world"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "meal_plan_organizer.test"
        assert payload["ts"].endswith("Z")

    def test_extra_fields_included(self):
        record = logging.makeLogRecord({"msg": "x", "run_slug": "abc"})
        assert json.loads(JsonFormatter().format(record))["run_slug"] == "abc"


class TestConfigureLogging:
    def test_sets_level(self):
        configure_logging(LoggingConfig(level="WARNING", log_file=""))
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_created(self, tmp_path):
        log_file = tmp_path / "logs" / "app.log"
        configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))
        logging.getLogger("meal_plan_organizer.test").info("written")
        for h in logging.getLogger().handlers:
            h.flush()
        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["msg"] == "written"
