"""
Unit tests for logging formatters and setup.
"""

import json
import logging
import sys

import pytest

from pod_lifecycle.config.settings import LifecycleSettings, LoggingSettings
from pod_lifecycle.domain.models import LifecycleState
from pod_lifecycle.observability.logging import JSONFormatter, LifecycleLogFormatter, setup_logging


def _record(msg, level=logging.INFO, **extra):
    record = logging.LogRecord("pod_lifecycle.test", level, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extras():
    line = JSONFormatter().format(_record("probe failed", level=logging.ERROR, state=LifecycleState.READY))
    data = json.loads(line)

    assert data["level"] == "ERROR"
    assert data["message"] == "probe failed"
    assert data["state"] == "READY"


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    data = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in data["exception"]


def test_console_formatter_strips_lifecycle_tag():
    out = LifecycleLogFormatter().format(_record("[LIFECYCLE] STARTING -> READY"))
    assert "[LIFECYCLE]" in out
    assert "[LIFECYCLE] [LIFECYCLE]" not in out
    assert out.endswith("STARTING -> READY")


def test_console_formatter_leaves_record_intact_for_other_handlers():
    record = _record("[LIFECYCLE] %s -> %s")
    record.args = ("STARTING", "READY")

    LifecycleLogFormatter().format(record)
    data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "[LIFECYCLE] STARTING -> READY"
    assert record.args == ("STARTING", "READY")


def test_console_formatter_keeps_level_color_for_failures():
    out = LifecycleLogFormatter().format(_record("[PROBE] readiness failed", level=logging.ERROR))
    assert "[ERROR]" in out


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_with_json_file(tmp_path, restore_root_logger):
    json_file = tmp_path / "logs" / "lifecycle.jsonl"
    settings = LifecycleSettings(logging=LoggingSettings(level="DEBUG", json_enabled=True, json_file=str(json_file)))

    root = setup_logging(settings)
    logging.getLogger("pod_lifecycle.test").info("hello")
    for handler in root.handlers:
        handler.flush()

    assert root.level == logging.DEBUG
    assert json.loads(json_file.read_text(encoding="utf-8").splitlines()[-1])["message"] == "hello"
    assert logging.getLogger("aiohttp.access").level == logging.WARNING
