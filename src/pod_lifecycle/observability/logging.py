"""
Structured logging setup.

Provides colored console logging and optional JSON lines output.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pod_lifecycle.config.settings import LifecycleSettings

# =============================================================================
# Constants
# =============================================================================

# Log tags for special message handling
LOG_TAG_PROBE = "[PROBE]"
LOG_TAG_LIFECYCLE = "[LIFECYCLE]"

__all__ = [
    "setup_logging",
    "get_logger",
    "JSONFormatter",
    "LifecycleLogFormatter",
    "LOG_TAG_PROBE",
    "LOG_TAG_LIFECYCLE",
]


class _JSONDefaultEncoder(json.JSONEncoder):
    """JSON encoder for enums, datetimes and arbitrary objects."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, BaseException):
            return repr(obj)
        return str(obj)


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        for key in ["state", "phase", "probe_type", "pod_name", "error_code"]:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data, cls=_JSONDefaultEncoder)


def setup_logging(settings: LifecycleSettings | None = None) -> logging.Logger:
    """
    Set up logging with a console handler and an optional JSON file handler.

    Returns the root logger.
    """
    if settings is None:
        from pod_lifecycle.config.settings import get_settings

        settings = get_settings()

    level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Probe servers run in containers; stderr is what the kubelet collects.
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(LifecycleLogFormatter())
    root_logger.addHandler(console_handler)

    if settings.logging.json_enabled:
        json_path = Path(settings.logging.json_file)
        json_path.parent.mkdir(parents=True, exist_ok=True)

        json_handler = logging.FileHandler(json_path, encoding="utf-8")
        json_handler.setLevel(level)
        json_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(json_handler)

    # Reduce noise from verbose libraries
    for lib in ["asyncio", "aiohttp.access", "aiohttp.server"]:
        logging.getLogger(lib).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger."""
    return logging.getLogger(name)


class LifecycleLogFormatter(logging.Formatter):
    """
    Console formatter with colors and simplified structure.

    Levels:
    - INFO: Green
    - WARNING: Yellow
    - ERROR: Red
    - CRITICAL: Bold Red

    Special tags:
    - [LIFECYCLE]: Cyan
    - [PROBE]: Grey (dimmed)
    """

    RESET = "\033[0m"
    GREY = "\033[90m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BOLD_RED = "\033[1;91m"
    CYAN = "\033[96m"

    def __init__(self):
        super().__init__(datefmt="%H:%M:%S")
        self._formatters: dict[str, logging.Formatter] = {
            "DEBUG": logging.Formatter(f"{self.GREY}%(asctime)s [DEBUG] %(message)s{self.RESET}", datefmt="%H:%M:%S"),
            "INFO": logging.Formatter(f"{self.GREEN}%(asctime)s [INFO]{self.RESET} %(message)s", datefmt="%H:%M:%S"),
            "WARNING": logging.Formatter(
                f"{self.YELLOW}%(asctime)s [WARN] %(message)s{self.RESET}", datefmt="%H:%M:%S"
            ),
            "ERROR": logging.Formatter(f"{self.RED}%(asctime)s [ERROR] %(message)s{self.RESET}", datefmt="%H:%M:%S"),
            "CRITICAL": logging.Formatter(
                f"{self.BOLD_RED}%(asctime)s [CRITICAL] %(message)s{self.RESET}", datefmt="%H:%M:%S"
            ),
            "LIFECYCLE": logging.Formatter(
                f"{self.CYAN}%(asctime)s [LIFECYCLE]{self.RESET} %(message)s", datefmt="%H:%M:%S"
            ),
            "PROBE": logging.Formatter(f"{self.GREY}%(asctime)s [PROBE]{self.RESET} %(message)s", datefmt="%H:%M:%S"),
        }

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()

        # Tagged messages below WARNING get the tag color; failures keep level colors.
        # The record is shared with other handlers; strip the tag on a copy.
        if record.levelno < logging.WARNING:
            for tag, key in ((LOG_TAG_LIFECYCLE, "LIFECYCLE"), (LOG_TAG_PROBE, "PROBE")):
                if tag in msg:
                    tagged = logging.makeLogRecord(record.__dict__)
                    tagged.msg = msg.replace(tag, "").strip()
                    tagged.args = ()
                    return self._formatters[key].format(tagged)

        formatter_key = record.levelname if record.levelname in self._formatters else "INFO"
        return self._formatters[formatter_key].format(record)
