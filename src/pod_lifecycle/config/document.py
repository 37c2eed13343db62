"""
Config document loading.

The document is user-owned YAML; the lifecycle core never interprets it and
hands the parsed mapping to every hook as ``ctx.config``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import yaml

from pod_lifecycle.domain.errors import ConfigLoadError
from pod_lifecycle.observability.logging import get_logger

_logger = get_logger(__name__)


def read_config_document(path: str | Path) -> dict[str, Any]:
    """Read and parse a YAML document. Raises ConfigLoadError on any failure."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigLoadError(f"Cannot read config file {path}: {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Malformed config file {path}: {e}", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"Config file {path} must contain a mapping at the top level, got {type(data).__name__}",
            path=str(path),
        )
    return data


async def load_config_document(
    path: str | Path | None,
    *,
    logger: logging.Logger | None = None,
) -> dict[str, Any]:
    """Load the config document off the event loop; no path means an empty mapping."""
    if not path:
        (logger or _logger).info("No config yaml specified")
        return {}

    return await asyncio.to_thread(read_config_document, path)
