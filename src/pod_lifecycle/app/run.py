"""
Entry points for CLI commands.

Each command sets up the environment and runs the appropriate logic.
"""

from __future__ import annotations

import importlib
from pathlib import Path

# Load .env file BEFORE importing settings
from dotenv import load_dotenv

_cwd_env = Path.cwd() / ".env"
if _cwd_env.exists():
    load_dotenv(_cwd_env)
else:
    load_dotenv()

from pod_lifecycle.app.manager import LifecycleManager  # noqa: E402
from pod_lifecycle.config.settings import get_settings  # noqa: E402
from pod_lifecycle.observability.logging import get_logger, setup_logging  # noqa: E402


def load_manager(target: str) -> LifecycleManager:
    """
    Resolve ``module:attr`` to a LifecycleManager.

    ``attr`` may be a manager instance or a zero-argument factory returning one.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"App target must look like 'package.module:attr', got {target!r}")

    module = importlib.import_module(module_name)
    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise ValueError(f"Module {module_name!r} has no attribute {attr!r}") from e

    if not isinstance(obj, LifecycleManager) and callable(obj):
        obj = obj()

    if not isinstance(obj, LifecycleManager):
        raise ValueError(f"{target!r} did not resolve to a LifecycleManager (got {type(obj).__name__})")
    return obj


async def run_app(
    target: str,
    *,
    config_path: str | None = None,
    port: int | None = None,
) -> int:
    """
    Run a user app until it exits.

    Args:
        target: ``module:attr`` of the LifecycleManager (or factory).
        config_path: Override the config document path.
        port: Override the probe server port.

    Returns:
        The manager's exit code: 0 on clean shutdown, 1 on failure.
    """
    manager = load_manager(target)

    setup_logging(get_settings())
    logger = get_logger(__name__)

    if config_path is not None:
        manager.config_path = config_path
    if port is not None:
        manager.probe_server.requested_port = port

    logger.info(
        f"[LIFECYCLE] Starting {target} | pod={manager.pod_name or '-'} ordinal={manager.ordinal} "
        f"| probe_port={manager.probe_server.requested_port} "
        f"| max_startup_ms={manager.max_startup_ms} max_shutdown_ms={manager.max_shutdown_ms}"
    )

    return await manager.serve()


def run_check() -> int:
    """Print the resolved settings."""
    settings = get_settings()
    for key, value in settings.summary().items():
        print(f"{key}: {value}")
    return 0
