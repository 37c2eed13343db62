"""
Lifecycle orchestration for long-running containerized processes.

Typical use::

    from pod_lifecycle import create_app

    app = create_app(config_path="config.yaml")

    async def startup(ctx):
        ctx.locals["db"] = await connect(ctx.config["db_url"])

    async def probe(ctx):
        await ctx.locals["db"].ping()

    app.on_startup(startup).on_probe(probe)
"""

from __future__ import annotations

from typing import Any

from pod_lifecycle.app.manager import LifecycleManager
from pod_lifecycle.domain.models import (
    HookContext,
    LifecycleState,
    ProbeContext,
    ShutdownContext,
    StartupContext,
)

__version__ = "1.0.0"


def create_app(**options: Any) -> LifecycleManager:
    """Build a LifecycleManager; keyword options are passed to its constructor."""
    return LifecycleManager(**options)


__all__ = [
    "HookContext",
    "LifecycleManager",
    "LifecycleState",
    "ProbeContext",
    "ShutdownContext",
    "StartupContext",
    "create_app",
]
