"""
Lifecycle manager: the pod's startup/shutdown state machine.

``run`` goes config -> probe server -> startup hook -> READY. Every failure on
that path, every termination signal and every unhandled failure ends in
``exit``, which runs at most once per process.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pod_lifecycle.app.hooks import Hook, HookInvoker, call_hook, noop_hook
from pod_lifecycle.app.probe_server import ProbeServer
from pod_lifecycle.app.signals import SignalBridge
from pod_lifecycle.config.document import load_config_document
from pod_lifecycle.config.settings import (
    DEFAULT_MAX_SHUTDOWN_MS,
    DEFAULT_MAX_STARTUP_MS,
    LifecycleSettings,
    get_settings,
)
from pod_lifecycle.domain.errors import LifecycleStateError, ProbeServerBindError
from pod_lifecycle.domain.identity import derive_ordinal
from pod_lifecycle.domain.models import (
    ExitReason,
    LifecycleState,
    ProbeContext,
    ShutdownContext,
    StartupContext,
    is_failure,
)
from pod_lifecycle.observability.logging import get_logger


class LifecycleManager:
    """
    Orchestrates one containerized process around user hooks.

    Hooks are registered with ``on_startup``/``on_shutdown``/``on_probe`` before
    ``run``; each receives a context carrying the parsed config document and
    the shared ``locals`` dict.

    Example:
        >>> app = LifecycleManager(config_path="config.yaml")
        >>> app.on_startup(connect_db).on_shutdown(close_db).on_probe(ping_db)
        >>> exit_code = asyncio.run(app.serve())
    """

    def __init__(
        self,
        settings: LifecycleSettings | None = None,
        *,
        config_path: str | Path | None = None,
        probe_server_host: str | None = None,
        probe_server_port: int | None = None,
        max_startup_ms: int | None = None,
        max_shutdown_ms: int | None = None,
        pod_name: str | None = None,
        logger: logging.Logger | None = None,
        hard_exit: Callable[[int], Any] | None = None,
    ):
        self.settings = settings or get_settings()
        self.logger = logger or get_logger(__name__)

        self.config_path = config_path if config_path is not None else self.settings.config_path
        self.max_startup_ms = max_startup_ms or self.settings.max_startup_ms or DEFAULT_MAX_STARTUP_MS
        self.max_shutdown_ms = max_shutdown_ms or self.settings.max_shutdown_ms or DEFAULT_MAX_SHUTDOWN_MS
        self.pod_name = pod_name if pod_name is not None else self.settings.pod_name
        self.ordinal = derive_ordinal(self.pod_name)

        self.config: dict[str, Any] = {}
        self.locals: dict[str, Any] = {}

        self.exit_code = 0
        self.exit_reason: ExitReason = None

        self._state = LifecycleState.STARTING
        self._run_started = False
        self._is_exiting = False
        self._exited = asyncio.Event()
        self._hard_exit = hard_exit or os._exit

        self._startup_hook: Hook = noop_hook
        self._shutdown_hook: Hook = noop_hook
        self._probe_hook: Hook = noop_hook

        self.hook_invoker = HookInvoker(
            DEFAULT_MAX_STARTUP_MS,
            phase_timeouts_ms={"startup": DEFAULT_MAX_STARTUP_MS, "shutdown": DEFAULT_MAX_SHUTDOWN_MS},
            logger=self.logger,
        )
        self.signal_bridge = SignalBridge(logger=self.logger)
        self.probe_server = ProbeServer(
            state=lambda: self._state,
            is_exiting=lambda: self._is_exiting,
            check=self._check_probe,
            host=probe_server_host if probe_server_host is not None else self.settings.probe_server_host,
            port=probe_server_port if probe_server_port is not None else self.settings.probe_server_port,
            logger=self.logger,
        )

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_exiting(self) -> bool:
        return self._is_exiting

    @property
    def is_ready(self) -> bool:
        return self._state is LifecycleState.READY and not self._is_exiting

    # -------------------------------------------------------------------------
    # Hook registration
    # -------------------------------------------------------------------------

    def on_startup(self, hook: Hook) -> LifecycleManager:
        self._ensure_not_started("on_startup")
        self._startup_hook = hook
        return self

    def on_shutdown(self, hook: Hook) -> LifecycleManager:
        self._ensure_not_started("on_shutdown")
        self._shutdown_hook = hook
        return self

    def on_probe(self, hook: Hook) -> LifecycleManager:
        self._ensure_not_started("on_probe")
        self._probe_hook = hook
        return self

    def _ensure_not_started(self, operation: str) -> None:
        if self._run_started:
            raise LifecycleStateError(
                f"{operation} must be called before run()",
                details={"state": self._state.value},
            )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def run(self) -> None:
        """
        Start the app. Never raises: any failure is handed to ``exit``.

        On return the app is either READY or has completed its exit sequence.
        If exit is triggered while starting, the remaining startup steps are
        skipped and a pending startup hook is abandoned once exit completes.
        """
        if self._run_started:
            self.logger.warning("Lifecycle manager already running")
            return
        self._run_started = True

        try:
            self.signal_bridge.subscribe(self.exit)

            self.config = await load_config_document(self.config_path, logger=self.logger)
            if self._is_exiting:
                await self._abort_startup()
                return

            try:
                await self.probe_server.start()
            except ProbeServerBindError as e:
                self.logger.error(
                    f"Probe server port {e.port} is unavailable. "
                    "Set PROBE_SERVER_PORT (or pass probe_server_port) to use a different port."
                )
                raise
            # exit() may have run while the listener was binding.
            if self._is_exiting:
                await self._abort_startup()
                return

            outcome = await self.hook_invoker.invoke(
                self._startup_hook,
                StartupContext(**self._context_fields(), exit_handler=self.exit),
                self.max_startup_ms,
                phase="startup",
                abort=self._exited,
            )
            if self._is_exiting:
                await self._abort_startup()
                return
            if not outcome.ok:
                await self.exit(outcome.error)
                return

            self._transition(LifecycleState.READY)

        except Exception as e:
            await self.exit(e)

    async def _abort_startup(self) -> None:
        """Exit began mid-startup: drop anything bound since and wait for exit to finish."""
        self.logger.info("[LIFECYCLE] Startup abandoned, app is exiting")
        await self.probe_server.stop()
        await self.wait_exited()

    async def exit(self, reason: ExitReason = None) -> None:
        """
        Shut the app down once. Later calls return immediately.

        A failed or timed-out shutdown hook is logged and makes the exit code 1.
        An error in the shutdown sequence itself hard-terminates the process.
        """
        try:
            if self._is_exiting:
                return

            self._is_exiting = True
            self.signal_bridge.unsubscribe()
            self._transition(LifecycleState.EXITING)

            self.exit_reason = reason
            if is_failure(reason):
                self.exit_code = 1
                self.logger.error(f"Exiting on {reason!r}", exc_info=reason)
            else:
                self.logger.info(f"[LIFECYCLE] Exiting on {reason or 'request'}")

            await self.probe_server.stop()

            outcome = await self.hook_invoker.invoke(
                self._shutdown_hook,
                ShutdownContext(**self._context_fields(), error=reason),
                self.max_shutdown_ms,
                phase="shutdown",
            )
            if not outcome.ok:
                self.exit_code = 1
                self.logger.error(f"Shutdown hook failed: {outcome.error!r}", exc_info=outcome.error)

            self._transition(LifecycleState.EXITED)
            self._exited.set()
            self.logger.info(f"[LIFECYCLE] Exited with status {self.exit_code}")

        except Exception as e:
            self.logger.critical(f"Error during shutdown: {e!r}", exc_info=e)
            self.exit_code = 1
            self._exited.set()
            self._hard_exit(1)

    async def wait_exited(self) -> None:
        """Block until the exit sequence has finished."""
        await self._exited.wait()

    async def serve(self) -> int:
        """Run, stay up until exit completes, and return the process exit code."""
        await self.run()
        await self.wait_exited()
        return self.exit_code

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _transition(self, target: LifecycleState) -> None:
        if not self._state.can_transition_to(target):
            raise LifecycleStateError(
                f"Illegal lifecycle transition {self._state.value} -> {target.value}",
                details={"state": self._state.value, "target": target.value},
            )
        self.logger.info(f"[LIFECYCLE] {self._state.value} -> {target.value}")
        self._state = target

    def _context_fields(self) -> dict[str, Any]:
        return {
            "config": self.config,
            "locals": self.locals,
            "pod_name": self.pod_name,
            "ordinal": self.ordinal,
        }

    async def _check_probe(self, probe_type: str) -> None:
        await call_hook(self._probe_hook, ProbeContext(**self._context_fields(), probe_type=probe_type))
