"""
HTTP probe server.

Answers Kubernetes liveness/readiness probes. Every request is a probe; the
path after the leading ``/`` is the probe type token and is passed through to
the user check without validation. Responses have empty bodies: 200 when the
app is ready and the check passes, 500 otherwise.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web

from pod_lifecycle.config.settings import DEFAULT_PROBE_SERVER_PORT
from pod_lifecycle.domain.errors import AppExitingError, AppStartingError, ProbeRejectedError, ProbeServerBindError
from pod_lifecycle.domain.models import LifecycleState
from pod_lifecycle.observability.logging import get_logger

ProbeCheck = Callable[[str], Awaitable[Any]]

# aiohttp treats a shutdown timeout of 0 as "wait forever", so use a tiny window instead.
FORCE_CLOSE_AFTER_S = 0.05


class ProbeServer:
    """
    aiohttp listener whose answers depend on lifecycle state.

    ``stop`` does not drain keep-alive connections: in-flight handlers get
    FORCE_CLOSE_AFTER_S to finish, then they are cancelled and their sockets
    closed.
    """

    def __init__(
        self,
        *,
        state: Callable[[], LifecycleState],
        is_exiting: Callable[[], bool],
        check: ProbeCheck,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PROBE_SERVER_PORT,
        logger: logging.Logger | None = None,
    ):
        self.host = host
        self.requested_port = port
        self.port: int | None = None

        self._state = state
        self._is_exiting = is_exiting
        self._check = check
        self._logger = logger or get_logger(__name__)

        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/{probe_type:.*}", self.handle_probe)
        return app

    async def handle_probe(self, request: web.Request) -> web.Response:
        """Answer a single probe request."""
        probe_type = request.match_info.get("probe_type", "")

        try:
            state = self._state()
            if state is LifecycleState.STARTING:
                raise AppStartingError()
            if self._is_exiting() or state is not LifecycleState.READY:
                raise AppExitingError()

            await self._check(probe_type)

        except ProbeRejectedError as e:
            self._logger.warning(f"Probe failure ({probe_type or '/'}): {e}")
            return web.Response(status=500)
        except Exception as e:
            self._logger.error(f"Probe failure ({probe_type or '/'}): {e!r}", exc_info=e)
            return web.Response(status=500)

        self._logger.debug(f"[PROBE] {probe_type or '/'} ok")
        return web.Response(status=200)

    async def start(self) -> None:
        """Bind the listener. Raises ProbeServerBindError if the address is unavailable."""
        if self._runner is not None:
            self._logger.warning("Probe server already running")
            return

        runner = web.AppRunner(self._build_app(), access_log=None, shutdown_timeout=FORCE_CLOSE_AFTER_S)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.requested_port)

        try:
            await site.start()
        except OSError as e:
            # Release the runner so a failed bind leaves nothing half-open.
            try:
                await runner.cleanup()
            except Exception as cleanup_error:
                self._logger.warning(f"Error during cleanup after bind failure: {cleanup_error}")
            raise ProbeServerBindError(
                f"Probe server could not listen on {self.host}:{self.requested_port}: {e}",
                host=self.host,
                port=self.requested_port,
            ) from e

        self._runner = runner
        self._site = site
        addresses = runner.addresses
        self.port = addresses[0][1] if addresses else self.requested_port
        self._logger.info(f"Probe server listening on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Close the listener and drop open connections. Safe to call more than once."""
        runner = self._runner
        if runner is None:
            return

        self._runner = None
        self._site = None
        await runner.cleanup()
        self._logger.info("Probe server stopped")
