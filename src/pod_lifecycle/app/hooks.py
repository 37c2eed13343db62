"""
Hook invocation with deadlines.

A hook is raced against a timer. Whichever settles first decides the outcome;
the loser is abandoned, not cancelled, so a slow hook may keep running in the
background after its phase has already been declared failed.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from pod_lifecycle.domain.errors import HookError, HookTimeoutError
from pod_lifecycle.domain.models import HookContext, HookOutcome
from pod_lifecycle.observability.logging import get_logger

Hook = Callable[[Any], Any]


async def noop_hook(ctx: HookContext) -> None:
    """Default hook for every slot: settles immediately with success."""
    return None


async def call_hook(hook: Hook, ctx: HookContext) -> Any:
    """Call ``hook`` and await its result if it returned an awaitable."""
    result = hook(ctx)
    if inspect.isawaitable(result):
        return await result
    return result


class HookInvoker:
    """
    Runs user hooks against a deadline and reports a HookOutcome.

    Abandoned hook tasks are kept referenced until they finish so that their
    late failures are logged here instead of surfacing as unhandled task
    exceptions on the event loop.
    """

    def __init__(
        self,
        default_timeout_ms: int,
        *,
        phase_timeouts_ms: Mapping[str, int] | None = None,
        logger: logging.Logger | None = None,
    ):
        self.default_timeout_ms = default_timeout_ms
        self.phase_timeouts_ms = dict(phase_timeouts_ms or {})
        self._logger = logger or get_logger(__name__)
        self._abandoned: set[asyncio.Task] = set()

    @property
    def abandoned_count(self) -> int:
        """Number of abandoned hooks still running in the background."""
        return len(self._abandoned)

    def timeout_for(self, phase: str) -> int:
        return self.phase_timeouts_ms.get(phase) or self.default_timeout_ms

    async def invoke(
        self,
        hook: Hook,
        ctx: HookContext,
        timeout_ms: int | None = None,
        *,
        phase: str,
        abort: asyncio.Event | None = None,
    ) -> HookOutcome:
        """
        Invoke ``hook(ctx)`` and race it against ``timeout_ms``.

        Args:
            hook: Sync or async callable taking the context.
            ctx: Context handed to the hook.
            timeout_ms: Deadline; None or 0 falls back to the phase default.
            phase: Phase name used in logs and timeout messages.
            abort: Optional event; once set the hook is abandoned early.

        Returns:
            HookOutcome with ``error`` set to the hook's exception, a
            HookTimeoutError, or a HookError when aborted.
        """
        limit_ms = timeout_ms or self.timeout_for(phase)
        started = time.monotonic()

        task = asyncio.ensure_future(call_hook(hook, ctx))
        waiters: set[asyncio.Future] = {task}
        abort_waiter = None
        if abort is not None:
            abort_waiter = asyncio.ensure_future(abort.wait())
            waiters.add(abort_waiter)

        try:
            done, _ = await asyncio.wait(waiters, timeout=limit_ms / 1000, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if abort_waiter is not None:
                abort_waiter.cancel()
        elapsed_ms = (time.monotonic() - started) * 1000

        if task not in done:
            self._abandon(task, phase)
            if abort_waiter is not None and abort_waiter in done:
                self._logger.debug(f"{phase} hook abandoned after {elapsed_ms:.0f}ms: aborted")
                error: HookError = HookError(f"{phase} hook abandoned: app is exiting", phase=phase)
            else:
                self._logger.debug(f"{phase} hook abandoned after {elapsed_ms:.0f}ms")
                error = HookTimeoutError(phase=phase, timeout_ms=limit_ms)
            return HookOutcome.failure(error, duration_ms=elapsed_ms)

        if task.cancelled():
            return HookOutcome.failure(asyncio.CancelledError(f"{phase} hook was cancelled"), duration_ms=elapsed_ms)

        exc = task.exception()
        if exc is not None:
            return HookOutcome.failure(exc, duration_ms=elapsed_ms)

        self._logger.debug(f"{phase} hook settled in {elapsed_ms:.0f}ms")
        return HookOutcome.success(duration_ms=elapsed_ms)

    def _abandon(self, task: asyncio.Task, phase: str) -> None:
        self._abandoned.add(task)
        task.add_done_callback(lambda t: self._handle_abandoned_done(t, phase))

    def _handle_abandoned_done(self, task: asyncio.Task, phase: str) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.debug(f"Abandoned {phase} hook failed after its deadline: {exc!r}")
        else:
            self._logger.debug(f"Abandoned {phase} hook completed after its deadline")
