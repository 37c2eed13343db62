"""
Signal and failure forwarding.

Routes SIGINT, SIGTERM, unhandled event-loop failures and uncaught thread
failures into a single exit handler. Everything installed by ``subscribe`` is
restored by ``unsubscribe``.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import threading
from typing import Any

from pod_lifecycle.domain.models import ExitHandler, ExitReason
from pod_lifecycle.observability.logging import get_logger

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalBridge:
    """
    Subscribes one handler per trigger source and forwards into ``exit_handler``.

    Signals forward their name (``"SIGTERM"``), which counts as a clean exit.
    Failures forward the exception itself.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or get_logger(__name__)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._exit_handler: ExitHandler | None = None
        self._subscribed = False

        self._installed_signals: list[signal.Signals] = []
        self._previous_signal_handlers: dict[signal.Signals, Any] = {}
        self._previous_exception_handler: Any = None
        self._previous_thread_hook: Any = None

        self._pending: set[asyncio.Task] = set()

    @property
    def is_subscribed(self) -> bool:
        return self._subscribed

    def subscribe(self, exit_handler: ExitHandler) -> None:
        """Install handlers on the running loop. Must be called from inside it."""
        if self._subscribed:
            self._logger.warning("Signal bridge already subscribed")
            return

        loop = asyncio.get_running_loop()
        self._loop = loop
        self._exit_handler = exit_handler

        for sig in TERMINATION_SIGNALS:
            try:
                if sys.platform == "win32":
                    # Windows: signal.signal runs in the main thread, outside the loop
                    self._previous_signal_handlers[sig] = signal.signal(sig, self._on_raw_signal)
                else:
                    loop.add_signal_handler(sig, self._on_signal, sig)
            except (ValueError, RuntimeError, NotImplementedError) as e:
                # e.g. loop not running in the main thread
                self._logger.warning(f"Cannot handle {sig.name} in this context: {e}")
                continue
            self._installed_signals.append(sig)

        self._previous_exception_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._on_loop_exception)

        self._previous_thread_hook = threading.excepthook
        threading.excepthook = self._on_thread_exception

        self._subscribed = True

    def unsubscribe(self) -> None:
        """Restore every handler replaced by ``subscribe``. Safe to call repeatedly."""
        if not self._subscribed:
            return
        self._subscribed = False

        loop = self._loop
        for sig in self._installed_signals:
            if sys.platform == "win32":
                signal.signal(sig, self._previous_signal_handlers.pop(sig, signal.SIG_DFL))
            elif loop is not None and not loop.is_closed():
                loop.remove_signal_handler(sig)
        self._installed_signals.clear()

        if loop is not None and not loop.is_closed():
            loop.set_exception_handler(self._previous_exception_handler)
        self._previous_exception_handler = None

        if threading.excepthook == self._on_thread_exception:
            threading.excepthook = self._previous_thread_hook
        self._previous_thread_hook = None

    # -------------------------------------------------------------------------
    # Trigger sources
    # -------------------------------------------------------------------------

    def _on_signal(self, sig: signal.Signals) -> None:
        self._logger.info(f"Received signal {sig.name}, initiating shutdown...")
        self._forward(sig.name)

    def _on_raw_signal(self, signum: int, frame: Any) -> None:
        # Do NOT log here: the handler may interrupt an active log write.
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._forward, signal.Signals(signum).name)

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        if exc is None:
            # Diagnostics without an exception (e.g. destroyed pending tasks) are not failures.
            if self._previous_exception_handler is not None:
                self._previous_exception_handler(loop, context)
            else:
                loop.default_exception_handler(context)
            return

        self._logger.error(f"Unhandled asynchronous failure: {context.get('message', exc)}", exc_info=exc)
        self._forward(exc)

    def _on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        exc = args.exc_value if args.exc_value is not None else args.exc_type()
        thread_name = args.thread.name if args.thread is not None else "unknown"
        self._logger.error(
            f"Uncaught failure in thread {thread_name}: {exc!r}",
            exc_info=(args.exc_type, exc, args.exc_traceback),
        )
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._forward, exc)

    def _forward(self, reason: ExitReason) -> None:
        if self._exit_handler is None or self._loop is None:
            return
        task = self._loop.create_task(self._exit_handler(reason))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
