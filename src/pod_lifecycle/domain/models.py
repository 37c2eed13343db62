"""
Lifecycle Domain Models.

State enum, hook contexts and hook outcomes shared by the manager, the hook
invoker and the probe server.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# ENUMS
# =============================================================================


class LifecycleState(str, Enum):
    """Orchestrator phase. Transitions only move forward."""

    STARTING = "STARTING"
    READY = "READY"
    EXITING = "EXITING"
    EXITED = "EXITED"

    def can_transition_to(self, target: LifecycleState) -> bool:
        """Check whether ``target`` is a legal next state."""
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.STARTING: frozenset({LifecycleState.READY, LifecycleState.EXITING}),
    LifecycleState.READY: frozenset({LifecycleState.EXITING}),
    LifecycleState.EXITING: frozenset({LifecycleState.EXITED}),
    LifecycleState.EXITED: frozenset(),
}


# A reason is None (clean exit), a signal name such as "SIGTERM" (clean exit)
# or an exception (failure).
ExitReason = BaseException | str | None

ExitHandler = Callable[[ExitReason], Awaitable[None]]


def is_failure(reason: ExitReason) -> bool:
    """Check whether an exit reason denotes an error."""
    return isinstance(reason, BaseException)


# =============================================================================
# HOOK CONTEXTS
# =============================================================================


@dataclass(frozen=True)
class HookContext:
    """
    Bundle passed to every hook.

    ``locals`` is the manager's own dict, shared by reference across all hook
    invocations for the lifetime of the process.
    """

    config: Mapping[str, Any]
    locals: dict[str, Any]
    pod_name: str = ""
    ordinal: int = 0


@dataclass(frozen=True)
class StartupContext(HookContext):
    """Startup hook context; ``exit_handler`` lets the hook trigger shutdown itself."""

    exit_handler: ExitHandler | None = None


@dataclass(frozen=True)
class ShutdownContext(HookContext):
    """Shutdown hook context; ``error`` is the reason exit was triggered."""

    error: ExitReason = None


@dataclass(frozen=True)
class ProbeContext(HookContext):
    """Probe hook context; ``probe_type`` is the request path token (e.g. ``readiness``)."""

    probe_type: str = ""


# =============================================================================
# HOOK OUTCOMES
# =============================================================================


@dataclass
class HookOutcome:
    """Result of a hook invocation: settled successfully or failed with ``error``."""

    error: BaseException | None = None
    duration_ms: float = field(default=0.0, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, duration_ms: float = 0.0) -> HookOutcome:
        return cls(error=None, duration_ms=duration_ms)

    @classmethod
    def failure(cls, error: BaseException, duration_ms: float = 0.0) -> HookOutcome:
        return cls(error=error, duration_ms=duration_ms)
