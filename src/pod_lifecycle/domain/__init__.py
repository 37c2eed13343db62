"""Domain layer: lifecycle states, hook contexts, errors and identity helpers."""

from pod_lifecycle.domain.errors import (
    AppExitingError,
    AppStartingError,
    ConfigLoadError,
    HookError,
    HookTimeoutError,
    LifecycleError,
    LifecycleStateError,
    ProbeRejectedError,
    ProbeServerBindError,
)
from pod_lifecycle.domain.identity import derive_ordinal
from pod_lifecycle.domain.models import (
    ExitReason,
    HookContext,
    HookOutcome,
    LifecycleState,
    ProbeContext,
    ShutdownContext,
    StartupContext,
    is_failure,
)

__all__ = [
    "AppExitingError",
    "AppStartingError",
    "ConfigLoadError",
    "ExitReason",
    "HookContext",
    "HookError",
    "HookOutcome",
    "HookTimeoutError",
    "LifecycleError",
    "LifecycleState",
    "LifecycleStateError",
    "ProbeContext",
    "ProbeRejectedError",
    "ProbeServerBindError",
    "ShutdownContext",
    "StartupContext",
    "derive_ordinal",
    "is_failure",
]
