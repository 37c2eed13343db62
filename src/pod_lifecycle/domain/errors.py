"""
Lifecycle Error Taxonomy.

All orchestrator exceptions with clear categorization.
"""

from __future__ import annotations

from typing import Any


class LifecycleError(Exception):
    """
    Base class for all lifecycle errors.

    Includes structured error info for logging and debugging.
    """

    error_code: str = "LIFECYCLE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for logging."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class LifecycleStateError(LifecycleError):
    """Operation not allowed in the current lifecycle state."""

    error_code = "INVALID_STATE"


# =============================================================================
# Startup Errors
# =============================================================================


class ConfigLoadError(LifecycleError):
    """Config document unreadable or malformed."""

    error_code = "CONFIG_LOAD_FAILED"

    def __init__(self, message: str, *, path: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.path = path
        self.details["path"] = path


class ProbeServerBindError(LifecycleError):
    """Probe server could not bind its listen address."""

    error_code = "PROBE_SERVER_BIND_FAILED"

    def __init__(self, message: str, *, host: str, port: int, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.host = host
        self.port = port
        self.details["host"] = host
        self.details["port"] = port


# =============================================================================
# Hook Errors
# =============================================================================


class HookError(LifecycleError):
    """A user hook failed."""

    error_code = "HOOK_FAILED"

    def __init__(self, message: str, *, phase: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.phase = phase
        self.details["phase"] = phase


class HookTimeoutError(HookError):
    """A user hook did not settle within its deadline."""

    error_code = "HOOK_TIMEOUT"

    def __init__(self, *, phase: str, timeout_ms: int, **kwargs: Any):
        super().__init__(f"{phase} hook timed out after {timeout_ms}ms", phase=phase, **kwargs)
        self.timeout_ms = timeout_ms
        self.details["timeout_ms"] = timeout_ms


# =============================================================================
# Probe Errors
# =============================================================================


class ProbeRejectedError(LifecycleError):
    """Probe answered with a failure before reaching the user check."""

    error_code = "PROBE_REJECTED"


class AppStartingError(ProbeRejectedError):
    """App has not finished starting."""

    error_code = "APP_STARTING"

    def __init__(self, message: str = "App is still starting", **kwargs: Any):
        super().__init__(message, **kwargs)


class AppExitingError(ProbeRejectedError):
    """App is shutting down."""

    error_code = "APP_EXITING"

    def __init__(self, message: str = "App is exiting", **kwargs: Any):
        super().__init__(message, **kwargs)
