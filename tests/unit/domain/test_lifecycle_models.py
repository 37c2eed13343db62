"""
Unit tests for lifecycle domain models and the error taxonomy.
"""

import dataclasses

import pytest

from pod_lifecycle.domain.errors import (
    AppExitingError,
    AppStartingError,
    ConfigLoadError,
    HookTimeoutError,
    LifecycleError,
    ProbeRejectedError,
    ProbeServerBindError,
)
from pod_lifecycle.domain.models import (
    HookOutcome,
    LifecycleState,
    ProbeContext,
    ShutdownContext,
    is_failure,
)


class TestLifecycleState:
    """Transitions only move forward."""

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (LifecycleState.STARTING, LifecycleState.READY),
            (LifecycleState.STARTING, LifecycleState.EXITING),
            (LifecycleState.READY, LifecycleState.EXITING),
            (LifecycleState.EXITING, LifecycleState.EXITED),
        ],
    )
    def test_forward_transitions_allowed(self, source, target):
        assert source.can_transition_to(target)

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (LifecycleState.READY, LifecycleState.STARTING),
            (LifecycleState.EXITING, LifecycleState.READY),
            (LifecycleState.EXITED, LifecycleState.STARTING),
            (LifecycleState.STARTING, LifecycleState.EXITED),
            (LifecycleState.READY, LifecycleState.READY),
        ],
    )
    def test_backward_or_skipping_transitions_rejected(self, source, target):
        assert not source.can_transition_to(target)


class TestExitReason:
    def test_none_and_signal_names_are_clean(self):
        assert not is_failure(None)
        assert not is_failure("SIGTERM")

    def test_exceptions_are_failures(self):
        assert is_failure(RuntimeError("boom"))
        assert is_failure(HookTimeoutError(phase="startup", timeout_ms=50))


class TestHookOutcome:
    def test_success(self):
        outcome = HookOutcome.success(duration_ms=3.0)
        assert outcome.ok
        assert outcome.error is None

    def test_failure_keeps_error(self):
        err = ValueError("bad")
        outcome = HookOutcome.failure(err)
        assert not outcome.ok
        assert outcome.error is err


class TestContexts:
    def test_contexts_are_frozen_but_locals_shared(self):
        shared = {}
        ctx = ProbeContext(config={}, locals=shared, probe_type="liveness")

        with pytest.raises(dataclasses.FrozenInstanceError):
            ctx.probe_type = "readiness"

        ctx.locals["hits"] = 1
        assert shared == {"hits": 1}

    def test_shutdown_context_defaults(self):
        ctx = ShutdownContext(config={}, locals={})
        assert ctx.error is None
        assert ctx.ordinal == 0


class TestErrors:
    def test_timeout_message_names_phase_and_limit(self):
        err = HookTimeoutError(phase="startup", timeout_ms=50)
        assert str(err) == "startup hook timed out after 50ms"
        assert err.to_dict() == {
            "error_code": "HOOK_TIMEOUT",
            "message": "startup hook timed out after 50ms",
            "details": {"phase": "startup", "timeout_ms": 50},
        }

    def test_probe_rejections_share_base(self):
        assert isinstance(AppStartingError(), ProbeRejectedError)
        assert isinstance(AppExitingError(), ProbeRejectedError)
        assert str(AppStartingError()) == "App is still starting"
        assert str(AppExitingError()) == "App is exiting"

    def test_structured_details(self):
        bind = ProbeServerBindError("in use", host="0.0.0.0", port=8066)
        assert bind.details == {"host": "0.0.0.0", "port": 8066}
        config = ConfigLoadError("bad yaml", path="/etc/app.yaml")
        assert config.details == {"path": "/etc/app.yaml"}
        assert isinstance(config, LifecycleError)
