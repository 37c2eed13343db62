"""Application layer: lifecycle manager and its collaborators."""

from pod_lifecycle.app.hooks import HookInvoker, call_hook, noop_hook
from pod_lifecycle.app.manager import LifecycleManager
from pod_lifecycle.app.probe_server import ProbeServer
from pod_lifecycle.app.signals import SignalBridge

__all__ = [
    "HookInvoker",
    "LifecycleManager",
    "ProbeServer",
    "SignalBridge",
    "call_hook",
    "noop_hook",
]
