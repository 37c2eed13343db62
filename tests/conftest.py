import asyncio
from unittest.mock import MagicMock

import aiohttp
import pytest

from pod_lifecycle.app.manager import LifecycleManager
from pod_lifecycle.config.settings import LifecycleSettings


@pytest.fixture
def settings():
    """Settings bound to an ephemeral localhost port, isolated from the host environment."""
    return LifecycleSettings(
        probe_server_host="127.0.0.1",
        probe_server_port=0,
        pod_name="worker-7",
        config_path=None,
    )


@pytest.fixture
def hard_exit():
    """Stand-in for os._exit so the hard-terminate path never kills the test run."""
    return MagicMock()


@pytest.fixture
def make_manager(settings, hard_exit):
    """Factory for managers; restores any signal handlers a test left installed."""
    created: list[LifecycleManager] = []

    def _make(**kwargs) -> LifecycleManager:
        kwargs.setdefault("hard_exit", hard_exit)
        manager = LifecycleManager(settings, **kwargs)
        created.append(manager)
        return manager

    yield _make

    for manager in created:
        manager.signal_bridge.unsubscribe()


async def probe_status(port: int, path: str = "/readiness") -> int:
    """GET a probe path on localhost and return the HTTP status."""
    async with aiohttp.ClientSession() as session:
        async with session.get(f"http://127.0.0.1:{port}{path}") as resp:
            return resp.status


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll ``predicate`` on the event loop until it is true."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


@pytest.fixture
def get_status():
    return probe_status


@pytest.fixture
def until():
    return wait_until
