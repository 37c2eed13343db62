"""
CLI tests: app target resolution and argument handling.
"""

import sys
import textwrap

import pytest

from pod_lifecycle.__main__ import main
from pod_lifecycle.app.manager import LifecycleManager
from pod_lifecycle.app.run import load_manager


@pytest.fixture
def user_module(tmp_path, monkeypatch):
    """A throwaway user module exposing a manager and a factory."""
    (tmp_path / "user_app.py").write_text(
        textwrap.dedent(
            """
            from pod_lifecycle import create_app

            app = create_app(pod_name="user-1")

            def build():
                return create_app(pod_name="user-2")

            not_an_app = 42
            """
        ),
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    yield "user_app"
    sys.modules.pop("user_app", None)


def test_load_manager_instance(user_module):
    manager = load_manager(f"{user_module}:app")
    assert isinstance(manager, LifecycleManager)
    assert manager.ordinal == 1


def test_load_manager_factory(user_module):
    manager = load_manager(f"{user_module}:build")
    assert manager.ordinal == 2


@pytest.mark.parametrize("target", ["user_app", "user_app:", ":app"])
def test_malformed_target_rejected(target):
    with pytest.raises(ValueError, match="module:attr|package.module:attr"):
        load_manager(target)


def test_missing_attribute_rejected(user_module):
    with pytest.raises(ValueError, match="no attribute"):
        load_manager(f"{user_module}:missing")


def test_non_manager_rejected(user_module):
    with pytest.raises(ValueError, match="did not resolve"):
        load_manager(f"{user_module}:not_an_app")


def test_main_reports_bad_target(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["pod-lifecycle", "run", "no_such_module_xyz:app"])
    assert main() == 2
    assert "Error" in capsys.readouterr().err


def test_main_check_prints_settings(monkeypatch, capsys):
    monkeypatch.setenv("PROBE_SERVER_PORT", "9200")
    from pod_lifecycle.config.settings import get_settings

    get_settings.cache_clear()
    try:
        monkeypatch.setattr(sys, "argv", ["pod-lifecycle", "check"])
        assert main() == 0
    finally:
        get_settings.cache_clear()

    assert "probe_server: 0.0.0.0:9200" in capsys.readouterr().out
