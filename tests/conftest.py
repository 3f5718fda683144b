# tests/conftest.py
"""
Shared test setup for project.

Every test starts from a clean process state: no cached mode, no default
registry, no embedded snapshot in builtins, no mode override in the env.
"""

import builtins
from collections.abc import Iterator

import pytest
from pytest import Config, Item as PytestItem

import leaf_build.constants as mod_constants
import leaf_build.mode as mod_mode
import leaf_build.registry as mod_registry
import leaf_build.runtime as mod_runtime
from tests.utils import make_trace

TRACE = make_trace("🧹")


@pytest.fixture(autouse=True)
def _clean_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    mod_mode.reset_mode()
    mod_registry.reset_registry()
    monkeypatch.delenv(mod_constants.DEFAULT_ENV_BUILD_MODE, raising=False)
    if hasattr(builtins, mod_constants.FILE_SYSTEM_SLOT):
        monkeypatch.delattr(builtins, mod_constants.FILE_SYSTEM_SLOT)
    monkeypatch.setitem(mod_runtime.current_runtime, "log_level", "info")
    monkeypatch.setitem(mod_runtime.current_runtime, "use_color", False)
    yield
    mod_mode.reset_mode()
    mod_registry.reset_registry()
    TRACE("state reset")


def pytest_collection_modifyitems(
    config: Config,
    items: list[PytestItem],
) -> None:
    """Skip debug tests unless asked for."""
    keywords = config.getoption("-k") or ""
    if "debug" in keywords.lower():
        return  # user explicitly requested them, don't skip

    for item in items:
        if "debug" in item.keywords:
            item.add_marker(
                pytest.mark.skip(reason="Skipped debug test (use -k debug to run)")
            )
