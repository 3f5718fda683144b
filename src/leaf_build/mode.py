# src/leaf_build/mode.py
"""Build mode vs compiled-executable mode.

The decision is made once per process. Entry points that know where they
run call `set_mode()`; otherwise `detect_mode()` looks for the explicit
environment override and then for the snapshot slot that only a generated
prologue fills in.
"""

from __future__ import annotations

import builtins
import os
import sys
from enum import Enum
from typing import Any

from .constants import DEFAULT_ENV_BUILD_MODE, FILE_SYSTEM_SLOT
from .logs import get_logger
from .types import Snapshot


class Mode(Enum):
    BUILD = "build"
    EXECUTABLE = "executable"


class RegistryState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


_mode: Mode | None = None


def get_embedded_snapshot(slot: str = FILE_SYSTEM_SLOT) -> Snapshot | None:
    """Return the snapshot a prologue installed, or None outside an executable."""
    value: Any = getattr(builtins, slot, None)
    if value is None:
        return None
    if not isinstance(value, dict):
        logger = get_logger()
        logger.warning(
            "Ignoring builtins.%s: expected a dict, got %s", slot, type(value).__name__
        )
        return None
    return value


def describe_runtime() -> str:
    """Return how this interpreter was launched (informational only)."""
    if getattr(sys, "frozen", False):
        return "frozen"
    main_module = sys.modules.get("__main__")
    if main_module is not None and "__compiled__" in vars(main_module):
        return "compiled"
    return "installed"


def detect_mode() -> Mode:
    """Decide the mode for this process: env override, then the snapshot slot."""
    logger = get_logger()
    override = os.getenv(DEFAULT_ENV_BUILD_MODE, "").strip().lower()
    if override:
        try:
            mode = Mode(override)
        except ValueError:
            logger.warning(
                "Invalid %s=%r (expected 'build' or 'executable'), ignoring.",
                DEFAULT_ENV_BUILD_MODE,
                override,
            )
        else:
            logger.trace("[MODE] %s from %s", mode.value, DEFAULT_ENV_BUILD_MODE)
            return mode

    mode = Mode.EXECUTABLE if hasattr(builtins, FILE_SYSTEM_SLOT) else Mode.BUILD
    logger.debug("Runtime: %s, mode: %s", describe_runtime(), mode.value)
    return mode


def get_mode() -> Mode:
    global _mode  # noqa: PLW0603
    if _mode is None:
        _mode = detect_mode()
    return _mode


def set_mode(mode: Mode) -> None:
    """Pin the mode explicitly, typically at the program's true entry point."""
    global _mode  # noqa: PLW0603
    _mode = mode


def reset_mode() -> None:
    """Forget the cached decision (tests only)."""
    global _mode  # noqa: PLW0603
    _mode = None


def is_executable() -> bool:
    return get_mode() is Mode.EXECUTABLE
