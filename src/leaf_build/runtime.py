# src/leaf_build/runtime.py
"""Process-wide settings that several modules read at call time."""

import os
from typing import TypedDict

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV
from .utils import should_use_color


class Runtime(TypedDict):
    log_level: str
    use_color: bool


current_runtime: Runtime = {
    # the CLI re-resolves this once flags and the config file are known
    "log_level": (
        os.getenv(f"{PROGRAM_ENV}_LOG_LEVEL")
        or os.getenv(DEFAULT_ENV_LOG_LEVEL)
        or DEFAULT_LOG_LEVEL
    ),
    "use_color": should_use_color(),
}
