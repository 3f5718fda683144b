# src/leaf_build/constants.py
"""
Central constants used across the project.
"""

from .meta import PROGRAM_SCRIPT


# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_BUILD_MODE: str = "LEAF_BUILD_MODE"

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = True
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_COMPILER: str = "nuitka"
DEFAULT_HINT_CUTOFF: float = 0.6

# --- embedding ---
# builtins attribute the generated prologue fills with the snapshot
FILE_SYSTEM_SLOT: str = "LEAF_FILE_SYSTEM"
TEMP_PREFIX: str = "leaf_"
TEMP_SUFFIX: str = ".py"

# --- config discovery ---
# searched in this order in the invocation directory
CONFIG_FILE_NAMES: tuple[str, ...] = tuple(
    f".{PROGRAM_SCRIPT}{suffix}" for suffix in (".py", ".jsonc", ".json")
)
