# src/leaf_build/errors.py
"""Exception types raised by the registry and the compile pipeline.

They subclass the builtin exceptions the CLI already treats as controlled
failures, so callers can catch either the precise type or the builtin one.
"""


class InvalidPathError(ValueError):
    """An empty or unusable path reference was given."""


class VirtualFileNotFoundError(FileNotFoundError):
    """Neither the registry nor the real filesystem has the requested file."""

    def __init__(self, path: str) -> None:
        xmsg = f"File not found ({path})."
        super().__init__(xmsg)
        self.path = path


class FlagConflictError(ValueError):
    """A caller passed a compiler flag the pipeline reserves for itself."""
