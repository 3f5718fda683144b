# src/leaf_build/registry.py
"""The virtual file registry: normalized path → raw bytes.

In build mode it is a read-through cache over the real filesystem. In a
compiled executable it is filled once from the embedded snapshot and then
serves every read from memory.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping

from .constants import FILE_SYSTEM_SLOT
from .errors import VirtualFileNotFoundError
from .logs import get_logger
from .mode import Mode, RegistryState, get_embedded_snapshot, get_mode
from .paths import candidate_keys, get_file_path
from .snapshot import decode_snapshot, encode_snapshot
from .types import PathRef, Snapshot


class FileRegistry:
    """Owns the path → bytes mapping and its one-time initialization.

    `mode` pins build/executable mode for this instance; when omitted the
    process-wide decision from `get_mode()` is used on first access.
    """

    def __init__(
        self,
        *,
        mode: Mode | None = None,
        slot: str = FILE_SYSTEM_SLOT,
    ) -> None:
        self._files: dict[str, bytes] = {}
        self._mode = mode
        self._slot = slot
        self._state = RegistryState.UNINITIALIZED

    # --- state -------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        if self._mode is None:
            self._mode = get_mode()
        return self._mode

    @property
    def state(self) -> RegistryState:
        return self._state

    def initialize(self) -> None:
        """Install the embedded snapshot, at most once, in executable mode only."""
        if self._state is RegistryState.INITIALIZED or self.mode is not Mode.EXECUTABLE:
            return

        logger = get_logger()
        snapshot = get_embedded_snapshot(self._slot)
        if snapshot is not None:
            self.install(decode_snapshot(snapshot))
            logger.debug("Loaded %d embedded file(s) from memory", len(self._files))
        else:
            logger.debug("No embedded snapshot in builtins.%s", self._slot)

        # one-way transition; later calls return above
        self._state = RegistryState.INITIALIZED

    def install(self, files: Mapping[str, bytes]) -> None:
        """Replace the whole content in one step."""
        self._files = dict(files)

    # --- reads -------------------------------------------------------------

    def resolve_or_load(self, ref: PathRef) -> bytes:
        """Return the bytes for `ref`, reading and caching from disk on a miss."""
        self.initialize()
        logger = get_logger()

        file_path = get_file_path(ref)
        for key in candidate_keys(file_path):
            content = self._files.get(key)
            if content is not None:
                logger.trace("[REGISTRY] memory hit %s (as %s)", file_path, key)
                return content

        if not os.path.isfile(file_path):
            raise VirtualFileNotFoundError(file_path)

        with open(file_path, "rb") as f:
            content = f.read()
        # cached under the canonical key only, never under a fallback
        self._files[file_path] = content
        logger.trace("[REGISTRY] read %s from disk (%d bytes)", file_path, len(content))
        return content

    def read_bytes(self, ref: PathRef) -> bytes:
        return self.resolve_or_load(ref)

    def read_text(self, ref: PathRef, encoding: str = "utf-8") -> str:
        """Decode file content; malformed sequences are replaced, never raised."""
        return self.resolve_or_load(ref).decode(encoding, errors="replace")

    async def read_bytes_async(self, ref: PathRef) -> bytes:
        return self.read_bytes(ref)

    async def read_text_async(self, ref: PathRef, encoding: str = "utf-8") -> str:
        return self.read_text(ref, encoding)

    # --- writes ------------------------------------------------------------

    def rename(self, old: PathRef, new: PathRef) -> None:
        """Make `old`'s content available under `new`.

        This copies: `old` stays readable afterwards.
        """
        content = self.resolve_or_load(old)
        self._files[get_file_path(new)] = content

    async def rename_async(self, old: PathRef, new: PathRef) -> None:
        self.rename(old, new)

    # --- export ------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        return encode_snapshot(self._files)

    def keys(self) -> list[str]:
        return list(self._files)

    def __contains__(self, key: object) -> bool:
        return key in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._files))


# --------------------------------------------------------------------------- #
# process-wide default registry
# --------------------------------------------------------------------------- #

_default_registry: FileRegistry | None = None


def get_registry() -> FileRegistry:
    global _default_registry  # noqa: PLW0603
    if _default_registry is None:
        _default_registry = FileRegistry()
    return _default_registry


def reset_registry() -> None:
    """Drop the default registry (tests only)."""
    global _default_registry  # noqa: PLW0603
    _default_registry = None


def read_bytes(ref: PathRef) -> bytes:
    return get_registry().read_bytes(ref)


def read_text(ref: PathRef, encoding: str = "utf-8") -> str:
    return get_registry().read_text(ref, encoding)


async def read_bytes_async(ref: PathRef) -> bytes:
    return await get_registry().read_bytes_async(ref)


async def read_text_async(ref: PathRef, encoding: str = "utf-8") -> str:
    return await get_registry().read_text_async(ref, encoding)


def rename(old: PathRef, new: PathRef) -> None:
    get_registry().rename(old, new)


async def rename_async(old: PathRef, new: PathRef) -> None:
    await get_registry().rename_async(old, new)
