# src/leaf_build/paths.py
"""Path references → registry keys.

Keys are plain strings compared verbatim; the only normalization is the
`./` prefix fallback, which tolerates callers that are inconsistent about
relative prefixes.
"""

from __future__ import annotations

import os

from .errors import InvalidPathError
from .types import PathRef


def get_file_path(ref: PathRef) -> str:
    """Return the canonical lookup key for a path reference.

    PathLike references use their string form verbatim; strings are kept as-is.
    """
    if isinstance(ref, os.PathLike):
        key = os.fspath(ref)
    elif isinstance(ref, str):
        key = ref
    else:
        xmsg = f"Invalid path reference: {ref!r} (expected str or PathLike)"
        raise InvalidPathError(xmsg)

    if not isinstance(key, str) or not key:
        xmsg = f"Invalid path reference: {ref!r}"
        raise InvalidPathError(xmsg)
    return key


def candidate_keys(key: str) -> list[str]:
    """Ordered keys to probe for `key`; the first hit wins.

    1. the key itself
    2. the key with a `./` prefix
    3. the key with a leading `./` removed
    """
    candidates = [key, f"./{key}", key[2:] if key.startswith("./") else key]
    # drop repeats while keeping probe order
    return list(dict.fromkeys(c for c in candidates if c))


def get_file_directory(file_path: str) -> str:
    """Return everything before the last separator of `file_path`.

    A path without any `/` is taken to be Windows style and split at `\\`.
    Returns "" when there is no separator at all.
    """
    if "/" not in file_path:
        return file_path[: max(file_path.rfind("\\"), 0)]
    return file_path[: file_path.rfind("/")]


def get_filename(file_path: str) -> str:
    return file_path.replace("\\", "/").rsplit("/", 1)[-1]


def get_output_name(module_path: str) -> str:
    """Derive an executable name from the entry point's filename."""
    return get_filename(module_path).split(".", 1)[0]
