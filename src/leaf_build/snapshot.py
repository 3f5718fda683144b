# src/leaf_build/snapshot.py
"""Snapshot codec: registry contents ⇄ an inline, embeddable literal.

A snapshot maps each path to a list of ints, one per byte. It is rendered
as a pure-ASCII Python dict literal, so the prologue can carry it directly
in generated source without a side file. Keys go through `ascii()`, which
keeps file names that are not valid UTF-8 (lone surrogates on POSIX) and
characters outside the BMP intact.
"""

from __future__ import annotations

import ast
from collections.abc import Mapping
from typing import Any

from .constants import FILE_SYSTEM_SLOT
from .types import Snapshot


def encode_snapshot(files: Mapping[str, bytes]) -> Snapshot:
    """Convert registry entries to their embeddable form, keeping key order."""
    return {path: list(content) for path, content in files.items()}


def render_snapshot(snapshot: Snapshot) -> str:
    """Render a snapshot as inline literal source text."""
    entries = (
        f"{ascii(path)}:[{','.join(map(str, values))}]"
        for path, values in snapshot.items()
    )
    return "{" + ",".join(entries) + "}"


def parse_snapshot(text: str) -> Snapshot:
    """Parse text produced by `render_snapshot` back into a snapshot."""
    try:
        data = ast.literal_eval(text)
    except (ValueError, TypeError, SyntaxError) as e:
        xmsg = f"Invalid snapshot literal: {e}"
        raise ValueError(xmsg) from e

    if not isinstance(data, dict):
        xmsg = f"Invalid snapshot root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004
    return data


def decode_snapshot(snapshot: Mapping[str, Any]) -> dict[str, bytes]:
    """Rebuild byte content from a snapshot, validating every value."""
    files: dict[str, bytes] = {}
    for path, values in snapshot.items():
        if not isinstance(path, str) or not path:
            xmsg = f"Invalid snapshot key: {path!r}"
            raise ValueError(xmsg)
        if not isinstance(values, (list, tuple)):
            xmsg = (
                f"Invalid snapshot entry for {path!r}:"
                f" expected a list of ints, got {type(values).__name__}"
            )
            raise ValueError(xmsg)  # noqa: TRY004
        try:
            files[path] = bytes(values)
        except (TypeError, ValueError) as e:
            # bytes() rejects non-ints and anything outside 0..255
            xmsg = f"Invalid snapshot entry for {path!r}: {e}"
            raise ValueError(xmsg) from e
    return files


def render_prologue(snapshot: Snapshot, *, slot: str = FILE_SYSTEM_SLOT) -> str:
    """Return the bootstrap source that installs `snapshot` into `builtins.<slot>`.

    It must run before the bundled program's own top-level code.
    """
    if not slot.isidentifier():
        xmsg = f"Invalid snapshot slot name: {slot!r}"
        raise ValueError(xmsg)
    return (
        "\n"
        "import builtins as _leaf_builtins\n"
        f"setattr(_leaf_builtins, {slot!r}, {render_snapshot(snapshot)})\n"
        "del _leaf_builtins\n"
        "\n"
    )
