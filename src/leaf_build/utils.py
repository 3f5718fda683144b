# src/leaf_build/utils.py
"""Small helpers with no knowledge of the registry or the compile pipeline."""

import json
import os
import sys
from contextlib import suppress
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, TextIO, cast


_TRUTHY = {"1", "true", "yes", "on"}


def should_use_color() -> bool:
    """NO_COLOR beats FORCE_COLOR; otherwise color only on a terminal."""
    if "NO_COLOR" in os.environ:
        return False
    if os.getenv("FORCE_COLOR", "").strip().lower() in _TRUTHY:
        return True
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def safe_log(msg: str) -> None:
    """Last-resort write to the real stderr, for when logging itself broke."""
    stream = cast("TextIO", sys.__stderr__)
    with suppress(Exception):
        stream.write(f"{msg}\n")
        stream.flush()


def plural(obj: Any) -> str:
    """Return 's' unless `obj` (a count or a sized collection) is exactly one."""
    count = len(obj) if hasattr(obj, "__len__") else obj
    return "" if count == 1 else "s"


# --- JSONC ---------------------------------------------------------------------


def _skip_string(text: str, start: int) -> int:
    """Return the index just past the string literal opening at `start`."""
    i = start + 1
    while i < len(text) and text[i] != '"':
        i += 2 if text[i] == "\\" else 1
    return i + 1


def strip_jsonc(text: str) -> str:
    """Turn JSONC into JSON: drop comments and trailing commas.

    `//` and `#` comments run to the end of the line, `/* */` comments may
    span lines (their newlines are kept so error positions stay right).
    String literals pass through untouched.
    """
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == '"':
            end = _skip_string(text, i)
            out.append(text[i:end])
            i = end
        elif ch == "#" or text.startswith("//", i):
            newline = text.find("\n", i)
            i = len(text) if newline == -1 else newline
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            stop = len(text) if close == -1 else close + 2
            out.append("\n" * text.count("\n", i, stop))
            i = stop
        else:
            out.append(ch)
            i += 1

    json_text = "".join(out)
    kept: list[str] = []
    i = 0
    while i < len(json_text):
        ch = json_text[i]
        if ch == '"':
            end = _skip_string(json_text, i)
            kept.append(json_text[i:end])
            i = end
            continue
        if ch == ",":
            j = i + 1
            while j < len(json_text) and json_text[j].isspace():
                j += 1
            if json_text[j : j + 1] in {"}", "]"}:
                i += 1
                continue
        kept.append(ch)
        i += 1
    return "".join(kept)


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load a JSON file that may carry comments and trailing commas.

    Returns None when nothing but comments and whitespace is left.
    """
    if not path.exists():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)
    if not path.is_file():
        xmsg = f"Expected a file: {path}"
        raise ValueError(xmsg)

    text = strip_jsonc(path.read_text(encoding="utf-8")).strip()
    if not text:
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = f"Invalid JSONC syntax: {e.msg} (line {e.lineno}, column {e.colno})"
        raise ValueError(xmsg) from e

    # a scalar root is not a usable config
    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004
    return cast("dict[str, Any] | list[Any]", data)


# --- exclusion -----------------------------------------------------------------


def is_excluded_raw(
    path: Path | str,
    exclude_patterns: list[str],
    root: Path | str,
) -> bool:
    """Return True if `path` (relative to `root`) matches an exclude pattern.

    Patterns are fnmatch globs against the forward-slash relative path;
    a pattern ending in '/' excludes everything beneath that directory.
    """
    if not exclude_patterns:
        return False

    root = Path(root)
    path = Path(path)
    full_path = path if path.is_absolute() else (root / path)

    try:
        rel = str(full_path.relative_to(root)).replace("\\", "/")
    except ValueError:
        # outside the root; nothing to match against
        return False

    for pattern in exclude_patterns:
        pat = pattern.replace("\\", "/")
        if fnmatch(rel, pat):
            return True
        # "**/x" should also match "x" at the top level
        if pat.startswith("**/") and fnmatch(rel, pat[3:]):
            return True
        if pat.endswith("/") and rel.startswith(pat):
            return True

    return False
