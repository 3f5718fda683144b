# src/leaf_build/bundler.py
"""Stitch an entry module (and optional helper modules) into one program text."""

from __future__ import annotations

import re
from pathlib import Path

from .logs import get_logger
from .types import BundleSettings

_SHEBANG = re.compile(r"^#!.*\n")
_FUTURE_IMPORT = re.compile(r"^from\s+__future__\s+import\b")


def _read_module(path: Path) -> str:
    if not path.is_file():
        xmsg = f"Module not found: {path}"
        raise FileNotFoundError(xmsg)
    return _SHEBANG.sub("", path.read_text(encoding="utf-8"), count=1)


def strip_imports(text: str, prefixes: list[str]) -> str:
    """Remove import lines that reference any of `prefixes`."""
    if not prefixes:
        return text
    alternatives = "|".join(re.escape(p) for p in prefixes)
    pattern = re.compile(
        rf"^\s*(from\s+({alternatives})(\.|\s)|import\s+({alternatives})(\.|\s|$))"
    )
    return "\n".join(line for line in text.splitlines() if not pattern.match(line))


def _statement_continues(lines: list[str]) -> bool:
    code = [line.split("#", 1)[0] for line in lines]
    if "".join(code).count("(") > "".join(code).count(")"):
        return True
    return code[-1].rstrip().endswith("\\")


def split_future_imports(text: str) -> tuple[list[str], str]:
    """Pull `from __future__` statements out of `text`.

    They have to open a Python file, so whoever prepends code to a bundle
    must put them back above it. Parenthesized and backslash-continued
    statements are moved as a whole.
    """
    futures: list[str] = []
    body: list[str] = []
    lines = iter(text.splitlines())
    for line in lines:
        if not _FUTURE_IMPORT.match(line):
            body.append(line)
            continue

        statement = [line]
        while _statement_continues(statement):
            following = next(lines, None)
            if following is None:
                xmsg = f"Unterminated __future__ import: {line.strip()}"
                raise ValueError(xmsg)
            statement.append(following)

        joined = "\n".join(statement)
        if joined not in futures:
            futures.append(joined)
    return futures, "\n".join(body)


def bundle_program(
    module_path: Path | str,
    settings: BundleSettings | None = None,
) -> str:
    """Return a single self-contained program text for `module_path`.

    Helper modules from `settings["modules"]` come first, in order, each under
    a `# === name ===` header; the entry module comes last.
    """
    logger = get_logger()
    settings = settings or {}
    entry = Path(module_path)
    prefixes = list(settings.get("strip_imports", []))

    sources = [Path(m) for m in settings.get("modules", [])] + [entry]
    parts: list[str] = []
    for path in sources:
        text = strip_imports(_read_module(path), prefixes)
        logger.trace("[BUNDLE] %s (%d chars)", path, len(text))
        if len(sources) > 1:
            parts.append(f"# === {path.name} ===\n{text.strip()}\n")
        else:
            parts.append(text)

    futures, body = split_future_imports("\n".join(parts))
    logger.debug("📦 Bundled %d module(s) from %s", len(sources), entry)
    # keep future imports leading so the text stays valid on its own
    return "\n".join([*futures, body]) + "\n"
