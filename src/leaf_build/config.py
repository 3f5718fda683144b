# src/leaf_build/config.py
"""Finding, loading and validating the user's build config file."""

import argparse
import os
import sys
import traceback
from pathlib import Path
from typing import Any, cast

from .config_validate import ValidationSummary, validate_config
from .constants import CONFIG_FILE_NAMES, DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .logs import get_logger, log_dynamic
from .meta import PROGRAM_ENV
from .runtime import current_runtime
from .types import CompileConfigInput
from .utils import load_jsonc, plural

RawConfig = dict[str, Any] | list[Any] | None


def can_run_configless(args: argparse.Namespace) -> bool:
    """Without a config file we need at least an entry module on the CLI."""
    return bool(getattr(args, "module", None))


def determine_log_level(
    args: argparse.Namespace,
    config_log_level: str | None = None,
) -> str:
    """CLI flag, then environment, then config file, then the default."""
    candidates = (
        getattr(args, "log_level", None),
        os.getenv(f"{PROGRAM_ENV}_LOG_LEVEL"),
        os.getenv(DEFAULT_ENV_LOG_LEVEL),
        config_log_level,
    )
    return next((c for c in candidates if c), DEFAULT_LOG_LEVEL)


# --------------------------------------------------------------------------- #
# locating + loading
# --------------------------------------------------------------------------- #


def find_config(
    args: argparse.Namespace,
    cwd: Path,
    *,
    missing_level: str = "error",
) -> Path | None:
    """Return the config file to use, or None when there is none.

    An explicit `--config` must exist. Otherwise the first of
    CONFIG_FILE_NAMES present in `cwd` wins; `missing_level` is the log
    level for finding nothing.
    """
    explicit = getattr(args, "config", None)
    if explicit:
        path = Path(explicit).expanduser().resolve()
        if not path.exists():
            xmsg = f"Specified config file not found: {path}"
            raise FileNotFoundError(xmsg)
        if path.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {path}"
            raise ValueError(xmsg)
        return path

    present = [cwd / name for name in CONFIG_FILE_NAMES if (cwd / name).is_file()]
    if not present:
        log_dynamic(missing_level, "No config file found in %s", cwd)
        return None

    if len(present) > 1:
        get_logger().warning(
            "Multiple config files detected (%s); using %s.",
            ", ".join(p.name for p in present),
            present[0].name,
        )
    return present[0]


def _load_python_config(path: Path) -> RawConfig:
    """Execute a .py config and return its module-level `config` value."""
    logger = get_logger()
    namespace: dict[str, Any] = {"__file__": str(path), "__name__": "__config__"}

    # lets the config import helpers that sit next to it
    folder = str(path.parent)
    pushed = folder not in sys.path
    if pushed:
        sys.path.insert(0, folder)
    try:
        code = compile(path.read_text(encoding="utf-8"), str(path), "exec")
        exec(code, namespace)  # noqa: S102
    except Exception as e:
        xmsg = (
            f"Error while executing Python config: {path.name}\n"
            f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
        )
        raise RuntimeError(xmsg) from e
    finally:
        if pushed and folder in sys.path:
            sys.path.remove(folder)

    logger.trace("[CONFIG] names defined by %s: %s", path.name, sorted(namespace))
    if "config" not in namespace:
        xmsg = f"{path.name} did not define `config`"
        raise ValueError(xmsg)

    value = namespace["config"]
    if value is not None and not isinstance(value, (dict, list)):
        xmsg = (
            f"config in {path.name} must be a dict, list, or None"
            f", not {type(value).__name__}"
        )
        raise TypeError(xmsg)
    return cast("RawConfig", value)


def load_config(config_path: Path) -> RawConfig:
    """Read a config file: `.py` files are executed, anything else is JSONC.

    Returns None for configs that are intentionally empty.
    """
    if config_path.suffix == ".py":
        return _load_python_config(config_path)

    try:
        return load_jsonc(config_path)
    except ValueError as e:
        xmsg = f"Error while loading configuration file '{config_path.name}': {e}"
        raise ValueError(xmsg) from e


def parse_config(raw_config: RawConfig) -> dict[str, Any] | None:
    """Bring a loaded config into the flat dict shape.

    None, [] and {} mean "no config"; a list of strings is shorthand for
    the content folders; a dict is taken as-is (unknown keys included, the
    validator reports them).
    """
    if not raw_config:
        return None

    if isinstance(raw_config, list):
        if not all(isinstance(item, str) for item in raw_config):
            xmsg = "Invalid list config: a list config may only contain folder names."
            raise TypeError(xmsg)
        return {"content_folders": list(raw_config)}

    if not isinstance(raw_config, dict):  # pyright: ignore[reportUnnecessaryIsInstance]
        xmsg = (
            f"Invalid top-level value: {type(raw_config).__name__}"
            " (expected object or list of strings)"
        )
        raise TypeError(xmsg)
    return dict(raw_config)


# --------------------------------------------------------------------------- #
# validation report
# --------------------------------------------------------------------------- #


def _count(items: list[str], label: str) -> str | None:
    return f"{len(items)} {label}{plural(items)}" if items else None


def _report_validation(summary: ValidationSummary, config_path: Path) -> None:
    """Log the outcome of validation, one section per message bucket."""
    logger = get_logger()
    how = "strict mode" if summary.strict else "lenient mode"
    counts = [
        c
        for c in (
            _count(summary.errors, "error"),
            _count(summary.strict_warnings, "strict warning"),
            _count(summary.warnings, "normal warning"),
        )
        if c
    ]
    tally = f"\nFound {', '.join(counts)}." if counts else ""

    if not summary.valid:
        logger.error(
            "Failed to validate configuration file %s (%s).%s",
            config_path.name,
            how,
            tally,
        )
    elif counts:
        logger.warning(
            "Validated configuration file %s (%s) with warnings.%s",
            config_path.name,
            how,
            tally,
        )
    else:
        logger.debug("Validated %s (%s) successfully.", config_path.name, how)

    sections = (
        (logger.error, "Errors", summary.errors),
        (logger.error, "Strict warnings (treated as errors)", summary.strict_warnings),
        (logger.warning, "Warnings (non-fatal)", summary.warnings),
    )
    for emit, title, messages in sections:
        if messages:
            emit("\n%s:\n  • %s", title, "\n  • ".join(messages))


def load_and_validate_config(
    args: argparse.Namespace,
) -> tuple[Path, CompileConfigInput] | None:
    """Find, load, parse and validate the config file.

    The effective log level is settled first (and again once the file's own
    `log_level` is known) so everything after logs at the right verbosity.
    Returns None when there is no config to use.
    """
    current_runtime["log_level"] = determine_log_level(args)

    missing_level = "debug" if can_run_configless(args) else "error"
    config_path = find_config(args, Path.cwd().resolve(), missing_level=missing_level)
    if config_path is None:
        return None

    raw_config = load_config(config_path)
    if isinstance(raw_config, dict) and isinstance(raw_config.get("log_level"), str):
        current_runtime["log_level"] = determine_log_level(
            args, raw_config["log_level"] or None
        )

    try:
        parsed = parse_config(raw_config)
    except TypeError as e:
        xmsg = f"Could not parse config {config_path.name}: {e}"
        raise TypeError(xmsg) from e
    if parsed is None:
        return None

    summary = validate_config(parsed)
    _report_validation(summary, config_path)
    if not summary.valid:
        xmsg = f"Configuration file {config_path.name} contains validation errors."
        error = ValueError(xmsg)
        # already reported above
        error.silent = True  # type: ignore[attr-defined]
        error.data = summary  # type: ignore[attr-defined]
        raise error

    return config_path, cast("CompileConfigInput", parsed)
