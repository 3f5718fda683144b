# src/leaf_build/logs.py
"""The leaf_build logger: a TRACE level, tagged lines, stdout/stderr split.

Verbosity lives in `current_runtime["log_level"]` and is re-read on every
`get_logger()` call, so CLI flags, env vars and config files can all change
it after import.
"""

import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, TextIO, cast

from .meta import PROGRAM_PACKAGE
from .runtime import current_runtime


# --- levels ------------------------------------------------------------------

TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1
logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.addLevelName(SILENT_LEVEL, "SILENT")

# least to most severe; "silent" turns all output off
LEVEL_ORDER = ["trace", "debug", "info", "warning", "error", "critical", "silent"]


def _to_levelno(name: str) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


# --- colors and tags -----------------------------------------------------------

RESET = "\033[0m"
CYAN = "\033[36m"
GRAY = "\033[90m"
RED = "\033[91m"

# (color, tag) put in front of the message; info lines carry none
_TAGS: dict[int, tuple[str, str]] = {
    TRACE_LEVEL: (GRAY, "[TRACE]"),
    logging.DEBUG: (CYAN, "[DEBUG]"),
    logging.WARNING: ("", "⚠️ "),
    logging.ERROR: ("", "❌ "),
    logging.CRITICAL: ("", "💥 "),
}


def colorize(text: str, color: str, *, use_color: bool | None = None) -> str:
    if use_color is None:
        use_color = current_runtime["use_color"]
    return f"{color}{text}{RESET}" if use_color else text


class TagFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color, tag = _TAGS.get(record.levelno, ("", ""))
        if not tag:
            return message
        return f"{colorize(tag, color) if color else tag} {message}"


class DualStreamHandler(logging.StreamHandler[TextIO]):
    """Warnings and worse go to stderr, everything else to stdout."""

    def emit(self, record: logging.LogRecord) -> None:
        # picked per record so a replaced sys.stdout (pytest capture) is seen
        self.stream = sys.stderr if record.levelno >= logging.WARNING else sys.stdout
        super().emit(record)


# --- logger ------------------------------------------------------------------


class LoggerWithTrace(logging.Logger):
    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    @property
    def level_name(self) -> str:
        return str(logging.getLevelName(self.getEffectiveLevel())).lower()

    def _log_verbose_traceback(self, level: int, msg: str, *args: Any) -> None:
        self.log(level, msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))

    def error_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log an error; the active traceback is only shown at debug or below."""
        self._log_verbose_traceback(logging.ERROR, msg, *args)

    def critical_if_not_debug(self, msg: str, *args: Any) -> None:
        self._log_verbose_traceback(logging.CRITICAL, msg, *args)


def _build_logger() -> LoggerWithTrace:
    # only our logger gets the subclass
    previous = logging.getLoggerClass()
    logging.setLoggerClass(LoggerWithTrace)
    try:
        logger = logging.getLogger(PROGRAM_PACKAGE)
    finally:
        logging.setLoggerClass(previous)

    handler = DualStreamHandler()
    handler.setFormatter(TagFormatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return cast("LoggerWithTrace", logger)


_logger = _build_logger()


def get_logger() -> LoggerWithTrace:
    """Return the package logger, synced to the current runtime level."""
    _logger.setLevel(_to_levelno(str(current_runtime.get("log_level") or "info")))
    return _logger


def set_log_level(level: str) -> None:
    current_runtime["log_level"] = level
    get_logger()


@contextmanager
def temporary_log_level(level: str) -> Generator[None, None, None]:
    previous = current_runtime["log_level"]
    set_log_level(level)
    try:
        yield
    finally:
        set_log_level(previous)


def log_dynamic(level: str, message: str, *args: Any) -> None:
    """Log at a level chosen at runtime by name ('info', 'trace', ...)."""
    logger = get_logger()
    method = getattr(logger, level.lower(), None)
    if level.lower() in LEVEL_ORDER and callable(method):
        method(message, *args)
    else:
        logger.error("Unknown log level: %r", level)
