# src/leaf_build/cli.py
"""Command line entry point: `leaf-build [MODULE] [FOLDER ...] [options]`."""

import argparse
import platform
import sys
from difflib import get_close_matches
from pathlib import Path

from .actions import get_metadata, run_selftest
from .build import compile_program
from .compiler import COMPILER_PROFILES
from .config import can_run_configless, load_and_validate_config
from .config_resolve import resolve_config
from .constants import DEFAULT_COMPILER, DEFAULT_HINT_CUTOFF
from .logs import LEVEL_ORDER, get_logger, set_log_level
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .runtime import current_runtime
from .utils import safe_log


# --------------------------------------------------------------------------- #
# parser
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    """An ArgumentParser that suggests the closest option for a typo."""

    def _suggestions(self, message: str) -> list[str]:
        marker = "unrecognized arguments:"
        if marker not in message:
            return []
        known = [opt for action in self._actions for opt in action.option_strings]
        unknown = [tok for tok in message.split(marker, 1)[1].split() if tok[:1] == "-"]
        hints: list[str] = []
        for token in unknown:
            close = get_close_matches(token, known, n=1, cutoff=DEFAULT_HINT_CUTOFF)
            if close:
                hints.append(f"Hint: did you mean {close[0]}?")
        return hints

    def error(self, message: str) -> None:  # type: ignore[override]
        lines = [f"{self.prog}: error: {message}", *self._suggestions(message)]
        self.print_usage(sys.stderr)
        self.exit(2, "\n".join(lines) + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    parser.add_argument(
        "module",
        nargs="?",
        metavar="MODULE",
        help="Entry point of the program to compile.",
    )
    parser.add_argument(
        "positional_content",
        nargs="*",
        metavar="FOLDER",
        help="Content folders to embed (shorthand for --content).",
    )

    content = parser.add_argument_group("content")
    content.add_argument(
        "--content", nargs="+", metavar="FOLDER", help="Replace the content folders."
    )
    content.add_argument(
        "--add-content",
        nargs="+",
        metavar="FOLDER",
        help="Embed these folders in addition to the configured ones.",
    )
    content.add_argument(
        "--exclude",
        nargs="+",
        metavar="GLOB",
        help="Skip content files matching these patterns.",
    )

    compiling = parser.add_argument_group("compiler")
    compiling.add_argument("-o", "--output", help="Name of the produced executable.")
    compiling.add_argument(
        "--compiler",
        choices=sorted(COMPILER_PROFILES),
        help=f"Native compiler to run (default: {DEFAULT_COMPILER}).",
    )
    compiling.add_argument(
        "--flag",
        action="append",
        metavar="FLAG",
        help="Extra compiler flag, repeatable (write it as --flag=--lto=yes).",
    )
    compiling.add_argument(
        "--arg",
        action="append",
        metavar="ARG",
        help="Argument placed after the program file, repeatable.",
    )
    compiling.add_argument(
        "--keep-temp",
        action="store_true",
        help="Keep the generated bootstrap file for inspection.",
    )
    compiling.add_argument(
        "--dry-run",
        action="store_true",
        help="Capture and bundle, but only print the compiler command.",
    )

    general = parser.add_argument_group("general")
    general.add_argument("-c", "--config", help="Path to the build config file.")
    general.add_argument("--version", action="store_true", help="Show version info.")
    general.add_argument(
        "--selftest",
        action="store_true",
        help="Run a built-in capture/embed round trip and exit.",
    )

    color = general.add_mutually_exclusive_group()
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Always use ANSI colors.",
    )
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Never use ANSI colors.",
    )
    parser.set_defaults(use_color=None)

    verbosity = general.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-q",
        "--quiet",
        dest="log_level",
        action="store_const",
        const="warning",
        help="Only warnings and errors (same as --log-level warning).",
    )
    verbosity.add_argument(
        "-v",
        "--verbose",
        dest="log_level",
        action="store_const",
        const="debug",
        help="Show debug output (same as --log-level debug).",
    )
    verbosity.add_argument(
        "--log-level",
        dest="log_level",
        choices=LEVEL_ORDER,
        help="Set log verbosity.",
    )
    return parser


def _normalize_positional_args(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> None:
    """Fold positional FOLDER arguments into --content."""
    positional: list[str] = getattr(args, "positional_content", None) or []
    if not positional:
        return
    if getattr(args, "content", None):
        parser.error(
            "Cannot mix positional content folders with --content; "
            "use --add-content to extend."
        )
    args.content = positional


# --------------------------------------------------------------------------- #
# entry point
# --------------------------------------------------------------------------- #


def _run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    logger = get_logger()

    if args.use_color is not None:
        current_runtime["use_color"] = args.use_color
    if args.log_level:
        set_log_level(args.log_level)
    logger.debug(
        "Python %s (%s) on %s",
        platform.python_version(),
        platform.python_implementation(),
        platform.platform(),
    )

    if args.version:
        meta = get_metadata()
        logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
        return 0

    if args.selftest:
        return 0 if run_selftest() else 1

    # --- config ---
    loaded = load_and_validate_config(args)
    config_path, cfg = loaded if loaded is not None else (None, None)
    set_log_level(current_runtime["log_level"])
    logger.trace("[CONFIG] log level now %s", logger.level_name)

    _normalize_positional_args(args, parser)
    if cfg is None and not can_run_configless(args):
        logger.error(
            "No build config found (.%s.json) and no module provided.",
            PROGRAM_SCRIPT,
        )
        return 1

    cwd = Path.cwd().resolve()
    resolved = resolve_config(
        cfg, args, config_path.parent if config_path else cwd, cwd
    )
    set_log_level(resolved["log_level"])
    options = resolved["options"]

    if config_path:
        logger.info("🔧 Using config: %s", config_path.name)
    else:
        logger.info("🔧 Running in CLI-only mode (no config file).")
    logger.info("📂 Invoked from: %s", cwd)
    if options.get("dry_run"):
        logger.info("🧪 Dry-run mode: the compiler will not be run.")

    result = compile_program(options)
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    logger = get_logger()
    parser = _setup_parser()
    args = parser.parse_args(argv)

    try:
        return _run(args, parser)

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # expected failures: one line, traceback only when verbose
        if not getattr(e, "silent", False):
            try:
                logger.error_if_not_debug(str(e))
            except Exception:  # noqa: BLE001
                safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        try:
            logger.critical_if_not_debug("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1
