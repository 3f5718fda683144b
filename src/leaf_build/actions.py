# src/leaf_build/actions.py
"""Standalone CLI actions: --version and --selftest."""

import shutil
import subprocess
import tempfile
import tomllib
from importlib import metadata
from pathlib import Path

from .build import _build_capture_content
from .logs import get_logger, temporary_log_level
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT, Metadata
from .mode import Mode
from .registry import FileRegistry
from .snapshot import (
    decode_snapshot,
    parse_snapshot,
    render_prologue,
    render_snapshot,
)

# src/leaf_build/actions.py → repository root
_SOURCE_ROOT = Path(__file__).resolve().parents[2]


def _read_version() -> str:
    logger = get_logger()
    try:
        return metadata.version(PROGRAM_SCRIPT)
    except metadata.PackageNotFoundError:
        logger.trace("[META] %s not installed, reading pyproject.toml", PROGRAM_SCRIPT)

    pyproject = _SOURCE_ROOT / "pyproject.toml"
    if not pyproject.is_file():
        return "unknown"
    with pyproject.open("rb") as f:
        data = tomllib.load(f)
    return str(data.get("project", {}).get("version", "unknown"))


def _read_commit() -> str:
    logger = get_logger()
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=_SOURCE_ROOT,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        logger.trace("[META] no git commit available: %s", e)
        return "unknown"
    return result.stdout.strip() or "unknown"


def get_metadata() -> Metadata:
    """Return (version, commit); either is "unknown" when it can't be found."""
    return Metadata(_read_version(), _read_commit())


def _selftest_assets(root: Path) -> Path:
    assets = root / "assets"
    assets.mkdir()
    (assets / "hello.txt").write_text(f"hello {PROGRAM_DISPLAY}!", encoding="utf-8")
    (assets / "all.bin").write_bytes(bytes(range(256)))
    (assets / "empty.bin").write_bytes(b"")
    return assets


def run_selftest() -> bool:
    """Capture a small asset folder, embed it, and read it back from memory.

    Exercises the same capture and snapshot code a real compile uses, minus
    the native compiler.
    """
    logger = get_logger()
    logger.info("🧪 Running self-test...")

    workdir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-selftest-"))
    try:
        assets = _selftest_assets(workdir)
        builder = FileRegistry(mode=Mode.BUILD)
        # no per-file capture lines in self-test output
        with temporary_log_level("info"):
            _build_capture_content(builder, [str(assets)], [])
        logger.debug("[SELFTEST] captured %d file(s) from %s", len(builder), assets)

        literal = render_snapshot(builder.snapshot())
        if literal not in render_prologue(builder.snapshot()):
            logger.error("Self-test failed: snapshot missing from prologue.")
            return False

        runner = FileRegistry(mode=Mode.EXECUTABLE)
        # an embedded snapshot must not replace the test files afterwards
        runner.initialize()
        runner.install(decode_snapshot(parse_snapshot(literal)))
        for key in builder:
            if runner.read_bytes(key) != builder.read_bytes(key):
                logger.error("Self-test failed: content mismatch for %s", key)
                return False

    except PermissionError:
        logger.error("Self-test failed: insufficient permissions.")  # noqa: TRY400
        return False
    except Exception:
        logger.exception(
            "Unexpected self-test failure. "
            "Please report this issue with the following traceback:"
        )
        return False
    finally:
        shutil.rmtree(workdir, ignore_errors=True)

    logger.info("✅ Self-test passed: %s is working correctly.", PROGRAM_DISPLAY)
    return True
