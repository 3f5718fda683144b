# src/leaf_build/build.py
"""The compile pipeline.

capture content → write prologue → append bundle → run compiler → clean up
"""

import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

from .bundler import bundle_program, split_future_imports
from .compiler import (
    CompileResult,
    CompileStatus,
    build_command,
    check_flags,
    get_profile,
    run_compiler,
)
from .constants import DEFAULT_COMPILER, TEMP_PREFIX, TEMP_SUFFIX
from .logs import get_logger
from .mode import Mode
from .paths import get_output_name
from .registry import FileRegistry, get_registry
from .snapshot import render_prologue
from .types import CompileOptions
from .utils import is_excluded_raw, plural


# --------------------------------------------------------------------------- #
# internal helpers
# --------------------------------------------------------------------------- #


def iter_content_files(root: Path | str) -> Iterator[Path]:
    """Yield every regular file beneath `root`, in a stable order."""
    root_dir = Path(root)
    if not root_dir.is_dir():
        xmsg = f"Content folder not found: {root}"
        raise FileNotFoundError(xmsg)
    yield from sorted(p for p in root_dir.rglob("*") if p.is_file())


def _build_capture_content(
    registry: FileRegistry,
    content_folders: list[str],
    exclude_patterns: list[str],
) -> int:
    """Force every file under the content folders through the registry."""
    logger = get_logger()
    count = 0
    for folder in content_folders:
        logger.trace("[CAPTURE] walking %s", folder)
        for path in iter_content_files(folder):
            rel = path.relative_to(folder)
            if is_excluded_raw(rel, exclude_patterns, folder):
                logger.debug("🚫  Skipped (excluded): %s", path)
                continue
            logger.debug("📄 %s", path)
            registry.resolve_or_load(str(path))
            count += 1
    return count


def _build_write_bootstrap(registry: FileRegistry) -> Path:
    """Create the temp artifact and write the snapshot prologue into it."""
    logger = get_logger()
    fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(render_prologue(registry.snapshot()))
    logger.trace("[BOOTSTRAP] prologue for %d file(s) → %s", len(registry), name)
    return Path(name)


def _build_append_bundle(artifact: Path, program: str) -> None:
    """Append the bundled program after the prologue.

    `from __future__` lines are the one exception to prologue-first order:
    Python only accepts them at the top of a file.
    """
    futures, body = split_future_imports(program)
    if futures:
        prologue = artifact.read_text(encoding="utf-8")
        artifact.write_text(
            "\n".join(futures) + "\n" + prologue + body + "\n", encoding="utf-8"
        )
    else:
        with artifact.open("a", encoding="utf-8") as f:
            f.write(program)


# --------------------------------------------------------------------------- #
# pipeline
# --------------------------------------------------------------------------- #


def compile_program(
    options: CompileOptions,
    registry: FileRegistry | None = None,
) -> CompileResult:
    """Capture the content folders and compile `module_path` into one executable.

    Does nothing inside an already compiled executable. Compiler failures are
    returned, not raised; failures before compilation propagate.
    """
    logger = get_logger()
    registry = registry if registry is not None else get_registry()

    if registry.mode is Mode.EXECUTABLE:
        logger.debug("Running as a compiled executable; skipping compile.")
        return CompileResult(CompileStatus.SKIPPED)

    module_path = options["module_path"]
    profile = get_profile(options.get("compiler", DEFAULT_COMPILER))
    flags = list(options.get("flags", []))
    # before any file is read
    check_flags(profile, flags)

    # --- Discovery & capture ---
    count = _build_capture_content(
        registry,
        list(options["content_folders"]),
        list(options.get("exclude", [])),
    )
    logger.info("📁 Captured %d file%s", count, plural(count))

    # --- Bootstrap generation ---
    output = options.get("output") or get_output_name(module_path)
    artifact = _build_write_bootstrap(registry)

    # --- Bundling ---
    try:
        program = bundle_program(module_path, options.get("compiler_options"))
        _build_append_bundle(artifact, program)
    except BaseException:
        logger.debug("Bundling failed; temporary artifact left at %s", artifact)
        raise

    # --- Native compilation + cleanup ---
    command = build_command(
        profile,
        artifact,
        output=output,
        flags=flags,
        args=list(options.get("args", [])),
    )
    try:
        if options.get("dry_run", False):
            logger.info("🧪 (dry-run) Would run: %s", " ".join(command))
            result = CompileResult(CompileStatus.SKIPPED, command)
        else:
            logger.info("🔨 Compiling %s → %s", module_path, output)
            result = run_compiler(command)
    finally:
        if options.get("keep_temp", False):
            logger.info("Keeping bootstrap artifact: %s", artifact)
        else:
            artifact.unlink(missing_ok=True)
            logger.trace("[CLEANUP] removed %s", artifact)

    if result.status is CompileStatus.SUCCESS:
        logger.info("✅ Compile completed → %s", output)
    return result
