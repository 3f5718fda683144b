# src/leaf_build/config_resolve.py


import argparse
import os
from pathlib import Path
from typing import Any

from .config import determine_log_level
from .constants import DEFAULT_COMPILER, DEFAULT_STRICT_CONFIG
from .logs import get_logger
from .runtime import current_runtime
from .types import (
    CompileConfigInput,
    CompileConfigResolved,
    CompileOptions,
    MetaCompileConfig,
    OriginType,
)

# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def _normalize_path_with_root(raw: str, context_root: Path, cwd: Path) -> str:
    """Re-anchor a user path so it reads correctly from `cwd`.

    Registry keys are the strings the capture walks with, so paths are kept
    in the form the user wrote them whenever `context_root` is `cwd`.
    Absolute paths are kept as they are.
    """
    if Path(raw).is_absolute() or context_root.resolve() == cwd.resolve():
        return raw

    anchored = os.path.relpath(context_root / raw, cwd)
    trailing = "/" if raw.endswith(("/", "\\")) else ""
    result = Path(anchored).as_posix() + trailing
    get_logger().trace("Normalized: raw=%r → %r (root=%s)", raw, result, context_root)
    return result


def _pick(
    key: str,
    cli_value: Any,
    cfg: CompileConfigInput,
    origins: dict[str, OriginType],
) -> Any:
    """Return the CLI value if given, else the config value; record the origin."""
    if cli_value is not None:
        origins[key] = "cli"
        return cli_value
    if key in cfg:
        origins[key] = "config"
        return cfg[key]  # type: ignore[literal-required]
    return None


# --------------------------------------------------------------------------- #
# main resolver
# --------------------------------------------------------------------------- #


def resolve_config(
    cfg_input: CompileConfigInput | None,
    args: argparse.Namespace,
    config_dir: Path,
    cwd: Path,
) -> CompileConfigResolved:
    """Merge CLI arguments over the config file over defaults."""
    logger = get_logger()
    cfg: CompileConfigInput = dict(cfg_input or {})  # type: ignore[assignment]
    origins: dict[str, OriginType] = {}
    meta: MetaCompileConfig = {"cli_root": cwd, "config_root": config_dir}

    def anchor(raw: str, key: str) -> str:
        root = cwd if origins.get(key) == "cli" else config_dir
        return _normalize_path_with_root(raw, root, cwd)

    # ------------------------------
    # Entry module
    # ------------------------------
    module_path = _pick("module_path", getattr(args, "module", None), cfg, origins)
    if not module_path:
        xmsg = "No entry module given (pass MODULE or set `module_path` in config)."
        raise ValueError(xmsg)
    module_path = anchor(module_path, "module_path")

    # ------------------------------
    # Content folders
    # ------------------------------
    folders_raw = _pick(
        "content_folders", getattr(args, "content", None), cfg, origins
    )
    folders = [anchor(f, "content_folders") for f in (folders_raw or [])]
    for raw in getattr(args, "add_content", None) or []:
        folders.append(raw)
    # unique, order kept
    folders = list(dict.fromkeys(folders))
    for folder in folders:
        if not Path(folder).is_dir():
            logger.warning("Content folder does not exist: %s", folder)
    if not folders:
        logger.warning("No content folders given; only the program will be compiled.")

    options: CompileOptions = {
        "module_path": module_path,
        "content_folders": folders,
    }

    # ------------------------------
    # Compiler settings
    # ------------------------------
    compiler = _pick("compiler", getattr(args, "compiler", None), cfg, origins)
    options["compiler"] = compiler or DEFAULT_COMPILER

    output = _pick("output", getattr(args, "output", None), cfg, origins)
    if output:
        options["output"] = output

    # CLI flags/args extend the config's rather than replacing them
    flags = list(cfg.get("flags", [])) + list(getattr(args, "flag", None) or [])
    if flags:
        options["flags"] = flags
    run_args = list(cfg.get("args", [])) + list(getattr(args, "arg", None) or [])
    if run_args:
        options["args"] = run_args

    exclude = _pick("exclude", getattr(args, "exclude", None), cfg, origins)
    if exclude:
        options["exclude"] = list(exclude)

    bundle = cfg.get("compiler_options")
    if bundle:
        options["compiler_options"] = {
            **bundle,
            "modules": [
                _normalize_path_with_root(m, config_dir, cwd)
                for m in bundle.get("modules", [])
            ],
        }

    options["keep_temp"] = bool(getattr(args, "keep_temp", False))
    options["dry_run"] = bool(getattr(args, "dry_run", False))

    # ------------------------------
    # Log level
    # ------------------------------
    log_level = determine_log_level(args, cfg.get("log_level"))
    current_runtime["log_level"] = log_level

    resolved: CompileConfigResolved = {
        "options": options,
        "log_level": log_level,
        "strict_config": cfg.get("strict_config", DEFAULT_STRICT_CONFIG),
        "origins": origins,
        "__meta__": meta,
    }
    logger.trace("[RESOLVE] %s", resolved)
    return resolved
