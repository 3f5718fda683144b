# src/leaf_build/__init__.py

"""Leaf Build: bundle a Python program and its assets into one executable.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use, custom integrations, or plugins.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - compile_program()   → Capture content folders and run the native compiler
    - read_bytes()        → Read a file through the virtual file registry
    - read_text()         → Same, decoded as UTF-8 (malformed bytes replaced)
    - main()              → CLI entrypoint
"""

from .actions import get_metadata, run_selftest
from .build import compile_program, iter_content_files
from .bundler import bundle_program, split_future_imports, strip_imports
from .cli import main
from .compiler import (
    COMPILER_PROFILES,
    CompileResult,
    CompileStatus,
    build_command,
    check_flags,
    get_profile,
    run_compiler,
)
from .config import (
    determine_log_level,
    find_config,
    load_and_validate_config,
    load_config,
    parse_config,
)
from .config_resolve import resolve_config
from .config_validate import ValidationSummary, validate_config
from .constants import (
    DEFAULT_COMPILER,
    DEFAULT_ENV_BUILD_MODE,
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_STRICT_CONFIG,
    FILE_SYSTEM_SLOT,
)
from .errors import FlagConflictError, InvalidPathError, VirtualFileNotFoundError
from .logs import LEVEL_ORDER, get_logger, set_log_level
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .mode import (
    Mode,
    RegistryState,
    detect_mode,
    get_embedded_snapshot,
    get_mode,
    is_executable,
    set_mode,
)
from .paths import (
    candidate_keys,
    get_file_directory,
    get_file_path,
    get_filename,
    get_output_name,
)
from .registry import (
    FileRegistry,
    get_registry,
    read_bytes,
    read_bytes_async,
    read_text,
    read_text_async,
    rename,
    rename_async,
)
from .runtime import Runtime, current_runtime
from .snapshot import (
    decode_snapshot,
    encode_snapshot,
    parse_snapshot,
    render_prologue,
    render_snapshot,
)
from .types import (
    BundleSettings,
    CompileConfigInput,
    CompileConfigResolved,
    CompileOptions,
    CompilerProfile,
    PathRef,
    Snapshot,
)


__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "get_metadata",
    "main",
    "run_selftest",
    #
    # --- Compile pipeline ---
    "bundle_program",
    "build_command",
    "check_flags",
    "compile_program",
    "get_profile",
    "iter_content_files",
    "run_compiler",
    "split_future_imports",
    "strip_imports",
    "COMPILER_PROFILES",
    "CompileResult",
    "CompileStatus",
    #
    # --- Virtual file registry ---
    "FileRegistry",
    "get_registry",
    "read_bytes",
    "read_bytes_async",
    "read_text",
    "read_text_async",
    "rename",
    "rename_async",
    "candidate_keys",
    "get_file_directory",
    "get_file_path",
    "get_filename",
    "get_output_name",
    #
    # --- Snapshot / mode ---
    "decode_snapshot",
    "encode_snapshot",
    "parse_snapshot",
    "render_prologue",
    "render_snapshot",
    "detect_mode",
    "get_embedded_snapshot",
    "get_mode",
    "is_executable",
    "set_mode",
    "Mode",
    "RegistryState",
    #
    # --- Config Handling ---
    "determine_log_level",
    "find_config",
    "load_and_validate_config",
    "load_config",
    "parse_config",
    "resolve_config",
    "validate_config",
    "ValidationSummary",
    #
    # --- Constants / Metadata / Runtime ---
    "DEFAULT_COMPILER",
    "DEFAULT_ENV_BUILD_MODE",
    "DEFAULT_ENV_LOG_LEVEL",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_STRICT_CONFIG",
    "FILE_SYSTEM_SLOT",
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "current_runtime",
    #
    # --- logging / errors ---
    "LEVEL_ORDER",
    "get_logger",
    "set_log_level",
    "FlagConflictError",
    "InvalidPathError",
    "VirtualFileNotFoundError",
    #
    # --- Types ---
    "BundleSettings",
    "CompileConfigInput",
    "CompileConfigResolved",
    "CompileOptions",
    "CompilerProfile",
    "PathRef",
    "Runtime",
    "Snapshot",
]
