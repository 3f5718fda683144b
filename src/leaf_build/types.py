# src/leaf_build/types.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, TypedDict, Union

from typing_extensions import NotRequired

OriginType = Literal["cli", "config", "default", "code", "test"]

# a structured reference (Path or any PathLike) or a plain string
PathRef = Union[str, "os.PathLike[str]"]

# path -> one int (0..255) per byte, the embeddable form of the registry
Snapshot = dict[str, list[int]]


class BundleSettings(TypedDict, total=False):
    modules: list[str]  # helper modules stitched in ahead of the entry point
    strip_imports: list[str]  # import prefixes dropped from stitched sources


class CompilerProfile(TypedDict):
    command: list[str]
    forced_flags: list[str]  # always appended, stripped from caller flags
    output_flag: str  # the only way to set the output name
    reserved_flags: list[str]  # aliases of output_flag that are also rejected


class CompileOptions(TypedDict):
    module_path: str
    content_folders: list[str]

    flags: NotRequired[list[str]]
    output: NotRequired[str]
    args: NotRequired[list[str]]
    compiler_options: NotRequired[BundleSettings]

    compiler: NotRequired[str]
    exclude: NotRequired[list[str]]
    keep_temp: NotRequired[bool]
    dry_run: NotRequired[bool]


class CompileConfigInput(TypedDict, total=False):
    module_path: str
    content_folders: list[str]
    exclude: list[str]
    flags: list[str]
    output: str
    args: list[str]
    compiler: str
    compiler_options: BundleSettings

    # runtime behavior
    log_level: str
    strict_config: bool


class MetaCompileConfig(TypedDict):
    # sources of parameters
    cli_root: Path
    config_root: Path


class CompileConfigResolved(TypedDict):
    options: CompileOptions
    log_level: str
    strict_config: bool
    origins: dict[str, OriginType]
    __meta__: MetaCompileConfig
