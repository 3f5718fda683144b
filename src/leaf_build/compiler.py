# src/leaf_build/compiler.py
"""Invoke the native ahead-of-time compiler on a bootstrap artifact."""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import FlagConflictError
from .logs import get_logger
from .types import CompilerProfile

COMPILER_PROFILES: dict[str, CompilerProfile] = {
    "nuitka": {
        "command": [sys.executable, "-m", "nuitka"],
        "forced_flags": ["--onefile", "--assume-yes-for-downloads"],
        "output_flag": "--output-filename",
        "reserved_flags": ["-o"],
    },
    "pyinstaller": {
        "command": ["pyinstaller"],
        "forced_flags": ["--onefile", "--noconfirm"],
        "output_flag": "--name",
        "reserved_flags": ["-n"],
    },
}


class CompileStatus(Enum):
    SUCCESS = "success"
    COMPILER_FAILURE = "compiler_failure"
    SPAWN_FAILURE = "spawn_failure"
    SKIPPED = "skipped"


@dataclass
class CompileResult:
    status: CompileStatus
    command: list[str] = field(default_factory=list)
    returncode: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in {CompileStatus.SUCCESS, CompileStatus.SKIPPED}


def get_profile(name: str) -> CompilerProfile:
    try:
        return COMPILER_PROFILES[name]
    except KeyError:
        known = ", ".join(sorted(COMPILER_PROFILES))
        xmsg = f"Unknown compiler {name!r} (expected one of: {known})"
        raise ValueError(xmsg) from None


def check_flags(profile: CompilerProfile, flags: list[str]) -> None:
    """Reject flags that would set the output name behind the pipeline's back."""
    reserved = [profile["output_flag"], *profile["reserved_flags"]]
    for flag in flags:
        name = flag.split("=", 1)[0]
        if name in reserved:
            xmsg = (
                f"{name!r} flag is not valid in the current context."
                " Use the 'output' option instead."
            )
            raise FlagConflictError(xmsg)


def build_command(
    profile: CompilerProfile,
    artifact: Path | str,
    *,
    output: str,
    flags: list[str] | None = None,
    args: list[str] | None = None,
) -> list[str]:
    """Assemble the compiler invocation.

    Order: compiler command, caller flags, forced flags, output, artifact,
    trailing args. Caller copies of forced flags are dropped.
    """
    flags = list(flags or [])
    check_flags(profile, flags)

    forced = {f.lower() for f in profile["forced_flags"]}
    kept = [f for f in flags if f.lower() not in forced]

    return [
        *profile["command"],
        *kept,
        *profile["forced_flags"],
        profile["output_flag"],
        output,
        str(artifact),
        *(args or []),
    ]


def run_compiler(command: list[str]) -> CompileResult:
    """Run the compiler and wait for it to exit.

    Spawn errors are reported in the result rather than raised.
    """
    logger = get_logger()
    logger.debug("Running: %s", subprocess.list2cmdline(command))

    try:
        process = subprocess.run(command, check=False)  # noqa: S603
    except OSError as e:
        logger.error("Could not start compiler %r: %s", command[0], e)  # noqa: TRY400
        return CompileResult(CompileStatus.SPAWN_FAILURE, command, error=str(e))

    success = process.returncode == 0
    logger.info("Compilation results: %s", success)
    if not success:
        logger.error("Compiler exited with status %d", process.returncode)
        return CompileResult(
            CompileStatus.COMPILER_FAILURE,
            command,
            returncode=process.returncode,
        )
    return CompileResult(CompileStatus.SUCCESS, command, returncode=0)
