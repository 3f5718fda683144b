# src/leaf_build/meta.py

"""Centralized program identity constants for Leaf Build."""

from typing import NamedTuple

_BASE = "leaf-build"

# CLI script name (the console entrypoint)
PROGRAM_SCRIPT = _BASE

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = _BASE.replace("-", " ").title()

# Python package / import name
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Environment variable prefix (used for LEAF_BUILD_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.replace("-", "_").upper()

# Short tagline or description for help screens and metadata
DESCRIPTION = "Bundle a Python program and its asset folders into one executable."


class Metadata(NamedTuple):
    version: str
    commit: str
