# tests/utils/__init__.py

from .compile_helpers import (
    TEST_PROFILE,
    FakeCompiler,
    install_fake_compiler,
    make_compile_options,
    make_project,
)
from .patch_everywhere import patch_everywhere
from .trace import TRACE, make_trace

__all__ = [
    "TEST_PROFILE",
    "TRACE",
    "FakeCompiler",
    "install_fake_compiler",
    "make_compile_options",
    "make_project",
    "make_trace",
    "patch_everywhere",
]
