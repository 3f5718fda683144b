# src/leaf_build/config_validate.py
"""Type and key checks for a parsed build config, collected into a summary."""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, get_args, get_origin, get_type_hints

from .compiler import COMPILER_PROFILES
from .constants import DEFAULT_HINT_CUTOFF, DEFAULT_STRICT_CONFIG
from .types import BundleSettings, CompileConfigInput

# --- constants ------------------------------------------------------

# spellings people reach for; dry runs are a CLI-only switch
DRYRUN_KEYS = {"dry-run", "dry_run", "dryrun", "noop", "no-op", "no_op"}
DRYRUN_MSG = (
    "Ignored {keys} {ctx}: dry runs cannot be set from a config file. "
    "Pass '--dry-run' on the command line instead."
)


# --- summary --------------------------------------------------------


@dataclass
class ValidationSummary:
    """Messages from one validation run, bucketed by severity."""

    valid: bool
    errors: list[str]
    strict_warnings: list[str]
    warnings: list[str]
    strict: bool


# --- helpers --------------------------------------------------------


def collect_msg(
    strict: bool,
    msg: str,
    summary: ValidationSummary,
    *,
    is_error: bool = False,
) -> None:
    """Append `msg` to the right bucket of `summary`.

    Errors always fail validation; warnings only do so in strict mode.
    """
    if is_error:
        summary.errors.append(msg)
    elif strict:
        summary.strict_warnings.append(msg)
    else:
        summary.warnings.append(msg)


def _type_label(expected: Any) -> str:
    origin = get_origin(expected)
    args = get_args(expected)
    if origin is list and args:
        return f"list[{getattr(args[0], '__name__', repr(args[0]))}]"
    return getattr(expected, "__name__", str(expected))


def _is_typeddict(expected: Any) -> bool:
    return isinstance(expected, type) and hasattr(expected, "__total__")


def _check_value(  # noqa: PLR0911
    strict: bool,
    context: str,
    key: str,
    val: Any,
    expected: Any,
    *,
    summary: ValidationSummary,
) -> bool:
    """Validate one value against a str/bool/list[...]/TypedDict annotation."""
    if _is_typeddict(expected):
        if not isinstance(val, dict):
            collect_msg(
                strict,
                f"{context}: key `{key}` expected an object with named keys,"
                f" got {type(val).__name__}",
                summary,
                is_error=True,
            )
            return False
        return check_schema_conformance(
            strict, val, expected, f"{context} › {key}", summary=summary
        )

    if get_origin(expected) is list:
        (subtype,) = get_args(expected)
        if not isinstance(val, list) or not all(isinstance(v, subtype) for v in val):
            collect_msg(
                strict,
                f"{context}: key `{key}` expected {_type_label(expected)},"
                f" got {type(val).__name__}",
                summary,
                is_error=True,
            )
            return False
        return True

    # bool is an int subclass; keep the check exact for bool keys
    if expected is bool and not isinstance(val, bool):
        ok = False
    elif expected is float:
        ok = isinstance(val, (int, float)) and not isinstance(val, bool)
    else:
        ok = isinstance(val, expected)
    if not ok:
        collect_msg(
            strict,
            f"{context}: key `{key}` expected {_type_label(expected)},"
            f" got {type(val).__name__}",
            summary,
            is_error=True,
        )
    return ok


def check_schema_conformance(
    strict: bool,
    cfg: dict[str, Any],
    schema: type,
    context: str,
    *,
    summary: ValidationSummary,
    prewarn: set[str] | None = None,
) -> bool:
    """Check types of known keys and report unknown ones with a hint."""
    hints = get_type_hints(schema)
    prewarn = prewarn or set()
    valid = True

    for key, val in cfg.items():
        if key in prewarn:
            continue
        if key not in hints:
            close = get_close_matches(key, list(hints), n=1, cutoff=DEFAULT_HINT_CUTOFF)
            hint = f" (did you mean `{close[0]}`?)" if close else ""
            collect_msg(strict, f"Unknown key `{key}` {context}{hint}.", summary)
            continue
        if not _check_value(strict, context, key, val, hints[key], summary=summary):
            valid = False

    return valid


# ---------------------------------------------------------------------------
# main validator
# ---------------------------------------------------------------------------


def validate_config(
    parsed_cfg: dict[str, Any], *, strict: bool | None = None
) -> ValidationSummary:
    """Check a parsed config against CompileConfigInput.

    In strict mode warnings are kept in their own bucket but still fail
    validation. With `strict=None` the config's `strict_config` key decides.
    """
    if strict is None:
        strict_from_cfg: Any = parsed_cfg.get("strict_config")
        strict = (
            strict_from_cfg
            if isinstance(strict_from_cfg, bool)
            else DEFAULT_STRICT_CONFIG
        )

    summary = ValidationSummary(
        valid=True,
        errors=[],
        strict_warnings=[],
        warnings=[],
        strict=strict,
    )
    context = "in configuration"

    # --- keys that belong on the CLI ---
    found_dryrun = DRYRUN_KEYS & set(parsed_cfg)
    if found_dryrun:
        keys = ", ".join(f"`{k}`" for k in sorted(found_dryrun))
        collect_msg(strict, DRYRUN_MSG.format(keys=keys, ctx=context), summary)

    check_schema_conformance(
        strict,
        parsed_cfg,
        CompileConfigInput,
        context,
        summary=summary,
        prewarn=found_dryrun,
    )

    # --- value checks beyond types ---
    compiler = parsed_cfg.get("compiler")
    if isinstance(compiler, str) and compiler not in COMPILER_PROFILES:
        known = ", ".join(sorted(COMPILER_PROFILES))
        collect_msg(
            strict,
            f"{context}: unknown compiler {compiler!r} (expected one of: {known})",
            summary,
            is_error=True,
        )

    bundle = parsed_cfg.get("compiler_options")
    if isinstance(bundle, dict) and not bundle:
        collect_msg(
            False,
            f"{context}: `compiler_options` is empty; "
            f"expected keys: {', '.join(get_type_hints(BundleSettings))}",
            summary,
        )

    summary.valid = not summary.errors and not summary.strict_warnings
    return summary
