# tests/test_logs.py
"""Tests for leaf_build.logs."""

import re

import pytest

import leaf_build.logs as mod_logs
import leaf_build.runtime as mod_runtime

ANSI_PATTERN = re.compile(r"\033\[[0-9;]*m")


def strip_ansi(s: str) -> str:
    """Remove ANSI escape sequences for color safety."""
    return ANSI_PATTERN.sub("", s)


def _emit_all(logger: mod_logs.LoggerWithTrace) -> None:
    logger.trace("msg:trace")
    logger.debug("msg:debug")
    logger.info("msg:info")
    logger.warning("msg:warning")
    logger.error("msg:error")
    logger.critical("msg:critical")


def test_info_goes_to_stdout_and_problems_to_stderr(
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- execute ---
    _emit_all(mod_logs.get_logger())

    # --- verify ---
    captured = capsys.readouterr()
    assert captured.out.strip() == "msg:info"
    assert "⚠️  msg:warning" in captured.err
    assert "❌  msg:error" in captured.err
    assert "💥  msg:critical" in captured.err
    assert "msg:debug" not in captured.out + captured.err


def test_trace_level_shows_everything(capsys: pytest.CaptureFixture[str]) -> None:
    # --- execute ---
    with mod_logs.temporary_log_level("trace"):
        _emit_all(mod_logs.get_logger())

    # --- verify ---
    out = capsys.readouterr().out
    assert "[TRACE] msg:trace" in out
    assert "[DEBUG] msg:debug" in out
    assert mod_runtime.current_runtime["log_level"] == "info"


def test_silent_level_suppresses_everything(
    capsys: pytest.CaptureFixture[str],
) -> None:
    with mod_logs.temporary_log_level("silent"):
        _emit_all(mod_logs.get_logger())
    captured = capsys.readouterr()
    assert captured.out == captured.err == ""


def test_color_tags(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    # --- setup ---
    monkeypatch.setitem(mod_runtime.current_runtime, "use_color", True)

    # --- execute ---
    with mod_logs.temporary_log_level("debug"):
        mod_logs.get_logger().debug("colored")

    # --- verify ---
    out = capsys.readouterr().out
    assert mod_logs.CYAN in out
    assert strip_ansi(out).strip() == "[DEBUG] colored"


def test_level_name_follows_runtime() -> None:
    mod_logs.set_log_level("warning")
    assert mod_logs.get_logger().level_name == "warning"


@pytest.mark.parametrize(("raw", "expected"), [("DEBUG", "debug"), ("loud", "info")])
def test_runtime_level_is_forgiving(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: str
) -> None:
    monkeypatch.setitem(mod_runtime.current_runtime, "log_level", raw)
    assert mod_logs.get_logger().level_name == expected


def test_log_dynamic(capsys: pytest.CaptureFixture[str]) -> None:
    # --- execute ---
    mod_logs.log_dynamic("warning", "dynamic %s", "value")
    mod_logs.log_dynamic("shout", "never")

    # --- verify ---
    err = capsys.readouterr().err
    assert "dynamic value" in err
    assert "Unknown log level: 'shout'" in err


def test_error_if_not_debug_adds_traceback_at_debug(
    capsys: pytest.CaptureFixture[str],
) -> None:
    logger = mod_logs.get_logger()

    # --- execute ---
    try:
        xmsg = "broken"
        raise ValueError(xmsg)
    except ValueError:
        logger.error_if_not_debug("plain")
        with mod_logs.temporary_log_level("debug"):
            logger.error_if_not_debug("detailed")

    # --- verify ---
    err = capsys.readouterr().err
    plain, detailed = err.split("detailed", 1)
    assert "Traceback" not in plain
    assert "Traceback" in detailed


def test_colorize() -> None:
    assert mod_logs.colorize("x", mod_logs.RED, use_color=False) == "x"
    assert mod_logs.colorize("x", mod_logs.RED, use_color=True) == (
        f"{mod_logs.RED}x{mod_logs.RESET}"
    )
