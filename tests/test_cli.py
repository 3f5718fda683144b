# tests/test_cli.py
"""Tests for leaf_build.cli."""

import json
import tempfile
from pathlib import Path

import pytest

import leaf_build.build as mod_build
import leaf_build.cli as mod_cli
from leaf_build.meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT
from tests.utils import (
    FakeCompiler,
    install_fake_compiler,
    make_project,
    patch_everywhere,
)


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.chdir(root)
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LEAF_BUILD_LOG_LEVEL", raising=False)
    make_project(root)
    return root


def test_main_no_config(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Without a config file or a module there is nothing to compile."""
    # --- execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main([])

    # --- verify ---
    assert code == 1
    captured = capsys.readouterr()
    assert "No build config" in captured.out + captured.err


def test_help_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        mod_cli.main(["--help"])
    assert e.value.code == 0
    out = capsys.readouterr().out
    assert "usage:" in out.lower()
    assert PROGRAM_SCRIPT in out


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert mod_cli.main(["--version"]) == 0
    assert PROGRAM_DISPLAY in capsys.readouterr().out


def test_typo_gets_a_hint(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        mod_cli.main(["main.py", "--dryrun"])
    assert e.value.code == 2
    assert "did you mean --dry-run?" in capsys.readouterr().err


def test_positional_and_content_conflict(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as e:
        mod_cli.main(["main.py", "assets", "--content", "other"])
    assert e.value.code == 2
    assert "Cannot mix positional" in capsys.readouterr().err


def test_cli_only_compile(
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    fake = install_fake_compiler(monkeypatch)

    # --- execute ---
    code = mod_cli.main(["main.py", "assets", "--compiler", "test", "-o", "app"])

    # --- verify ---
    assert code == 0
    assert len(fake.calls) == 1
    cmd = fake.calls[0]
    assert cmd[cmd.index("--output") + 1] == "app"
    assert "'assets/a.txt':[104,105]" in fake.artifacts[0]
    out = capsys.readouterr().out
    assert "CLI-only mode" in out
    assert "Compile completed" in out


def test_config_file_compile(
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    fake = install_fake_compiler(monkeypatch)
    (project / f".{PROGRAM_SCRIPT}.json").write_text(
        json.dumps(
            {
                "module_path": "main.py",
                "content_folders": ["assets"],
                "compiler": "test",
                "flags": ["--quiet"],
            }
        )
    )

    # --- execute ---
    code = mod_cli.main(["--flag=--lto"])

    # --- verify ---
    assert code == 0
    cmd = fake.calls[0]
    assert cmd.index("--quiet") < cmd.index("--lto") < cmd.index("--unstable")
    assert cmd[cmd.index("--output") + 1] == "main"
    assert f"Using config: .{PROGRAM_SCRIPT}.json" in capsys.readouterr().out


def test_compiler_failure_exit_code(
    project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    install_fake_compiler(monkeypatch, FakeCompiler(returncode=2))
    assert mod_cli.main(["main.py", "assets", "--compiler", "test"]) == 1


def test_reserved_flag_is_an_error(
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    fake = install_fake_compiler(monkeypatch)

    # --- execute ---
    code = mod_cli.main(
        ["main.py", "assets", "--compiler", "test", "--flag=--output=x"]
    )

    # --- verify ---
    assert code == 1
    assert fake.calls == []
    assert "not valid in the current context" in capsys.readouterr().err


def test_dry_run(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = install_fake_compiler(monkeypatch)
    assert mod_cli.main(["main.py", "assets", "--compiler", "test", "--dry-run"]) == 0
    assert fake.calls == []


def test_quiet_hides_info(
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    install_fake_compiler(monkeypatch)
    assert mod_cli.main(["main.py", "assets", "--compiler", "test", "-q"]) == 0
    assert "Compile completed" not in capsys.readouterr().out


def test_invalid_config_is_reported_once(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    # --- setup ---
    (project / f".{PROGRAM_SCRIPT}.json").write_text(
        json.dumps({"module_path": 5})
    )

    # --- execute ---
    code = mod_cli.main([])

    # --- verify ---
    assert code == 1
    err = capsys.readouterr().err
    assert "Failed to validate configuration file" in err
    # the raised error is silent; the summary already explained it
    assert "contains validation errors" not in err


def test_unexpected_error_is_critical(
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    def boom(*_args: object, **_kwargs: object) -> None:
        xmsg = "kaboom"
        raise KeyError(xmsg)

    patch_everywhere(monkeypatch, mod_build, "compile_program", boom)

    # --- execute ---
    code = mod_cli.main(["main.py", "assets"])

    # --- verify ---
    assert code == 1
    assert "Unexpected internal error" in capsys.readouterr().err


def test_selftest_flag() -> None:
    assert mod_cli.main(["--selftest"]) == 0
