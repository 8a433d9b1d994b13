from __future__ import annotations

import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

import pytest

from rustr import APP_NAME
from rustr.cargo import CommandFailedError
from rustr.cli import main
from rustr.pathing import release_binary_path


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class _FakeCargo:
    def __init__(self, *, returncode: int = 0) -> None:
        self.calls: list[tuple[Path, list[str], str]] = []
        self.returncode = returncode

    def __call__(self, project_dir: Path, args: Sequence[str], *, cargo_command: str) -> None:
        self.calls.append((project_dir, list(args), cargo_command))
        if self.returncode != 0:
            raise CommandFailedError(
                f"Command '{cargo_command} {' '.join(args)}' failed",
                argv=[cargo_command, *args],
                returncode=self.returncode,
            )
        if "--release" in args:
            binary = release_binary_path(project_dir, "app")
            _write(binary, "binary\n")


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    cfg_path = tmp_path / "rustr.yaml"
    _write(cfg_path, "projects_dir: projects\nbin_dir: bin\ncargo: cargo-test\n")
    monkeypatch.setenv("RUSTR_CONFIG", str(cfg_path))
    _write(tmp_path / "projects" / "app" / "Cargo.toml", '[package]\nname = "app"\n')
    _write(tmp_path / "projects" / "app" / "src" / "main.rs", "fn main() {}\n")
    (tmp_path / "elsewhere").mkdir()
    return tmp_path


@pytest.fixture
def fake_cargo(monkeypatch: pytest.MonkeyPatch) -> _FakeCargo:
    fake = _FakeCargo()
    monkeypatch.setattr("rustr.cli.run_cargo", fake)
    return fake


def test_help_flag_prints_usage(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--help"]) == 0
    out = capsys.readouterr().out
    assert f"Usage: {APP_NAME} [OPTIONS] [PROJECT_NAME] [ARGS...]" in out
    assert "--release-bin [<DESTINATION>]" in out


def test_version_flag_prints_banner(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-V"]) == 0
    assert capsys.readouterr().out.startswith(f"{APP_NAME} v")


def test_missing_project_value_is_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--project"]) == 2
    err = capsys.readouterr().err
    assert "error: Missing project name after --project" in err
    assert "hint:" in err


def test_no_project_outside_cargo_dir_prints_help(
    workspace: Path, fake_cargo: _FakeCargo, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main([], cwd=workspace / "elsewhere") == 0
    assert "Usage:" in capsys.readouterr().out
    assert fake_cargo.calls == []


def test_test_mode_runs_cargo_test(
    workspace: Path, fake_cargo: _FakeCargo, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["app", "--test"], cwd=workspace / "elsewhere") == 0
    assert fake_cargo.calls == [(workspace / "projects" / "app", ["test"], "cargo-test")]
    assert "Test complete" in capsys.readouterr().out


def test_build_mode_uses_current_directory_manifest(
    workspace: Path, fake_cargo: _FakeCargo, capsys: pytest.CaptureFixture[str]
) -> None:
    project_dir = workspace / "projects" / "app"
    assert main(["--build"], cwd=project_dir) == 0
    assert fake_cargo.calls == [(project_dir, ["build"], "cargo-test")]
    out = capsys.readouterr().out
    assert "Building project: app" in out
    assert "Build complete" in out


def test_test_mode_wins_over_build(workspace: Path, fake_cargo: _FakeCargo) -> None:
    assert main(["--build", "--test", "--project", "app"], cwd=workspace) == 0
    assert [call[1] for call in fake_cargo.calls] == [["test"]]


def test_release_mode(
    workspace: Path, fake_cargo: _FakeCargo, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["--release", "app"], cwd=workspace) == 0
    assert [call[1] for call in fake_cargo.calls] == [["build", "--release"]]
    assert "Release build complete" in capsys.readouterr().out


def test_release_bin_copies_to_configured_bin_dir(
    workspace: Path, fake_cargo: _FakeCargo, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["app", "--release-bin"], cwd=workspace) == 0
    assert (workspace / "bin" / release_binary_path(Path(), "app").name).exists()
    assert "Done" in capsys.readouterr().out


def test_release_bin_copies_to_explicit_destination(
    workspace: Path, fake_cargo: _FakeCargo
) -> None:
    dest = workspace / "custom"
    assert main(["--release-bin", str(dest), "app"], cwd=workspace) == 0
    assert (dest / release_binary_path(Path(), "app").name).exists()


def test_run_mode_builds_and_forwards_args(
    workspace: Path, fake_cargo: _FakeCargo, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: list[tuple[Path, list[str]]] = []

    def _fake_run_binary(binary_path: Path, args: Sequence[str]) -> int:
        seen.append((binary_path, list(args)))
        return 7

    monkeypatch.setattr("rustr.cli.run_binary", _fake_run_binary)

    assert main(["app", "--verbose", "", "--", "--build"], cwd=workspace) == 7
    project_dir = workspace / "projects" / "app"
    assert fake_cargo.calls == [(project_dir, ["build", "--release"], "cargo-test")]
    assert seen == [(release_binary_path(project_dir, "app"), ["--verbose", "", "--build"])]


def test_unknown_project_reports_resolution_error(
    workspace: Path, fake_cargo: _FakeCargo, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["ghost"], cwd=workspace) == 1
    captured = capsys.readouterr()
    assert captured.out.startswith(f"{APP_NAME} v")
    assert "error: Project directory not found" in captured.err
    assert fake_cargo.calls == []


def test_ambiguous_bins_report_manifest_error(
    workspace: Path, fake_cargo: _FakeCargo, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(
        workspace / "projects" / "multi" / "Cargo.toml",
        '[package]\nname = "multi"\nautobins = false\n\n'
        '[[bin]]\nname = "a"\n\n[[bin]]\nname = "b"\n',
    )
    assert main(["multi", "--build"], cwd=workspace) == 1
    assert "Multiple binary targets found in Cargo.toml" in capsys.readouterr().err
    assert fake_cargo.calls == []


def test_cargo_failure_exit_code_passes_through(
    workspace: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("rustr.cli.run_cargo", _FakeCargo(returncode=101))
    assert main(["app", "--build"], cwd=workspace) == 101
    assert "failed" in capsys.readouterr().err


def test_bad_config_is_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("RUSTR_CONFIG", str(tmp_path / "missing.yaml"))
    assert main(["app"], cwd=tmp_path) == 1
    assert "Config file not found" in capsys.readouterr().err


def test_module_help_smoke() -> None:
    proc = subprocess.run(
        [sys.executable, "-m", "rustr", "--help"],
        capture_output=True,
        text=True,
        check=False,
    )
    assert proc.returncode == 0
    assert "Rust/Cargo Task Runner" in proc.stdout


def test_release_bin_destination_that_is_a_file_reports_copy_error(
    workspace: Path, fake_cargo: _FakeCargo, capsys: pytest.CaptureFixture[str]
) -> None:
    blocker = workspace / "blocker"
    blocker.write_text("not a directory\n", encoding="utf-8")

    assert main(["app", "--release-bin", str(blocker)], cwd=workspace) == 1
    err = capsys.readouterr().err
    assert "error: Failed to create destination directory" in err
    assert "hint:" in err


def test_undecodable_config_is_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    cfg_path = tmp_path / "rustr.yaml"
    cfg_path.write_bytes(b"cargo: \xff\xfe\n")
    monkeypatch.setenv("RUSTR_CONFIG", str(cfg_path))

    assert main(["app"], cwd=tmp_path) == 1
    assert "as UTF-8" in capsys.readouterr().err


def test_help_mentions_configured_bin_directory(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-h"]) == 0
    assert "configured bin directory (default ~/bin)" in capsys.readouterr().out
