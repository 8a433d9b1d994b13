from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rustr.args import InfoRequest, ParsedCommand, UsageError, classify
from rustr.banner import print_banner, print_help
from rustr.cargo import CommandFailedError, run_binary, run_cargo
from rustr.config import ConfigError, LauncherConfig, load_config
from rustr.install import copy_binary
from rustr.manifest import ManifestError, manifest_path, resolve_binary_name
from rustr.pathing import ResolutionError, find_project_dir, release_binary_path


def _enable_console_backslashreplace(stream: Any) -> None:
    reconfigure = getattr(stream, "reconfigure", None)
    if not callable(reconfigure):
        return
    if str(getattr(stream, "errors", "")).lower() == "backslashreplace":
        return
    try:
        reconfigure(errors="backslashreplace")
    except (OSError, ValueError):
        return


def _configure_console_output() -> None:
    _enable_console_backslashreplace(sys.stdout)
    _enable_console_backslashreplace(sys.stderr)


def _print_error(message: str, *, hint: str | None = None) -> None:
    print(f"error: {message}", file=sys.stderr)
    if hint:
        print(f"hint: {hint}", file=sys.stderr)


def _select_project_dir(
    parsed: ParsedCommand,
    *,
    config: LauncherConfig,
    cwd: Path,
) -> Path | None:
    selected = parsed.selected_project
    if selected is not None:
        return find_project_dir(selected, config=config, cwd=cwd)
    if manifest_path(cwd).exists():
        return cwd
    return None


def _cmd_test(project_dir: Path, *, config: LauncherConfig) -> int:
    print_banner()
    run_cargo(project_dir, ["test"], cargo_command=config.cargo_command)
    print("Test complete")
    return 0


def _cmd_build(project_dir: Path, *, config: LauncherConfig) -> int:
    print_banner()
    binary_name = resolve_binary_name(project_dir)
    print(f"Building project: {binary_name}")
    run_cargo(project_dir, ["build"], cargo_command=config.cargo_command)
    print("Build complete")
    return 0


def _cmd_release(project_dir: Path, *, config: LauncherConfig) -> int:
    print_banner()
    binary_name = resolve_binary_name(project_dir)
    print(f"Building release version of project: {binary_name}")
    run_cargo(project_dir, ["build", "--release"], cargo_command=config.cargo_command)
    print("Release build complete")
    return 0


def _cmd_release_bin(
    project_dir: Path,
    destination: str | None,
    *,
    config: LauncherConfig,
) -> int:
    print_banner()
    binary_name = resolve_binary_name(project_dir)
    print(f"Building release version of project: {binary_name}")
    run_cargo(project_dir, ["build", "--release"], cargo_command=config.cargo_command)
    print(f"Copying {binary_name} to {destination or config.bin_dir}")
    copy_binary(project_dir, binary_name, destination, config=config)
    print("Done")
    return 0


def _cmd_run(project_dir: Path, args: Sequence[str], *, config: LauncherConfig) -> int:
    binary_name = resolve_binary_name(project_dir)
    run_cargo(project_dir, ["build", "--release"], cargo_command=config.cargo_command)
    return run_binary(release_binary_path(project_dir, binary_name), args)


def _dispatch(parsed: ParsedCommand, *, config: LauncherConfig, cwd: Path) -> int:
    project_dir = _select_project_dir(parsed, config=config, cwd=cwd)
    if project_dir is None:
        print_help()
        return 0

    if parsed.test:
        return _cmd_test(project_dir, config=config)
    if parsed.build:
        return _cmd_build(project_dir, config=config)
    if parsed.release:
        return _cmd_release(project_dir, config=config)
    if parsed.release_bin.requested:
        return _cmd_release_bin(project_dir, parsed.release_bin.destination, config=config)
    return _cmd_run(project_dir, parsed.project_args, config=config)


def main(argv: Sequence[str] | None = None, *, cwd: Path | None = None) -> int:
    _configure_console_output()
    tokens = list(argv) if argv is not None else sys.argv[1:]

    try:
        parsed = classify(tokens)
    except UsageError as e:
        print_banner()
        _print_error(str(e), hint=e.hint)
        return 2

    if isinstance(parsed, InfoRequest):
        if parsed.kind == "help":
            print_help()
        else:
            print_banner()
        return 0

    try:
        config = load_config()
        return _dispatch(parsed, config=config, cwd=cwd or Path.cwd())
    except (ConfigError, ManifestError, ResolutionError) as e:
        print_banner()
        _print_error(str(e), hint=e.hint)
        return 1
    except CommandFailedError as e:
        _print_error(str(e), hint=e.hint)
        return e.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
