from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

DEFAULT_CARGO_COMMAND = "cargo"


class CommandFailedError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        argv: Sequence[str],
        returncode: int | None,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.argv = list(argv)
        self.returncode = returncode
        self.hint = hint.strip() if isinstance(hint, str) and hint.strip() else None
        self.details = dict(details) if isinstance(details, dict) else {}

    @property
    def exit_code(self) -> int:
        if isinstance(self.returncode, int) and self.returncode != 0:
            return self.returncode
        return 1


def run_cargo(
    project_dir: Path,
    args: Sequence[str],
    *,
    cargo_command: str = DEFAULT_CARGO_COMMAND,
) -> None:
    """Run cargo in `project_dir` with output going straight to the terminal."""

    argv = [cargo_command, *args]
    try:
        proc = subprocess.run(argv, cwd=str(project_dir), check=False)
    except FileNotFoundError as e:
        raise CommandFailedError(
            f"Command '{cargo_command}' not found",
            argv=argv,
            returncode=None,
            hint="Install the Rust toolchain (https://rustup.rs) or set `cargo` in the rustr config.",
            details={"error": str(e)},
        ) from e
    except OSError as e:
        raise CommandFailedError(
            f"Failed to start '{cargo_command}': {e}",
            argv=argv,
            returncode=None,
            details={"error": str(e)},
        ) from e

    if proc.returncode != 0:
        raise CommandFailedError(
            f"Command '{' '.join(argv)}' failed",
            argv=argv,
            returncode=proc.returncode,
            details={"cwd": str(project_dir)},
        )


def run_binary(binary_path: Path, args: Sequence[str]) -> int:
    try:
        proc = subprocess.run([str(binary_path), *args], check=False)
    except OSError as e:
        raise CommandFailedError(
            f"Failed to start {binary_path}: {e}",
            argv=[str(binary_path), *args],
            returncode=None,
            hint="Make sure `cargo build --release` produced the binary.",
            details={"error": str(e)},
        ) from e
    # Negative return codes mean the child died from a signal.
    if proc.returncode < 0:
        return 1
    return proc.returncode
