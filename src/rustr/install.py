from __future__ import annotations

import shutil
from pathlib import Path

from rustr.config import LauncherConfig
from rustr.pathing import ResolutionError, binary_file_name, release_binary_path


def copy_binary(
    project_dir: Path,
    binary_name: str,
    dest_dir: str | Path | None,
    *,
    config: LauncherConfig,
) -> Path:
    """Copy the release build of `binary_name` into `dest_dir` (default: bin_dir)."""

    dest_path = Path(dest_dir).expanduser() if dest_dir is not None else config.bin_dir
    source = release_binary_path(project_dir, binary_name)
    dest = dest_path / binary_file_name(binary_name)

    try:
        dest_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ResolutionError(
            f"Failed to create destination directory {dest_path}: {e}",
            code="copy_failed",
            details={"source": str(source), "dest": str(dest_path), "error": str(e)},
            hint="Pick a destination that is a writable directory.",
        ) from e

    if not source.exists():
        raise ResolutionError(
            f"Binary not found: {source}. Make sure the build completed successfully.",
            code="binary_not_found",
            details={"path": str(source), "binary_name": binary_name},
            hint="Check the `cargo build --release` output above for errors.",
        )

    try:
        shutil.copy2(source, dest)
    except OSError as e:
        raise ResolutionError(
            f"Failed to copy {source} to {dest}: {e}",
            code="copy_failed",
            details={"source": str(source), "dest": str(dest), "error": str(e)},
            hint="Check permissions on the destination and that the old binary is not running.",
        ) from e
    print(f"Copied {binary_name} to {dest_path}")
    return dest
