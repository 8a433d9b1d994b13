from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from rustr.config import LauncherConfig
from rustr.manifest import ManifestError, manifest_path, resolve_package_name

TARGET_DIR = "target"
RELEASE_DIR = "release"


class ResolutionError(ValueError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.strip() if isinstance(code, str) and code.strip() else "resolution_failed"
        self.details = dict(details) if isinstance(details, dict) else {"reason": message}
        self.hint = hint.strip() if isinstance(hint, str) and hint.strip() else None


def _is_windows() -> bool:
    return os.name == "nt"


def binary_file_name(binary_name: str) -> str:
    return f"{binary_name}.exe" if _is_windows() else binary_name


def release_binary_path(project_dir: Path, binary_name: str) -> Path:
    return project_dir / TARGET_DIR / RELEASE_DIR / binary_file_name(binary_name)


def _current_package_name(cwd: Path) -> str | None:
    if not manifest_path(cwd).exists():
        return None
    try:
        return resolve_package_name(cwd)
    except ManifestError:
        return None


def find_project_dir(
    project_name: str,
    *,
    config: LauncherConfig,
    cwd: Path | None = None,
) -> Path:
    """
    Resolve a project name to its directory.

    The current directory wins when its Cargo.toml declares the same package
    name; otherwise the project must live at `<projects_dir>/<project_name>`.
    """

    here = cwd or Path.cwd()
    if _current_package_name(here) == project_name:
        return here

    candidate = config.projects_dir / project_name
    if not candidate.exists():
        raise ResolutionError(
            f"Project directory not found: {candidate}",
            code="project_dir_not_found",
            details={"project": project_name, "path": str(candidate)},
            hint=(
                f"Clone the project into {config.projects_dir}, run rustr from inside it, "
                "or set projects_dir in the rustr config."
            ),
        )
    return candidate
