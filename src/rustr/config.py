from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from rustr.cargo import DEFAULT_CARGO_COMMAND

CONFIG_ENV_VAR = "RUSTR_CONFIG"

_CONFIG_VERSION = 1
_ALLOWED_KEYS: frozenset[str] = frozenset({"version", "projects_dir", "bin_dir", "cargo"})

DEFAULT_PROJECTS_DIR = Path("dev") / "Rust"
DEFAULT_BIN_DIR = Path("bin")


class ConfigError(ValueError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.strip() if isinstance(code, str) and code.strip() else "invalid_config"
        self.details = dict(details) if isinstance(details, dict) else {"reason": message}
        self.hint = (
            hint.strip()
            if isinstance(hint, str) and hint.strip()
            else f"Fix the rustr config file (or unset {CONFIG_ENV_VAR}) and rerun."
        )


@dataclass(frozen=True)
class LauncherConfig:
    projects_dir: Path
    bin_dir: Path
    cargo_command: str = DEFAULT_CARGO_COMMAND
    source_path: Path | None = None


def find_home_directory() -> Path:
    try:
        return Path.home()
    except RuntimeError as e:
        raise ConfigError(
            "Could not find home directory",
            code="home_not_found",
            details={"error": str(e)},
            hint="Set HOME (or USERPROFILE on Windows), or set projects_dir and bin_dir explicitly.",
        ) from e


def default_config_path(home: Path | None = None) -> Path:
    return (home or find_home_directory()) / ".config" / "rustr" / "config.yaml"


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(
            f"Failed to read {path}: {e}",
            code="config_read_failed",
            details={"path": str(path), "error": str(e)},
        ) from e
    except UnicodeDecodeError as e:
        raise ConfigError(
            f"Failed to decode {path} as UTF-8: {e}",
            code="config_decode_failed",
            details={"path": str(path), "error": str(e)},
            hint="Save the rustr config file as UTF-8.",
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML in {path}: {e}",
            code="config_parse_failed",
            details={"path": str(path), "error": str(e)},
        ) from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a YAML mapping in {path}, got {type(raw).__name__}.",
            code="config_not_mapping",
            details={"path": str(path), "yaml_type": type(raw).__name__},
        )
    return raw


def _parse_dir(value: Any, *, root: Path, path: Path, field: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"Expected non-empty string for {field} in {path}.",
            code="config_invalid_value",
            details={"path": str(path), "field": field},
        )
    raw = Path(value.strip()).expanduser()
    return raw if raw.is_absolute() else (root / raw)


def _parse_config(data: Mapping[str, Any], *, path: Path, home: Path | None) -> LauncherConfig:
    unknown = set(data) - _ALLOWED_KEYS
    if unknown:
        unknown_list = ", ".join(sorted(unknown))
        allowed_list = ", ".join(sorted(_ALLOWED_KEYS))
        raise ConfigError(
            f"Unknown keys in {path}: {unknown_list}. Allowed: {allowed_list}.",
            code="config_unknown_keys",
            details={"path": str(path), "unknown": sorted(unknown)},
        )

    version = data.get("version", _CONFIG_VERSION)
    if version != _CONFIG_VERSION:
        raise ConfigError(
            f"Unsupported config version in {path}: {version!r} (expected {_CONFIG_VERSION}).",
            code="config_unsupported_version",
            details={"path": str(path), "version": version},
        )

    root = path.parent
    projects_dir = (
        _parse_dir(data["projects_dir"], root=root, path=path, field="projects_dir")
        if data.get("projects_dir") is not None
        else (home or find_home_directory()) / DEFAULT_PROJECTS_DIR
    )
    bin_dir = (
        _parse_dir(data["bin_dir"], root=root, path=path, field="bin_dir")
        if data.get("bin_dir") is not None
        else (home or find_home_directory()) / DEFAULT_BIN_DIR
    )

    cargo = data.get("cargo", DEFAULT_CARGO_COMMAND)
    if not isinstance(cargo, str) or not cargo.strip():
        raise ConfigError(
            f"Expected non-empty string for cargo in {path}.",
            code="config_invalid_value",
            details={"path": str(path), "field": "cargo"},
        )

    return LauncherConfig(
        projects_dir=projects_dir,
        bin_dir=bin_dir,
        cargo_command=cargo.strip(),
        source_path=path,
    )


def load_config(
    path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> LauncherConfig:
    """
    Load launcher settings.

    Lookup order: explicit `path`, then `$RUSTR_CONFIG`, then
    `~/.config/rustr/config.yaml`. Only the default location may be absent, in
    which case the built-in defaults (`~/dev/Rust`, `~/bin`, `cargo`) apply.
    """

    environ = os.environ if env is None else env
    required = True
    if path is None:
        env_value = str(environ.get(CONFIG_ENV_VAR, "")).strip()
        if env_value:
            path = Path(env_value).expanduser()
        else:
            path = default_config_path(home)
            required = False

    if not path.is_file():
        if required:
            raise ConfigError(
                f"Config file not found: {path}",
                code="config_not_found",
                details={"path": str(path)},
                hint=f"Create the file or unset {CONFIG_ENV_VAR}.",
            )
        base = home or find_home_directory()
        return LauncherConfig(
            projects_dir=base / DEFAULT_PROJECTS_DIR,
            bin_dir=base / DEFAULT_BIN_DIR,
        )

    return _parse_config(_load_yaml_mapping(path), path=path, home=home)
