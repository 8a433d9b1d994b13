from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

CARGO_TOML = "Cargo.toml"
MAIN_SOURCE_PATH = "src/main.rs"

_PACKAGE_HEADER = "[package]"
_BIN_HEADER = "[[bin]]"


class ManifestError(ValueError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        normalized_code = (
            code.strip() if isinstance(code, str) and code.strip() else "invalid_manifest"
        )
        normalized_details = dict(details) if isinstance(details, dict) else {}
        if not normalized_details:
            normalized_details = {"reason": message}
        normalized_hint = (
            hint.strip()
            if isinstance(hint, str) and hint.strip()
            else f"Check the [package] and [[bin]] sections of {CARGO_TOML}."
        )
        self.code = normalized_code
        self.details = normalized_details
        self.hint = normalized_hint


@dataclass
class BinTarget:
    name: str | None = None
    path: str | None = None


@dataclass
class ManifestProfile:
    package_name: str | None = None
    default_run: str | None = None
    autobins: bool = True
    bins: list[BinTarget] = field(default_factory=list)

    def bin_names(self) -> list[str]:
        return [b.name for b in self.bins if b.name is not None]


class _Section(Enum):
    NONE = "none"
    PACKAGE = "package"
    BIN = "bin"
    OTHER = "other"


def parse_string_value(line: str, key: str) -> str | None:
    """
    Parse `key = "value"` from a single manifest line.

    Only a one-character backslash escape is honored (the next character is
    taken literally). Returns None when the key differs, the value is not a
    quoted string, or the closing quote is missing.
    """

    raw_key, sep, raw_value = line.partition("=")
    if not sep or raw_key.strip() != key:
        return None

    value = raw_value.lstrip()
    if not value.startswith('"'):
        return None

    parsed: list[str] = []
    escaped = False
    for ch in value[1:]:
        if escaped:
            parsed.append(ch)
            escaped = False
            continue
        if ch == "\\":
            escaped = True
        elif ch == '"':
            return "".join(parsed)
        else:
            parsed.append(ch)
    return None


def parse_bool_value(line: str, key: str) -> bool | None:
    raw_key, sep, raw_value = line.partition("=")
    if not sep or raw_key.strip() != key:
        return None

    literal = raw_value.split("#", 1)[0].strip()
    if literal == "true":
        return True
    if literal == "false":
        return False
    return None


def scan_manifest(text: str) -> ManifestProfile:
    profile = ManifestProfile()
    section = _Section.NONE

    for line in text.split("\n"):
        trimmed = line.strip()
        if trimmed == _PACKAGE_HEADER:
            section = _Section.PACKAGE
            continue
        if trimmed == _BIN_HEADER:
            section = _Section.BIN
            profile.bins.append(BinTarget())
            continue
        if trimmed.startswith("["):
            section = _Section.OTHER
            continue

        if section is _Section.PACKAGE:
            if profile.package_name is None:
                profile.package_name = parse_string_value(trimmed, "name")
            if profile.default_run is None:
                profile.default_run = parse_string_value(trimmed, "default-run")
            autobins = parse_bool_value(trimmed, "autobins")
            if autobins is not None:
                profile.autobins = autobins
        elif section is _Section.BIN:
            current = profile.bins[-1]
            if current.name is None:
                current.name = parse_string_value(trimmed, "name")
            if current.path is None:
                current.path = parse_string_value(trimmed, "path")

    return profile


def manifest_path(project_dir: Path) -> Path:
    return project_dir / CARGO_TOML


def read_manifest(project_dir: Path) -> ManifestProfile:
    path = manifest_path(project_dir)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(
            f"Failed to read {path}: {e}",
            code="manifest_read_failed",
            details={"path": str(path), "error": str(e)},
            hint=f"Ensure {CARGO_TOML} exists in the project directory and is readable.",
        ) from e
    except UnicodeDecodeError as e:
        raise ManifestError(
            f"Failed to decode {path} as UTF-8: {e}",
            code="manifest_decode_failed",
            details={"path": str(path), "error": str(e)},
            hint=f"Save {CARGO_TOML} as UTF-8.",
        ) from e
    return scan_manifest(text)


def _require_package_name(profile: ManifestProfile, *, project_dir: Path) -> str:
    if profile.package_name is None:
        raise ManifestError(
            f"Could not find project name in {CARGO_TOML}",
            code="missing_package_name",
            details={"path": str(manifest_path(project_dir))},
            hint=f'Add `name = "..."` under [package] in {CARGO_TOML}.',
        )
    return profile.package_name


def resolve_package_name(project_dir: Path) -> str:
    return _require_package_name(read_manifest(project_dir), project_dir=project_dir)


def is_main_source_path(path: str) -> bool:
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized == MAIN_SOURCE_PATH


def _explicit_main_bin_name(bins: list[BinTarget]) -> str | None:
    names = [
        b.name
        for b in bins
        if b.path is not None and b.name is not None and is_main_source_path(b.path)
    ]
    if len(names) == 1:
        return names[0]
    return None


def resolve_binary_name(project_dir: Path) -> str:
    """
    Name of the binary `cargo build` produces for the project.

    Priority: `default-run`, a single `[[bin]]` pointing at `src/main.rs`, a
    `[[bin]]` named after the package, an autodiscovered `src/main.rs`, a
    single named `[[bin]]`. Several named bins with none of the above is an
    error; no bins at all falls back to the package name.
    """

    profile = read_manifest(project_dir)
    package_name = _require_package_name(profile, project_dir=project_dir)

    if profile.default_run is not None:
        return profile.default_run

    main_bin = _explicit_main_bin_name(profile.bins)
    if main_bin is not None:
        return main_bin

    bin_names = profile.bin_names()
    if package_name in bin_names:
        return package_name

    if profile.autobins and (project_dir / "src" / "main.rs").exists():
        return package_name

    if len(bin_names) == 1:
        return bin_names[0]

    if len(bin_names) > 1:
        raise ManifestError(
            f"Multiple binary targets found in {CARGO_TOML}. "
            f"Set [package].default-run or define a binary named '{package_name}'.",
            code="ambiguous_binary_targets",
            details={
                "path": str(manifest_path(project_dir)),
                "package_name": package_name,
                "bin_names": bin_names,
            },
            hint=f'Add `default-run = "<bin>"` under [package] in {CARGO_TOML}.',
        )

    return package_name
