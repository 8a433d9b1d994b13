from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

ARG_SEPARATOR = "--"

_HELP_FLAGS: frozenset[str] = frozenset({"-h", "--help"})
_VERSION_FLAGS: frozenset[str] = frozenset({"-V", "--version"})

_RELEASE_BIN_FLAG = "--release-bin"
_PROJECT_FLAG = "--project"


class UsageError(ValueError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.strip() if isinstance(code, str) and code.strip() else "usage_error"
        self.details = dict(details) if isinstance(details, dict) else {"reason": message}
        self.hint = (
            hint.strip()
            if isinstance(hint, str) and hint.strip()
            else "Run `rustr --help` for the accepted options."
        )


@dataclass(frozen=True)
class ReleaseBin:
    """
    Three-valued `--release-bin` state.

    `absent`: the flag was not given. `default`: the flag was given without a
    destination, so the configured bin directory is used. `explicit`: the flag
    carried a destination directory.
    """

    kind: Literal["absent", "default", "explicit"] = "absent"
    destination: str | None = None

    @classmethod
    def absent(cls) -> ReleaseBin:
        return cls(kind="absent")

    @classmethod
    def default(cls) -> ReleaseBin:
        return cls(kind="default")

    @classmethod
    def at(cls, destination: str) -> ReleaseBin:
        return cls(kind="explicit", destination=destination)

    @property
    def requested(self) -> bool:
        return self.kind != "absent"


@dataclass(frozen=True)
class ParsedCommand:
    test: bool = False
    build: bool = False
    release: bool = False
    release_bin: ReleaseBin = ReleaseBin()
    project: str | None = None
    project_name: str | None = None
    project_args: tuple[str, ...] = ()

    @property
    def selected_project(self) -> str | None:
        return self.project if self.project is not None else self.project_name


@dataclass(frozen=True)
class InfoRequest:
    kind: Literal["help", "version"]


def _missing_project_name() -> UsageError:
    return UsageError(
        "Missing project name after --project",
        code="missing_project_name",
        details={"flag": _PROJECT_FLAG},
        hint="Use `--project NAME` or `--project=NAME`.",
    )


def classify(tokens: Sequence[str]) -> ParsedCommand | InfoRequest:
    """
    Classify raw command-line tokens (program name already stripped).

    Recognized flags are consumed, the first bare token becomes the positional
    project unless `--project` appears anywhere, and everything else is kept in
    order for the launched binary. After `--` nothing is interpreted.

    Returns an `InfoRequest` as soon as a help/version flag is seen before the
    separator; raises `UsageError` when `--project` has no value.
    """

    stream = list(tokens)
    test = False
    build = False
    release = False
    release_bin = ReleaseBin.absent()
    project: str | None = None
    forwarded: list[str] = []
    separator_seen = False

    idx = 0
    while idx < len(stream):
        token = stream[idx]
        idx += 1

        if separator_seen:
            forwarded.append(token)
            continue

        if token == ARG_SEPARATOR:
            separator_seen = True
            continue

        if token in _HELP_FLAGS:
            return InfoRequest(kind="help")
        if token in _VERSION_FLAGS:
            return InfoRequest(kind="version")

        if token == "--test":
            test = True
        elif token == "--build":
            build = True
        elif token == "--release":
            release = True
        elif token == _RELEASE_BIN_FLAG or token.startswith(f"{_RELEASE_BIN_FLAG}="):
            if token != _RELEASE_BIN_FLAG:
                dest = token.removeprefix(f"{_RELEASE_BIN_FLAG}=")
                release_bin = ReleaseBin.at(dest) if dest else ReleaseBin.default()
            elif idx < len(stream) and not stream[idx].startswith("--"):
                release_bin = ReleaseBin.at(stream[idx])
                idx += 1
            else:
                release_bin = ReleaseBin.default()
        elif token == _PROJECT_FLAG or token.startswith(f"{_PROJECT_FLAG}="):
            if token != _PROJECT_FLAG:
                name = token.removeprefix(f"{_PROJECT_FLAG}=")
                if not name:
                    raise _missing_project_name()
                project = name
            elif idx < len(stream):
                project = stream[idx]
                idx += 1
            else:
                raise _missing_project_name()
        else:
            forwarded.append(token)

    # Promotion runs after the full scan so a later --project still suppresses it.
    project_name: str | None = None
    if project is None and forwarded and not forwarded[0].startswith("--"):
        project_name = forwarded.pop(0)

    return ParsedCommand(
        test=test,
        build=build,
        release=release,
        release_bin=release_bin,
        project=project,
        project_name=project_name,
        project_args=tuple(forwarded),
    )
