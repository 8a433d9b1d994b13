from __future__ import annotations

from rustr import APP_NAME, __version__

_OPTIONS: tuple[tuple[str, str], ...] = (
    ("      --test", "Run tests for the project"),
    ("      --build", "Build the project"),
    ("      --release", "Build in release mode"),
    (
        "      --release-bin [<DESTINATION>]",
        "Build in release mode and copy to the configured bin directory (default ~/bin) "
        "or to DESTINATION",
    ),
    ("      --project <PROJECT>", "Explicitly specify the target project"),
    ("      --", "Stop option parsing and pass remaining arguments to the target project"),
    ("  -h, --help", "Print help"),
    ("  -V, --version", "Print version"),
)


def banner_text() -> str:
    return f"{APP_NAME} v{__version__}"


def help_text() -> str:
    lines = [
        banner_text(),
        "",
        "Rust/Cargo Task Runner",
        "",
        f"Usage: {APP_NAME} [OPTIONS] [PROJECT_NAME] [ARGS...]",
        "",
        "Arguments:",
        "  [PROJECT_NAME]",
        "          Project name",
        "  [ARGS]...",
        "          Arguments to pass to the target project",
        "",
        "Options:",
    ]
    for flag, description in _OPTIONS:
        lines.append(flag)
        lines.append(f"          {description}")
    return "\n".join(lines)


def print_banner() -> None:
    print(banner_text())


def print_help() -> None:
    print(help_text())
