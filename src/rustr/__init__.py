from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version

from rustr.args import InfoRequest, ParsedCommand, ReleaseBin, UsageError, classify
from rustr.manifest import (
    ManifestError,
    ManifestProfile,
    resolve_binary_name,
    resolve_package_name,
)

APP_NAME = "rustr"


def _resolve_version() -> str:
    try:
        return package_version(APP_NAME)
    except PackageNotFoundError:
        return "0+unknown"


__version__ = _resolve_version()

__all__ = [
    "__version__",
    "APP_NAME",
    "InfoRequest",
    "ManifestError",
    "ManifestProfile",
    "ParsedCommand",
    "ReleaseBin",
    "UsageError",
    "classify",
    "resolve_binary_name",
    "resolve_package_name",
]
