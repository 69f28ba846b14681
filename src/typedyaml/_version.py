"""Version of the installed typedyaml distribution."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version

DISTRIBUTION = "typedyaml"


def get_version() -> str:
    """Get version from installed metadata, or 0.0.0 when not installed."""
    try:
        return _metadata_version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0"
