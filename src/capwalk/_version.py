"""Single source of truth for the capwalk version."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version


def get_version() -> str:
    """Get the installed version from package metadata."""
    try:
        return _metadata_version("capwalk")
    except PackageNotFoundError:
        return "0.0.0"
