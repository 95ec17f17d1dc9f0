"""Installed version of mmpp."""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Version from the installed distribution metadata, "0.0.0" when not installed."""
    try:
        return version("mmpp")
    except PackageNotFoundError:
        return "0.0.0"
