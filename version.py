"""
Version information for n15.

The version string lives in the VERSION file at the project root so the
server banner and packaging read the same value.
"""
from pathlib import Path


def _get_version_file_path() -> Path:
    """Get the path to the VERSION file next to this module."""
    return Path(__file__).parent / "VERSION"


def get_version() -> str:
    """Read and return the version string from VERSION file.

    Returns:
        Version string (e.g., "v0.1.0"), or "unknown" if the file is missing.
    """
    try:
        return _get_version_file_path().read_text().strip()
    except OSError:
        return "unknown"


# Expose VERSION constant at module level
VERSION = get_version()
