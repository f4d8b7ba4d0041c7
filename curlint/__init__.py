"""
Linter and indexer for Markdown curriculum notes.

Importing the top-level package stays cheap; the CLI and pipeline modules pull
in their own dependencies.
"""

from importlib import metadata


def get_version() -> str:
    """Return the installed project version."""
    try:
        return metadata.version("curlint")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
