"""Exception and warning taxonomy for corpus linting."""

from __future__ import annotations

from pathlib import Path


class CurlintError(Exception):
    """Base class for errors raised by curlint."""


class ParseError(CurlintError):
    """A note could not be read or decoded.

    Only raised for unreadable input; unexpected Markdown structure is never an error.
    """

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot parse {self.path}: {reason}")


class ConfigError(CurlintError):
    """The lint configuration file is missing, malformed, or invalid."""


class UnresolvedReferenceWarning(UserWarning):
    """A cross-reference target does not match exactly one note title."""


class EmptySessionWarning(UserWarning):
    """A plan session maps to no existing notes."""


__all__ = [
    "ConfigError",
    "CurlintError",
    "EmptySessionWarning",
    "ParseError",
    "UnresolvedReferenceWarning",
]
