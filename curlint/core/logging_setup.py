"""Logging configuration for the command-line entry point."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "curlint"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Route curlint log records to stderr so stdout carries only the report."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if not any(getattr(handler, "_curlint", False) for handler in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        handler._curlint = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger


__all__ = ["LOGGER_NAME", "configure_logging"]
