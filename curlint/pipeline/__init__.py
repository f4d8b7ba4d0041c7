"""Lint pipeline entry points for curlint."""

from __future__ import annotations

from .report import LintReport, NoteSummary, infer_format, print_table, render
from .runner import discover_notes, load_corpus, run_lint

__all__ = [
    "LintReport",
    "NoteSummary",
    "discover_notes",
    "infer_format",
    "load_corpus",
    "print_table",
    "render",
    "run_lint",
]
