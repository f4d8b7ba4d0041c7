"""Parsing, resolution, and session indexing for a Markdown note corpus."""

from __future__ import annotations

from .indexer import SessionIndex, build_session_index, find_orphans
from .parser import extract_link_targets, load_note, parse_note
from .plan import parse_duration, parse_plan
from .resolver import backlinks, build_title_index, duplicate_titles, resolve_references

__all__ = [
    "SessionIndex",
    "backlinks",
    "build_session_index",
    "build_title_index",
    "duplicate_titles",
    "extract_link_targets",
    "find_orphans",
    "load_note",
    "parse_duration",
    "parse_note",
    "parse_plan",
    "resolve_references",
]
