"""Cross-reference resolution over a fully parsed corpus."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence

from curlint.core.models import Note, UnresolvedReference

LOGGER = logging.getLogger(__name__)

TitleIndex = Dict[str, List[str]]


def title_sort_key(title: str) -> tuple[str, str]:
    """Case-insensitive order; titles differing only by case keep a fixed order."""
    return title.lower(), title


def build_title_index(notes: Iterable[Note]) -> TitleIndex:
    """Map each title to the paths of the notes carrying it.

    Built once per run and handed to every stage that needs it.
    """
    index: TitleIndex = {}
    for note in notes:
        index.setdefault(note.title, []).append(note.path)
    return index


def duplicate_titles(title_index: TitleIndex) -> Dict[str, List[str]]:
    return {title: sorted(paths) for title, paths in sorted(title_index.items()) if len(paths) > 1}


def check_target(
    source: str,
    target: str,
    title_index: TitleIndex,
    *,
    line: int | None = None,
    session: str | None = None,
) -> UnresolvedReference | None:
    """Return an unresolved record unless ``target`` names exactly one note."""
    matches = title_index.get(target)
    if not matches:
        return UnresolvedReference(source=source, target=target, line=line, session=session)
    if len(matches) > 1:
        return UnresolvedReference(
            source=source, target=target, line=line, session=session, reason="ambiguous"
        )
    return None


def resolve_references(
    notes: Sequence[Note],
    title_index: TitleIndex,
    *,
    skip: Iterable[str] = (),
) -> List[UnresolvedReference]:
    """Check every note's links against the title index.

    Matching is exact and case-sensitive. Notes whose path is in ``skip`` are not
    inspected (the plan note is checked by the session indexer instead).
    """
    skipped = set(skip)
    unresolved: List[UnresolvedReference] = []
    checked = 0
    for note in notes:
        if note.path in skipped:
            continue
        for ref in note.references:
            checked += 1
            problem = check_target(note.title, ref.target, title_index, line=ref.line)
            if problem is not None:
                unresolved.append(problem)
    LOGGER.info("Checked %d references across %d notes; %d unresolved", checked, len(notes), len(unresolved))
    return unresolved


def backlinks(notes: Iterable[Note]) -> Dict[str, List[str]]:
    """Return target title -> sorted titles of the notes linking to it (self-links excluded)."""
    incoming: Dict[str, set[str]] = {}
    for note in notes:
        for target in note.targets:
            if target == note.title:
                continue
            incoming.setdefault(target, set()).add(note.title)
    return {target: sorted(sources, key=title_sort_key) for target, sources in incoming.items()}


__all__ = [
    "TitleIndex",
    "backlinks",
    "build_title_index",
    "check_target",
    "duplicate_titles",
    "resolve_references",
    "title_sort_key",
]
