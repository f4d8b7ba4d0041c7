"""Parse the curriculum plan note into ordered sessions."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence, Set, Tuple

from curlint.core.models import Note, Plan, Reference, Session

from .parser import extract_link_targets, prose_lines

LOGGER = logging.getLogger(__name__)

DURATION_RE = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*(hours?|hrs?|h|minutes?|mins?|m)\b",
    re.IGNORECASE,
)
DURATION_LINE_RE = re.compile(r"^\s*(?:[-*+]\s+)?\**\s*duration\s*\**\s*[:：]\s*\**(.*)$", re.IGNORECASE)
TOP_LEVEL_ITEM_RE = re.compile(r"^ ?(?:[-*+]|\d+[.)])\s+(.*)$")
WIKILINK_DISPLAY_RE = re.compile(r"!?\[\[([^\[\]\n]+?)\]\]")
EMPHASIS_RE = re.compile(r"\*\*(\S(?:.*?\S)?)\*\*|(?<!\w)__(\S(?:.*?\S)?)__(?!\w)")

Lines = Sequence[Tuple[int, str]]


def parse_duration(text: str) -> Optional[int]:
    """Return the first ``<number> <unit>`` in ``text`` as whole minutes.

    >>> parse_duration("Session 3 (1.5h)")
    90
    >>> parse_duration("Closures, 45 min")
    45
    """
    match = DURATION_RE.search(text or "")
    if not match:
        return None
    amount = float(match.group(1).replace(",", "."))
    unit = match.group(2).lower()
    if unit.startswith("h"):
        amount *= 60
    return int(round(amount))


def plain_title(text: str) -> str:
    """Render wiki links as their display text and drop bold markers."""

    def _display(match: re.Match) -> str:
        inner = match.group(1)
        if "|" in inner:
            return inner.split("|", 1)[1].strip()
        return inner.split("#", 1)[0].strip()

    cleaned = WIKILINK_DISPLAY_RE.sub(_display, text)
    cleaned = EMPHASIS_RE.sub(lambda match: match.group(1) or match.group(2), cleaned)
    return re.sub(r"\s+", " ", cleaned.strip(" \t*_:-")).strip()


def _collect_references(lines: Lines) -> Tuple[Reference, ...]:
    seen: Dict[str, int] = {}
    for lineno, line in lines:
        for target in extract_link_targets(line):
            seen.setdefault(target, lineno)
    return tuple(Reference(target=target, line=lineno) for target, lineno in seen.items())


def _section_duration(heading_text: str, body: Lines) -> Optional[int]:
    minutes = parse_duration(heading_text)
    if minutes is not None:
        return minutes
    for _, line in body:
        match = DURATION_LINE_RE.match(line)
        if match:
            minutes = parse_duration(match.group(1))
            if minutes is not None:
                return minutes
    return None


def _sessions_from_headings(note: Note, lines: Lines, level: int) -> Tuple[List[Session], Lines, Lines]:
    starts = [heading for heading in note.headings if heading.level == level]
    boundaries = sorted(heading.line for heading in note.headings if heading.level <= level)

    sessions: List[Session] = []
    covered: Set[int] = set()
    for number, heading in enumerate(starts, start=1):
        end = next((line for line in boundaries if line > heading.line), None)
        section = [(lineno, text) for lineno, text in lines if lineno >= heading.line and (end is None or lineno < end)]
        body = [(lineno, text) for lineno, text in section if lineno > heading.line]
        covered.update(lineno for lineno, _ in section)
        sessions.append(
            Session(
                number=number,
                title=plain_title(heading.text) or f"Session {number}",
                duration_minutes=_section_duration(heading.text, body),
                references=_collect_references(section),
                line=heading.line,
            )
        )

    first = starts[0].line if starts else None
    preamble = [(lineno, text) for lineno, text in lines if first is None or lineno < first]
    loose = [(lineno, text) for lineno, text in lines if first is not None and lineno > first and lineno not in covered]
    return sessions, preamble, loose


def _sessions_from_list(lines: Lines) -> Tuple[List[Session], Lines, Lines]:
    groups: List[List[Tuple[int, str]]] = []
    preamble: List[Tuple[int, str]] = []
    loose: List[Tuple[int, str]] = []
    closed = False
    for lineno, text in lines:
        if TOP_LEVEL_ITEM_RE.match(text):
            groups.append([(lineno, text)])
            closed = False
        elif not groups:
            preamble.append((lineno, text))
        elif closed:
            loose.append((lineno, text))
        elif not text.strip() or text[:1].isspace():
            groups[-1].append((lineno, text))
        elif text.startswith("#"):
            # a heading closes the list until the next top-level item
            closed = True
            loose.append((lineno, text))
        else:
            groups[-1].append((lineno, text))

    sessions: List[Session] = []
    for number, group in enumerate(groups, start=1):
        first_line, first_text = group[0]
        item_text = TOP_LEVEL_ITEM_RE.match(first_text).group(1)
        sessions.append(
            Session(
                number=number,
                title=plain_title(item_text) or f"Session {number}",
                duration_minutes=_section_duration(item_text, group[1:]),
                references=_collect_references(group),
                line=first_line,
            )
        )
    return sessions, preamble, loose


def parse_plan(note: Note, *, heading_level: int = 2) -> Plan:
    """Split the plan note into sessions.

    Every heading at ``heading_level`` opens a session that runs until the next
    heading of the same or shallower level. A plan without such headings is read
    as a list: each top-level list item is one session. Links outside every
    session are kept as ``preamble`` or ``loose`` references so they are still
    checked.
    """
    lines = prose_lines(note.body)
    if any(heading.level == heading_level for heading in note.headings):
        sessions, preamble, loose = _sessions_from_headings(note, lines, heading_level)
        layout = "headings"
    else:
        sessions, preamble, loose = _sessions_from_list(lines)
        layout = "list"
    LOGGER.info("Plan %r: %d sessions (%s layout)", note.title, len(sessions), layout)
    return Plan(
        title=note.title,
        sessions=tuple(sessions),
        preamble=_collect_references(preamble),
        loose=_collect_references(loose),
    )


__all__ = ["parse_duration", "parse_plan", "plain_title"]
