"""Map plan sessions onto notes and collect the resulting issues."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from curlint.core.models import Issue, IssueKind, Note, Plan, SessionEntry, UnresolvedReference

from .resolver import TitleIndex, backlinks, check_target, title_sort_key

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionIndex:
    """Per-session material mapping plus everything the mapping turned up."""

    entries: List[SessionEntry] = field(default_factory=list)
    unresolved: List[UnresolvedReference] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)
    orphans: List[str] = field(default_factory=list)


def find_orphans(notes: Sequence[Note], plan: Plan | None, *, plan_title: str) -> List[str]:
    """Titles of notes that no session and no other note links to."""
    linked = set(backlinks(notes))
    if plan is not None:
        for session in plan.sessions:
            linked.update(session.targets)
        linked.update(ref.target for ref in (*plan.preamble, *plan.loose))
    return sorted(
        {note.title for note in notes if note.title != plan_title and note.title not in linked},
        key=title_sort_key,
    )


def build_session_index(
    plan: Plan | None,
    notes: Sequence[Note],
    title_index: TitleIndex,
    *,
    plan_title: str,
    report_orphans: bool = True,
) -> SessionIndex:
    """Resolve every session's references.

    A missing target is an unresolved reference carrying the session title; a
    session left with no resolvable notes is only a warning. ``plan`` is ``None``
    when the corpus has no plan note.
    """
    entries: List[SessionEntry] = []
    unresolved: List[UnresolvedReference] = []
    issues: List[Issue] = []

    if plan is None:
        issues.append(
            Issue.of(
                IssueKind.MISSING_PLAN,
                f"No note titled '{plan_title}' found; session index is empty",
                target=plan_title,
            )
        )
    else:
        for ref in (*plan.preamble, *plan.loose):
            problem = check_target(plan.title, ref.target, title_index, line=ref.line)
            if problem is not None:
                unresolved.append(problem)

        for session in plan.sessions:
            resolved: List[str] = []
            missing: List[str] = []
            for ref in session.references:
                problem = check_target(plan.title, ref.target, title_index, line=ref.line, session=session.title)
                if problem is None:
                    resolved.append(ref.target)
                else:
                    unresolved.append(problem)
                    missing.append(ref.target)
            entry = SessionEntry(session=session, notes=tuple(resolved), missing=tuple(missing))
            entries.append(entry)
            if entry.is_empty:
                issues.append(
                    Issue.of(
                        IssueKind.EMPTY_SESSION,
                        f"Session {session.number} '{session.title}' references no existing notes",
                        source=plan.title,
                        line=session.line,
                    )
                )
            LOGGER.debug(
                "Session %d %r -> %d notes, %d missing", session.number, session.title, len(resolved), len(missing)
            )

    orphans: List[str] = []
    if report_orphans and plan is not None:
        orphans = find_orphans(notes, plan, plan_title=plan_title)
        paths = {note.title: note.path for note in notes}
        for title in orphans:
            issues.append(
                Issue.of(
                    IssueKind.ORPHAN_NOTE,
                    f"Note '{title}' is not referenced by any session or note",
                    source=paths.get(title, title),
                )
            )

    LOGGER.info(
        "Indexed %d sessions: %d unresolved, %d orphans", len(entries), len(unresolved), len(orphans)
    )
    return SessionIndex(entries=entries, unresolved=unresolved, issues=issues, orphans=orphans)


__all__ = ["SessionIndex", "build_session_index", "find_orphans"]
