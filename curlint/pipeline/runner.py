"""Batch pipeline: load every note, resolve links, index the plan, build the report."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from curlint.core.config import LintConfig
from curlint.core.errors import ParseError
from curlint.core.models import Issue, IssueKind, Note, Plan
from curlint.corpus.indexer import build_session_index
from curlint.corpus.parser import load_note
from curlint.corpus.plan import parse_plan
from curlint.corpus.resolver import backlinks, build_title_index, duplicate_titles, resolve_references

from .report import LintReport, NoteSummary

LOGGER = logging.getLogger(__name__)


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts)


def discover_notes(corpus_dir: Path, config: LintConfig) -> List[Path]:
    """Return note paths matching the include patterns, minus exclusions, sorted.

    Hidden files and anything under a dot-directory (``.git``, ``.obsidian``) are skipped.
    """
    found: set[Path] = set()
    for pattern in config.include:
        for path in corpus_dir.glob(pattern):
            if not path.is_file():
                continue
            relative = path.relative_to(corpus_dir)
            if _is_hidden(relative):
                continue
            posix = relative.as_posix()
            if any(fnmatch.fnmatchcase(posix, skip) or fnmatch.fnmatchcase(path.name, skip) for skip in config.exclude):
                LOGGER.debug("Excluded %s", posix)
                continue
            found.add(path)
    return sorted(found, key=lambda p: p.relative_to(corpus_dir).as_posix())


def load_corpus(corpus_dir: Path, config: LintConfig) -> Tuple[List[Note], List[Issue]]:
    """Parse every discovered note. Unreadable files become issues and are skipped."""
    notes: List[Note] = []
    issues: List[Issue] = []
    for path in discover_notes(corpus_dir, config):
        try:
            notes.append(
                load_note(path, root=corpus_dir, encoding=config.encoding, title_source=config.title_source)
            )
        except ParseError as exc:
            relative = path.relative_to(corpus_dir).as_posix()
            LOGGER.warning("Skipping %s: %s", relative, exc.reason)
            issues.append(Issue.of(IssueKind.PARSE_ERROR, f"Cannot parse note: {exc.reason}", source=relative))
    LOGGER.info("Loaded %d notes from %s (%d unreadable)", len(notes), corpus_dir, len(issues))
    return notes, issues


def find_plan_note(notes: Sequence[Note], plan_title: str) -> Optional[Note]:
    """First note (by path) whose title is the plan title."""
    return next((note for note in notes if note.title == plan_title), None)


def run_lint(corpus_dir: Path, config: LintConfig | None = None) -> LintReport:
    """Run the full pipeline over ``corpus_dir`` and return the report.

    Stages run strictly in order and hand each other immutable values; a failure
    in one file never stops the others from being processed.
    """
    config = config or LintConfig()
    corpus_dir = corpus_dir.expanduser().resolve()

    notes, issues = load_corpus(corpus_dir, config)
    title_index = build_title_index(notes)

    for title, paths in duplicate_titles(title_index).items():
        issues.append(
            Issue.of(
                IssueKind.DUPLICATE_TITLE,
                f"Title '{title}' is shared by {len(paths)} notes: {', '.join(paths)}",
                source=paths[0],
                target=title,
            )
        )

    plan_note = find_plan_note(notes, config.plan_title)
    skip = [plan_note.path] if plan_note is not None else []
    unresolved = resolve_references(notes, title_index, skip=skip)

    plan: Optional[Plan] = None
    if plan_note is not None:
        plan = parse_plan(plan_note, heading_level=config.session_heading_level)
    index = build_session_index(
        plan,
        notes,
        title_index,
        plan_title=config.plan_title,
        report_orphans=config.report_orphans,
    )
    unresolved.extend(index.unresolved)
    issues.extend(index.issues)

    for problem in unresolved:
        issues.append(
            Issue.of(
                IssueKind.UNRESOLVED_REFERENCE,
                problem.describe(),
                source=problem.source,
                target=problem.target,
                line=problem.line,
            )
        )

    incoming = backlinks(notes)
    summaries = [
        NoteSummary(
            title=note.title,
            path=note.path,
            headings=list(note.headings),
            code_blocks=note.code_blocks,
            references=note.targets,
            backlinks=incoming.get(note.title, []),
        )
        for note in notes
    ]

    report = LintReport(
        corpus=str(corpus_dir),
        plan=plan_note.path if plan_note is not None else None,
        notes=summaries,
        sessions=index.entries,
        unresolved=unresolved,
        issues=sorted(issues, key=Issue.sort_key),
    )
    LOGGER.info("Lint finished: %s", report.summary())
    return report


__all__ = ["discover_notes", "find_plan_note", "load_corpus", "run_lint"]
