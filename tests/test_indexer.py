from __future__ import annotations

from curlint.core.models import IssueKind, Severity
from curlint.corpus.indexer import build_session_index, find_orphans
from curlint.corpus.parser import parse_note
from curlint.corpus.plan import parse_plan
from curlint.corpus.resolver import build_title_index


def _corpus(plan_text: str, *others: str):
    plan_note = parse_note(plan_text, path="Plan.md")
    notes = [plan_note] + [parse_note(f"# {title}\n", path=f"{title}.md") for title in others]
    return parse_plan(plan_note), notes, build_title_index(notes)


def test_sessions_map_to_existing_notes() -> None:
    plan, notes, index = _corpus("## Day 1\n[[Syntax]] [[Optionals]]\n", "Syntax", "Optionals")

    result = build_session_index(plan, notes, index, plan_title="Plan")

    assert len(result.entries) == 1
    assert result.entries[0].notes == ("Syntax", "Optionals")
    assert result.entries[0].missing == ()
    assert result.unresolved == []
    assert result.issues == []


def test_session_with_missing_note_reports_unresolved_and_empty_warning() -> None:
    plan, notes, index = _corpus("## Day 1\n[[NotThere]]\n")

    result = build_session_index(plan, notes, index, plan_title="Plan")

    assert [(u.source, u.target, u.session) for u in result.unresolved] == [("Plan", "NotThere", "Day 1")]
    assert [issue.kind for issue in result.issues] == [IssueKind.EMPTY_SESSION]
    assert result.issues[0].severity is Severity.WARNING
    assert result.entries[0].missing == ("NotThere",)


def test_session_without_material_is_only_a_warning() -> None:
    plan, notes, index = _corpus("## Day 1\n[[Syntax]]\n## Q&A\nOpen questions.\n", "Syntax")

    result = build_session_index(plan, notes, index, plan_title="Plan")

    assert result.unresolved == []
    assert [(i.kind, i.severity) for i in result.issues] == [(IssueKind.EMPTY_SESSION, Severity.WARNING)]
    assert "Q&A" in result.issues[0].message


def test_orphans_exclude_plan_and_linked_notes() -> None:
    plan_note = parse_note("## Day 1\n[[Syntax]]\n", path="Plan.md")
    notes = [
        plan_note,
        parse_note("[[Types]]\n", path="Syntax.md"),
        parse_note("", path="Types.md"),
        parse_note("", path="Drafts.md"),
    ]
    plan = parse_plan(plan_note)

    assert find_orphans(notes, plan, plan_title="Plan") == ["Drafts"]

    result = build_session_index(plan, notes, build_title_index(notes), plan_title="Plan")
    orphan_issues = [i for i in result.issues if i.kind is IssueKind.ORPHAN_NOTE]
    assert [(i.source, i.severity) for i in orphan_issues] == [("Drafts.md", Severity.WARNING)]


def test_orphan_reporting_can_be_disabled() -> None:
    plan, notes, index = _corpus("## Day 1\n[[Syntax]]\n", "Syntax", "Unused")

    result = build_session_index(plan, notes, index, plan_title="Plan", report_orphans=False)

    assert result.orphans == []
    assert result.issues == []


def test_missing_plan_yields_warning_and_empty_index() -> None:
    notes = [parse_note("", path="Syntax.md")]

    result = build_session_index(None, notes, build_title_index(notes), plan_title="Plan")

    assert result.entries == []
    assert [(i.kind, i.severity) for i in result.issues] == [(IssueKind.MISSING_PLAN, Severity.WARNING)]


def test_broken_preamble_link_is_unresolved_without_session() -> None:
    plan, notes, index = _corpus("Intro [[Ghost]]\n## Day 1\n[[Syntax]]\n", "Syntax")

    result = build_session_index(plan, notes, index, plan_title="Plan")

    assert [(u.target, u.session) for u in result.unresolved] == [("Ghost", None)]


def test_orphans_with_case_colliding_titles_have_fixed_order() -> None:
    plan_note = parse_note("## Day 1\n", path="Plan.md")
    notes = [plan_note] + [parse_note("", path=f"{name}.md") for name in ("topic", "Topic", "TOPIC")]

    assert find_orphans(notes, parse_plan(plan_note), plan_title="Plan") == ["TOPIC", "Topic", "topic"]


def test_links_outside_every_session_are_checked() -> None:
    plan, notes, index = _corpus("## Day 1\n[[Syntax]]\n# Appendix\n[[Ghost]] [[Extra]]\n", "Syntax", "Extra")

    result = build_session_index(plan, notes, index, plan_title="Plan")

    assert [(u.target, u.session, u.line) for u in result.unresolved] == [("Ghost", None, 4)]
    assert result.orphans == []
