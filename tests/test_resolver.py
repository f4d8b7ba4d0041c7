from __future__ import annotations

from curlint.corpus.parser import parse_note
from curlint.corpus.resolver import (
    backlinks,
    build_title_index,
    duplicate_titles,
    resolve_references,
    title_sort_key,
)


def _note(path: str, text: str = ""):
    return parse_note(text, path=path)


def test_corpus_without_links_has_no_unresolved_references() -> None:
    notes = [_note("Syntax.md", "# Syntax\nNo links here.\n"), _note("OOP.md", "# OOP\n")]
    assert resolve_references(notes, build_title_index(notes)) == []


def test_exact_title_reference_resolves() -> None:
    notes = [_note("Foo.md", "See [[Bar]].\n"), _note("Bar.md", "# Bar\n")]
    assert resolve_references(notes, build_title_index(notes)) == []


def test_missing_target_reported_once_with_source_and_target() -> None:
    notes = [_note("Foo.md", "[[Missing]]\nagain [[Missing]]\n")]

    unresolved = resolve_references(notes, build_title_index(notes))

    assert len(unresolved) == 1
    assert unresolved[0].source == "Foo"
    assert unresolved[0].target == "Missing"
    assert unresolved[0].line == 1
    assert unresolved[0].reason == "missing"


def test_matching_is_case_sensitive() -> None:
    notes = [_note("Foo.md", "[[bar]]\n"), _note("Bar.md")]

    unresolved = resolve_references(notes, build_title_index(notes))

    assert [(u.source, u.target) for u in unresolved] == [("Foo", "bar")]


def test_shared_title_makes_reference_ambiguous() -> None:
    notes = [
        _note("swift/Closures.md"),
        _note("objc/Closures.md"),
        _note("Foo.md", "[[Closures]]\n"),
    ]
    index = build_title_index(notes)

    unresolved = resolve_references(notes, index)

    assert duplicate_titles(index) == {"Closures": ["objc/Closures.md", "swift/Closures.md"]}
    assert [(u.target, u.reason) for u in unresolved] == [("Closures", "ambiguous")]


def test_skipped_paths_are_not_inspected() -> None:
    notes = [_note("Plan.md", "[[Nowhere]]\n"), _note("Foo.md", "[[Plan]]\n")]
    assert resolve_references(notes, build_title_index(notes), skip=["Plan.md"]) == []


def test_backlinks_ignore_self_links() -> None:
    notes = [
        _note("A.md", "[[B]] [[A]]\n"),
        _note("C.md", "[[B]]\n"),
        _note("B.md"),
    ]
    assert backlinks(notes) == {"B": ["A", "C"]}


def test_backlinks_order_titles_differing_only_by_case() -> None:
    notes = [_note(f"{name}.md", "[[Target]]\n") for name in ("topic", "Topic", "alpha", "TOPIC")]
    expected = {"Target": ["alpha", "TOPIC", "Topic", "topic"]}

    assert backlinks(notes) == expected
    assert backlinks(list(reversed(notes))) == expected


def test_title_sort_key_is_total() -> None:
    titles = {"b", "B", "a", "A"}
    assert sorted(titles, key=title_sort_key) == ["A", "a", "B", "b"]
