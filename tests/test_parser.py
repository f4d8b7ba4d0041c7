from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from curlint.core.errors import ParseError
from curlint.corpus.parser import extract_link_targets, load_note, parse_note


def test_parse_note_extracts_headings_links_and_code_blocks() -> None:
    text = dedent(
        """\
        # Optionals

        Optionals build on [[Types]] and lead into [[Error Handling|errors]].

        ## Unwrapping

        ```swift
        let x: Int? = 5
        ```

        See also [[Closures#Capturing]].
        """
    )
    note = parse_note(text, path="swift/Optionals.md")

    assert note.title == "Optionals"
    assert [(h.level, h.text, h.line) for h in note.headings] == [(1, "Optionals", 1), (2, "Unwrapping", 5)]
    assert note.targets == ["Types", "Error Handling", "Closures"]
    assert note.references[0].line == 3
    assert note.code_blocks == 1


def test_links_inside_code_are_ignored() -> None:
    text = dedent(
        """\
        Matrices use nested arrays:

        ```swift
        let grid: [[Int]] = [[1, 2], [3, 4]]
        ```

        Inline `[[String]]` is a type, not a link; [[Collections]] is a link.
        """
    )
    note = parse_note(text, path="Arrays.md")

    assert note.targets == ["Collections"]
    assert note.code_blocks == 1


def test_unclosed_fence_counts_as_block_and_hides_rest() -> None:
    text = "intro [[A]]\n~~~objc\n[[B]]\n"
    note = parse_note(text, path="ObjC.md")

    assert note.code_blocks == 1
    assert note.targets == ["A"]


def test_title_falls_back_to_filename_without_headings() -> None:
    note = parse_note("just prose, no heading\n", path="notes/Access Control.md", title_source="heading")
    assert note.title == "Access Control"
    assert note.headings == ()


def test_heading_title_source_prefers_frontmatter_then_first_heading() -> None:
    with_frontmatter = parse_note("---\ntitle: Type Casting\n---\n# Casting\n", path="cast.md", title_source="heading")
    with_heading = parse_note("Intro line\n\n## Higher-Order Functions\n", path="hof.md", title_source="heading")

    assert with_frontmatter.title == "Type Casting"
    assert with_frontmatter.frontmatter == {"title": "Type Casting"}
    assert with_heading.title == "Higher-Order Functions"


def test_filename_title_source_ignores_headings() -> None:
    note = parse_note("# Something Else\n", path="Frameworks.md")
    assert note.title == "Frameworks"


def test_setext_headings_and_closing_hashes() -> None:
    text = "Permissions\n===========\n\nInfo.plist keys\n---\n\n### Camera ###\n"
    note = parse_note(text, path="Permissions.md")

    assert [(h.level, h.text) for h in note.headings] == [(1, "Permissions"), (2, "Info.plist keys"), (3, "Camera")]


def test_malformed_structure_is_tolerated() -> None:
    text = "---\ntitle: [unterminated\n---\n#NoSpace\n#\n- - -\n[[ ]] [[#Local anchor]]\n"
    note = parse_note(text, path="Messy.md", title_source="heading")

    assert note.title == "Messy"
    assert note.frontmatter == {}
    assert note.references == ()


def test_duplicate_links_keep_first_line() -> None:
    note = parse_note("[[Bar]]\n\n[[Bar]] and ![[Bar.md]]\n", path="Foo.md")
    assert [(ref.target, ref.line) for ref in note.references] == [("Bar", 1)]


def test_extract_link_targets_handles_alias_anchor_and_embed() -> None:
    line = "![[Diagram]] [[Memory Management|ARC]] [[Closures#Escaping]] [[Plan.md]]"
    assert extract_link_targets(line) == ["Diagram", "Memory Management", "Closures", "Plan"]


def test_load_note_uses_relative_posix_path(tmp_path: Path) -> None:
    nested = tmp_path / "swift" / "basics"
    nested.mkdir(parents=True)
    path = nested / "Syntax.md"
    path.write_text("\ufeff# Syntax\n[[Optionals]]\n", encoding="utf-8")

    note = load_note(path, root=tmp_path)

    assert note.path == "swift/basics/Syntax.md"
    assert note.title == "Syntax"
    assert note.targets == ["Optionals"]
    assert not note.body.startswith("\ufeff")


def test_load_note_raises_parse_error_on_undecodable_bytes(tmp_path: Path) -> None:
    path = tmp_path / "Broken.md"
    path.write_bytes(b"# Title\n\xff\xfe\xfa not utf-8\n")

    with pytest.raises(ParseError) as excinfo:
        load_note(path, root=tmp_path)

    assert excinfo.value.path == path
    assert "utf-8" in excinfo.value.reason


def test_load_note_raises_parse_error_on_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ParseError):
        load_note(tmp_path / "Gone.md", root=tmp_path)
