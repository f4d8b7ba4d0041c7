"""Turn one Markdown note into a flat ``Note`` record.

The parser is deliberately forgiving: notes in a study corpus are hand-written,
so headings may be missing, fences may never close, and front matter may not be
valid YAML. None of that is an error. Only bytes that cannot be read or decoded
raise ``ParseError``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterator, List, Literal, Optional, Tuple

import yaml

from curlint.core.errors import ParseError
from curlint.core.models import Heading, Note, Reference

LOGGER = logging.getLogger(__name__)

TitleSource = Literal["filename", "heading"]

WIKILINK_RE = re.compile(r"!?\[\[([^\[\]\n]+?)\]\]")
INLINE_CODE_RE = re.compile(r"(`+)(.+?)\1")
FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
ATX_RE = re.compile(r"^ {0,3}(#{1,6})(?=[ \t]|$)(.*)$")
ATX_CLOSING_RE = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
SETEXT_RE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
LIST_OR_QUOTE_RE = re.compile(r"^\s*(?:[-*+>]|\d+[.)])(?:\s|$)")
FRONTMATTER_CLOSE = {"---", "..."}


@dataclass
class _Fence:
    char: str
    length: int

    def closes(self, line: str) -> bool:
        stripped = line.strip()
        return (
            len(stripped) >= self.length
            and set(stripped) == {self.char}
            and len(line) - len(line.lstrip(" ")) <= 3
        )


@dataclass
class _ScanState:
    headings: List[Heading] = field(default_factory=list)
    references: Dict[str, int] = field(default_factory=dict)
    code_blocks: int = 0


def extract_link_targets(line: str) -> List[str]:
    """Return wiki-link targets on one line, ignoring inline code spans.

    ``[[Target|Alias]]`` and ``[[Target#Section]]`` both yield ``Target``; a
    trailing ``.md`` is dropped. Self-anchors such as ``[[#Section]]`` yield nothing.
    """
    visible = INLINE_CODE_RE.sub(lambda m: " " * len(m.group(0)), line)
    targets: List[str] = []
    for match in WIKILINK_RE.finditer(visible):
        inner = match.group(1)
        target = inner.split("|", 1)[0].split("#", 1)[0].strip()
        if target.endswith(".md"):
            target = target[:-3].rstrip()
        if target:
            targets.append(target)
    return targets


def split_frontmatter(lines: List[str]) -> Tuple[Dict[str, Any], int]:
    """Return parsed front matter and the index of the first body line."""
    if not lines or lines[0].strip() != "---":
        return {}, 0
    for idx in range(1, len(lines)):
        if lines[idx].strip() in FRONTMATTER_CLOSE:
            block = "\n".join(lines[1:idx])
            try:
                data = yaml.safe_load(block)
            except yaml.YAMLError as exc:
                LOGGER.debug("Ignoring malformed front matter: %s", exc)
                return {}, idx + 1
            if data is None:
                return {}, idx + 1
            if not isinstance(data, dict):
                LOGGER.debug("Ignoring non-mapping front matter (%s)", type(data).__name__)
                return {}, idx + 1
            return data, idx + 1
    return {}, 0


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


def _atx_heading(line: str) -> Optional[Tuple[int, str]]:
    match = ATX_RE.match(line)
    if not match:
        return None
    text = ATX_CLOSING_RE.sub("", match.group(2)).strip()
    return len(match.group(1)), text


def _open_fence(line: str) -> Optional[_Fence]:
    match = FENCE_RE.match(line)
    if not match:
        return None
    marker, info = match.group(1), match.group(2)
    if marker[0] == "`" and "`" in info:
        return None
    return _Fence(char=marker[0], length=len(marker))


def _classify(lines: List[str], start: int) -> Iterator[Tuple[int, str, bool]]:
    """Yield ``(lineno, line, opens_fence)`` for every line outside fenced code."""
    fence: Optional[_Fence] = None
    for idx in range(start, len(lines)):
        line = lines[idx]
        if fence is not None:
            if fence.closes(line):
                fence = None
            continue
        fence = _open_fence(line)
        yield idx + 1, line, fence is not None


def prose_lines(text: str) -> List[Tuple[int, str]]:
    """Return ``(lineno, line)`` for body lines outside front matter and code fences."""
    lines = _strip_bom(text).splitlines()
    _, start = split_frontmatter(lines)
    return [(lineno, line) for lineno, line, opens in _classify(lines, start) if not opens]


def _scan(lines: List[str], start: int) -> _ScanState:
    state = _ScanState()
    previous: Optional[str] = None

    for lineno, line, opens_fence in _classify(lines, start):
        if opens_fence:
            state.code_blocks += 1
            previous = None
            continue

        atx = _atx_heading(line)
        if atx is not None:
            level, text = atx
            if text:
                state.headings.append(Heading(level=level, text=text, line=lineno))
            previous = None
        else:
            setext = SETEXT_RE.match(line)
            if setext:
                if previous is not None:
                    level = 1 if setext.group(1)[0] == "=" else 2
                    state.headings.append(Heading(level=level, text=previous.strip(), line=lineno - 1))
                previous = None
                continue
            if line.strip() and not LIST_OR_QUOTE_RE.match(line):
                previous = line
            else:
                previous = None

        for target in extract_link_targets(line):
            state.references.setdefault(target, lineno)

    return state


def _choose_title(
    stem: str,
    headings: List[Heading],
    frontmatter: Dict[str, Any],
    title_source: TitleSource,
) -> str:
    if title_source == "heading":
        declared = frontmatter.get("title")
        if isinstance(declared, str) and declared.strip():
            return declared.strip()
        if headings:
            return headings[0].text
    return stem


def parse_note(text: str, *, path: str, title_source: TitleSource = "filename") -> Note:
    """Parse the raw text of one note.

    ``path`` is the note's location relative to the corpus root; its stem is the
    fallback title whenever no usable heading exists.
    """
    text = _strip_bom(text)
    lines = text.splitlines()
    frontmatter, body_start = split_frontmatter(lines)
    state = _scan(lines, body_start)

    stem = PurePosixPath(path).stem
    title = _choose_title(stem, state.headings, frontmatter, title_source)
    references = tuple(Reference(target=target, line=line) for target, line in state.references.items())

    return Note(
        title=title,
        path=path,
        headings=tuple(state.headings),
        references=references,
        code_blocks=state.code_blocks,
        body=text,
        frontmatter=frontmatter,
    )


def load_note(
    path: Path,
    *,
    root: Path,
    encoding: str = "utf-8",
    title_source: TitleSource = "filename",
) -> Note:
    """Read and parse one note from disk.

    Raises ``ParseError`` when the file cannot be read or decoded.
    """
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ParseError(path, exc.strerror or str(exc)) from exc
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise ParseError(path, f"not valid {encoding} ({exc.reason} at byte {exc.start})") from exc

    try:
        relative = path.relative_to(root).as_posix()
    except ValueError:
        relative = path.name
    note = parse_note(text, path=relative, title_source=title_source)
    LOGGER.debug(
        "Parsed %s: title=%r headings=%d references=%d code_blocks=%d",
        relative,
        note.title,
        len(note.headings),
        len(note.references),
        note.code_blocks,
    )
    return note


__all__ = ["extract_link_targets", "load_note", "parse_note", "prose_lines", "split_frontmatter"]
