"""Aggregated lint report and its renderers.

Reports carry no timestamps and every collection is ordered, so two runs over
an unchanged corpus render byte-identical output.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.table import Table

from curlint.core.models import Heading, Issue, SessionEntry, Severity, UnresolvedReference

ReportFormat = Literal["table", "json", "yaml", "markdown"]
SUFFIX_FORMATS: Dict[str, ReportFormat] = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".md": "markdown",
    ".markdown": "markdown",
}


class NoteSummary(BaseModel):
    """What the report keeps of a note: everything but the body."""

    model_config = ConfigDict(frozen=True)

    title: str
    path: str
    headings: List[Heading] = Field(default_factory=list)
    code_blocks: int = 0
    references: List[str] = Field(default_factory=list)
    backlinks: List[str] = Field(default_factory=list)


class LintReport(BaseModel):
    """Result of one lint run over a corpus directory."""

    corpus: str
    plan: Optional[str] = Field(default=None, description="Path of the plan note, if one was found.")
    notes: List[NoteSummary] = Field(default_factory=list)
    sessions: List[SessionEntry] = Field(default_factory=list)
    unresolved: List[UnresolvedReference] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)

    @property
    def errors(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Issue]:
        return [issue for issue in self.issues if issue.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def exit_code(self, *, fail_on_warning: bool = False) -> int:
        if self.errors or (fail_on_warning and self.warnings):
            return 1
        return 0

    def summary(self) -> Dict[str, int]:
        return {
            "notes": len(self.notes),
            "sessions": len(self.sessions),
            "unresolved": len(self.unresolved),
            "errors": len(self.errors),
            "warnings": len(self.warnings),
        }


def format_duration(minutes: Optional[int]) -> str:
    if minutes is None:
        return ""
    hours, rest = divmod(minutes, 60)
    if hours and rest:
        return f"{hours} h {rest} min"
    if hours:
        return f"{hours} h"
    return f"{rest} min"


def _location(issue: Issue) -> str:
    if issue.source and issue.line:
        return f"{issue.source}:{issue.line}"
    return issue.source or ""


def infer_format(output: Path | None, requested: Optional[str]) -> ReportFormat:
    """Pick the report format: explicit choice, else the output suffix, else a table."""
    if requested:
        return requested  # type: ignore[return-value]
    if output is None:
        return "table"
    return SUFFIX_FORMATS.get(output.suffix.lower(), "json")


def render_json(report: LintReport) -> str:
    return report.model_dump_json(indent=2) + "\n"


def render_yaml(report: LintReport) -> str:
    payload: Dict[str, Any] = report.model_dump(mode="json")
    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)


def render_markdown(report: LintReport) -> str:
    """Render a table of contents: sessions with their material, then every note's outline."""
    name = Path(report.corpus).name or report.corpus
    lines: List[str] = [f"# Curriculum index: {name}", ""]

    lines.extend(["## Sessions", ""])
    if not report.sessions:
        lines.extend(["_No sessions found._", ""])
    for entry in report.sessions:
        session = entry.session
        duration = format_duration(session.duration_minutes)
        suffix = f" ({duration})" if duration else ""
        lines.append(f"{session.number}. **{session.title}**{suffix}")
        for target in session.targets:
            if target in entry.missing:
                lines.append(f"    - ~~[[{target}]]~~ (missing)")
            else:
                lines.append(f"    - [[{target}]]")
        if not session.references:
            lines.append("    - _no material_")
    if report.sessions:
        lines.append("")

    lines.extend(["## Notes", ""])
    if not report.notes:
        lines.extend(["_No notes found._", ""])
    for note in report.notes:
        blocks = f", {note.code_blocks} code block{'s' if note.code_blocks != 1 else ''}" if note.code_blocks else ""
        lines.append(f"- [[{note.title}]] (`{note.path}`{blocks})")
        top = min((heading.level for heading in note.headings), default=1)
        for heading in note.headings:
            indent = "    " * (heading.level - top + 1)
            lines.append(f"{indent}- {heading.text}")
    if report.notes:
        lines.append("")

    lines.extend(["## Issues", ""])
    if not report.issues:
        lines.append("No issues found.")
    else:
        lines.append("| Severity | Kind | Location | Message |")
        lines.append("|----------|------|----------|---------|")
        for issue in report.issues:
            message = issue.message.replace("|", "\\|")
            lines.append(f"| {issue.severity.value} | {issue.kind.value} | {_location(issue)} | {message} |")
    return "\n".join(lines) + "\n"


RENDERERS = {
    "json": render_json,
    "yaml": render_yaml,
    "markdown": render_markdown,
}


def print_table(report: LintReport, console: Console) -> None:
    """Human-readable console rendering, in the style of the other rich tables."""
    if report.sessions:
        sessions = Table(title="Curriculum Sessions", show_header=True)
        sessions.add_column("#", justify="right")
        sessions.add_column("Session")
        sessions.add_column("Duration", justify="right")
        sessions.add_column("Notes")
        sessions.add_column("Missing", style="red")
        for entry in report.sessions:
            sessions.add_row(
                str(entry.session.number),
                entry.session.title,
                format_duration(entry.session.duration_minutes),
                ", ".join(entry.notes) or "-",
                ", ".join(entry.missing),
                style="yellow" if entry.is_empty else None,
            )
        console.print(sessions)

    if report.issues:
        table = Table(title="Corpus Validation", show_header=True)
        table.add_column("Severity", justify="center")
        table.add_column("Category")
        table.add_column("Location")
        table.add_column("Message")
        for issue in report.issues:
            style = "bold red" if issue.severity is Severity.ERROR else "yellow"
            table.add_row(issue.severity.value, issue.category_name, _location(issue), issue.message, style=style)
        console.print(table)

    counts = report.summary()
    console.print(
        f"{counts['notes']} notes, {counts['sessions']} sessions: "
        f"{counts['errors']} errors, {counts['warnings']} warnings"
    )
    if not report.issues:
        console.print("[green]Corpus looks good![/green]")


def render(report: LintReport, fmt: ReportFormat) -> str:
    """Render a non-table format to text."""
    try:
        renderer = RENDERERS[fmt]
    except KeyError as exc:
        raise ValueError(f"Unknown report format '{fmt}'. Valid options: {', '.join(RENDERERS)}") from exc
    return renderer(report)


__all__ = [
    "LintReport",
    "NoteSummary",
    "ReportFormat",
    "format_duration",
    "infer_format",
    "print_table",
    "render",
    "render_json",
    "render_markdown",
    "render_yaml",
]
