"""Typed records shared by the parser, resolver, indexer, and report."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field

from .errors import EmptySessionWarning, UnresolvedReferenceWarning


class Heading(BaseModel):
    """One ATX or setext heading inside a note."""

    model_config = ConfigDict(frozen=True)

    level: int = Field(..., ge=1, le=6)
    text: str
    line: int = Field(..., ge=1)


class Reference(BaseModel):
    """A wiki-style link target and the line where it first appears."""

    model_config = ConfigDict(frozen=True)

    target: str
    line: int = Field(..., ge=1)


class Note(BaseModel):
    """A single Markdown document in the corpus."""

    model_config = ConfigDict(frozen=True)

    title: str
    path: str = Field(..., description="Path relative to the corpus root, POSIX separators.")
    headings: Tuple[Heading, ...] = ()
    references: Tuple[Reference, ...] = ()
    code_blocks: int = Field(default=0, ge=0)
    body: str = ""
    frontmatter: Dict[str, Any] = Field(default_factory=dict)

    @property
    def targets(self) -> List[str]:
        return [ref.target for ref in self.references]


class UnresolvedReference(BaseModel):
    """A cross-reference whose target matches zero or several note titles."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    line: Optional[int] = None
    session: Optional[str] = None
    reason: Literal["missing", "ambiguous"] = "missing"

    def describe(self) -> str:
        origin = f"{self.source} (session '{self.session}')" if self.session else self.source
        where = f" line {self.line}" if self.line else ""
        if self.reason == "ambiguous":
            return f"{origin}{where} links to [[{self.target}]], which matches more than one note"
        return f"{origin}{where} links to missing note [[{self.target}]]"


class Session(BaseModel):
    """An ordered curriculum unit parsed from the plan note."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1)
    title: str
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    references: Tuple[Reference, ...] = ()
    line: int = Field(default=1, ge=1)

    @property
    def targets(self) -> List[str]:
        return [ref.target for ref in self.references]


class Plan(BaseModel):
    """Sessions parsed from the plan note.

    ``preamble`` holds links before the first session and ``loose`` the links
    after it that fall outside every session (an appendix, a resources list).
    """

    model_config = ConfigDict(frozen=True)

    title: str
    sessions: Tuple[Session, ...] = ()
    preamble: Tuple[Reference, ...] = ()
    loose: Tuple[Reference, ...] = ()


class SessionEntry(BaseModel):
    """A session together with the notes it resolves to."""

    model_config = ConfigDict(frozen=True)

    session: Session
    notes: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.notes


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueKind(str, Enum):
    """Categories of problems collected during a run."""

    PARSE_ERROR = "parse_error"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    DUPLICATE_TITLE = "duplicate_title"
    EMPTY_SESSION = "empty_session"
    ORPHAN_NOTE = "orphan_note"
    MISSING_PLAN = "missing_plan"

    @property
    def severity(self) -> Severity:
        if self in (IssueKind.PARSE_ERROR, IssueKind.UNRESOLVED_REFERENCE, IssueKind.DUPLICATE_TITLE):
            return Severity.ERROR
        return Severity.WARNING

    @property
    def category(self) -> Optional[Type[UserWarning]]:
        return _WARNING_CATEGORIES.get(self)


_WARNING_CATEGORIES: Dict[IssueKind, Type[UserWarning]] = {
    IssueKind.UNRESOLVED_REFERENCE: UnresolvedReferenceWarning,
    IssueKind.EMPTY_SESSION: EmptySessionWarning,
}


class Issue(BaseModel):
    """A single collected problem. Issues are reported, never raised."""

    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    severity: Severity
    message: str
    source: Optional[str] = None
    target: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def of(cls, kind: IssueKind, message: str, **fields: Any) -> "Issue":
        return cls(kind=kind, severity=kind.severity, message=message, **fields)

    @property
    def category_name(self) -> str:
        category = self.kind.category
        return category.__name__ if category else self.kind.value

    def sort_key(self) -> tuple:
        return (
            0 if self.severity is Severity.ERROR else 1,
            self.kind.value,
            self.source or "",
            self.line or 0,
            self.target or "",
            self.message,
        )


__all__ = [
    "Heading",
    "Issue",
    "IssueKind",
    "Note",
    "Plan",
    "Reference",
    "Session",
    "SessionEntry",
    "Severity",
    "UnresolvedReference",
]
