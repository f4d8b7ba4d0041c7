"""
Foundational records, configuration, and error types.

Everything in the corpus and pipeline packages depends on these modules; they
depend on nothing else inside curlint.
"""

from .config import LintConfig, load_lint_config, merge_overrides, resolve_config
from .errors import ConfigError, CurlintError, EmptySessionWarning, ParseError, UnresolvedReferenceWarning
from .models import (
    Heading,
    Issue,
    IssueKind,
    Note,
    Plan,
    Reference,
    Session,
    SessionEntry,
    Severity,
    UnresolvedReference,
)

__all__ = [
    "ConfigError",
    "CurlintError",
    "EmptySessionWarning",
    "Heading",
    "Issue",
    "IssueKind",
    "LintConfig",
    "Note",
    "ParseError",
    "Plan",
    "Reference",
    "Session",
    "SessionEntry",
    "Severity",
    "UnresolvedReference",
    "UnresolvedReferenceWarning",
    "load_lint_config",
    "merge_overrides",
    "resolve_config",
]
