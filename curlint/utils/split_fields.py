"""Helpers for comma/semicolon separated CLI values."""

from __future__ import annotations

from collections.abc import Sequence
import re
from typing import List

DEFAULT_DELIMITERS = r"[;,]"


def split_fields(value: str | Sequence[str] | None, *, delimiters: str = DEFAULT_DELIMITERS) -> List[str]:
    """Split a delimited option value into trimmed tokens.

    Repeated options arrive as a sequence; each entry is split in turn, so
    ``--exclude a,b --exclude c`` and ``--exclude "a;b;c"`` yield the same list.
    Duplicates are dropped while keeping first-seen order.
    """

    if not value:
        return []
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        tokens: List[str] = []
        for item in value:
            for token in split_fields(item, delimiters=delimiters):
                if token not in tokens:
                    tokens.append(token)
        return tokens
    raw_tokens = re.split(delimiters, str(value))
    return list(dict.fromkeys(token.strip() for token in raw_tokens if token.strip()))
