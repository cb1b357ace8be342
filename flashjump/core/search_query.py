"""Search query variants and the regular expressions they compile to.

``SearchQuery`` is a closed union: every consumer handles exactly the
variants listed in ``SEARCH_QUERY_TYPES``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union


def _compile(pattern_text: str, flags: int = 0) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern_text, flags)
    except re.error:
        return None


@dataclass(frozen=True)
class LiteralQuery:
    """Case-insensitive exact text."""

    raw_text: str

    def compile(self) -> re.Pattern[str] | None:
        if not self.raw_text:
            return None
        return _compile(re.escape(self.raw_text), re.IGNORECASE)

    def highlight_length(self, text: str, offset: int) -> int:
        return len(self.raw_text)


@dataclass(frozen=True)
class RegexQuery:
    """User supplied pattern; an invalid pattern simply matches nothing."""

    raw_text: str

    def compile(self) -> re.Pattern[str] | None:
        if not self.raw_text:
            return None
        return _compile(self.raw_text, re.IGNORECASE)

    def highlight_length(self, text: str, offset: int) -> int:
        pattern = self.compile()
        if pattern is None:
            return 0
        match = pattern.match(text, offset)
        if match is None:
            return len(self.raw_text)
        return match.end() - match.start()


@dataclass(frozen=True)
class WordStartQuery:
    """Literal text that may only begin at a word boundary."""

    raw_text: str

    def compile(self) -> re.Pattern[str] | None:
        if not self.raw_text:
            return None
        return _compile(r"\b" + re.escape(self.raw_text), re.IGNORECASE)

    def highlight_length(self, text: str, offset: int) -> int:
        return len(self.raw_text)


class LineAnchor(Enum):
    START = "start"
    END = "end"
    INDENT = "indent"


_LINE_PATTERNS: dict[LineAnchor, tuple[str, str]] = {
    # anchor: (display text, regex); the "jump_at" group marks the jump offset.
    LineAnchor.START: ("^", r"^(?P<jump_at>)"),
    LineAnchor.END: ("$", r"(?P<jump_at>)$"),
    LineAnchor.INDENT: (r"^\s*\S", r"^[^\S\n]*(?P<jump_at>\S)"),
}


@dataclass(frozen=True)
class LinePattern:
    anchor: LineAnchor

    @property
    def raw_text(self) -> str:
        return _LINE_PATTERNS[self.anchor][0]

    def compile(self) -> re.Pattern[str] | None:
        return _compile(_LINE_PATTERNS[self.anchor][1], re.MULTILINE)

    def highlight_length(self, text: str, offset: int) -> int:
        return 1 if self.anchor is LineAnchor.INDENT else 0


@dataclass(frozen=True)
class AllWordsQuery:
    @property
    def raw_text(self) -> str:
        return r"\b\w"

    def compile(self) -> re.Pattern[str] | None:
        return _compile(r"\b\w")

    def highlight_length(self, text: str, offset: int) -> int:
        return 1


SearchQuery = Union[LiteralQuery, RegexQuery, WordStartQuery, LinePattern, AllWordsQuery]
SEARCH_QUERY_TYPES = (LiteralQuery, RegexQuery, WordStartQuery, LinePattern, AllWordsQuery)

LINE_START = LinePattern(LineAnchor.START)
LINE_END = LinePattern(LineAnchor.END)
LINE_INDENT = LinePattern(LineAnchor.INDENT)
ALL_WORDS = AllWordsQuery()


def iter_match_offsets(query: SearchQuery, text: str, start: int = 0) -> Iterator[int]:
    """Yield the offset of every occurrence of ``query`` at or after ``start``."""
    if not isinstance(query, SEARCH_QUERY_TYPES):
        raise TypeError(f"Unsupported search query: {query!r}")
    pattern = query.compile()
    if pattern is None:
        return
    use_anchor = "jump_at" in pattern.groupindex
    for match in pattern.finditer(text, start):
        yield match.start("jump_at") if use_anchor else match.start()


__all__ = [
    "LiteralQuery",
    "RegexQuery",
    "WordStartQuery",
    "LineAnchor",
    "LinePattern",
    "AllWordsQuery",
    "SearchQuery",
    "SEARCH_QUERY_TYPES",
    "LINE_START",
    "LINE_END",
    "LINE_INDENT",
    "ALL_WORDS",
    "iter_match_offsets",
]
