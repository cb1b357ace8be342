"""Runs a search query across the participating targets."""

from __future__ import annotations

import logging
from typing import Sequence

from .boundaries import VISIBLE_ON_SCREEN, Boundaries
from .contracts import TargetContext
from .search_match import SearchMatch
from .search_query import ALL_WORDS, LINE_START, LiteralQuery, RegexQuery, SearchQuery, iter_match_offsets

logger = logging.getLogger(__name__)


class SearchProcessor:
    def __init__(self, targets: Sequence[TargetContext], boundaries: Boundaries = VISIBLE_ON_SCREEN) -> None:
        self._targets: list[TargetContext] = list(targets)
        self._boundaries = boundaries
        self._query: SearchQuery = LiteralQuery("")
        # Keyed by id(target); insertion order follows target enumeration.
        self._results: dict[int, list[SearchMatch]] = {}

    @classmethod
    def from_char(cls, targets: Sequence[TargetContext], char: str, boundaries: Boundaries) -> "SearchProcessor":
        processor = cls(targets, boundaries)
        processor.search(LiteralQuery(char))
        return processor

    @classmethod
    def from_regex(cls, targets: Sequence[TargetContext], pattern: str, boundaries: Boundaries) -> "SearchProcessor":
        processor = cls(targets, boundaries)
        processor.search(RegexQuery(pattern))
        return processor

    @classmethod
    def for_all_words(cls, targets: Sequence[TargetContext], boundaries: Boundaries) -> "SearchProcessor":
        processor = cls(targets, boundaries)
        processor.search(ALL_WORDS)
        return processor

    @classmethod
    def for_line_starts(cls, targets: Sequence[TargetContext], boundaries: Boundaries) -> "SearchProcessor":
        processor = cls(targets, boundaries)
        processor.search(LINE_START)
        return processor

    @property
    def query(self) -> SearchQuery:
        return self._query

    @property
    def boundaries(self) -> Boundaries:
        return self._boundaries

    @property
    def targets(self) -> list[TargetContext]:
        return list(self._targets)

    @property
    def match_count(self) -> int:
        return sum(len(matches) for matches in self._results.values())

    @property
    def all_matches(self) -> list[SearchMatch]:
        out: list[SearchMatch] = []
        for target in self._targets:
            out.extend(self._results.get(id(target), ()))
        return out

    def matches_for(self, target: TargetContext) -> list[SearchMatch]:
        return list(self._results.get(id(target), ()))

    def search(self, query: SearchQuery) -> None:
        self._query = query
        self._results = {}

        for target in self._targets:
            text = target.get_text()
            range_start, range_end = self._boundaries.offset_range(target)
            matches: list[SearchMatch] = []
            for start in iter_match_offsets(query, text, range_start):
                end = start + max(1, query.highlight_length(text, start))
                if end > range_end:
                    break
                if self._boundaries.is_offset_inside(target, start):
                    matches.append(SearchMatch(target, start, end))
            if matches:
                self._results[id(target)] = matches

        logger.debug("search %r: %d matches in %d targets", query, self.match_count, len(self._results))

    def append_char(self, char: str) -> bool:
        """Narrow the current literal search by one character.

        Returns False, leaving state untouched, when the query is not literal
        or when no existing match survives the longer pattern.
        """
        if len(char) != 1:
            raise ValueError(f"append_char expects a single character, got {char!r}")
        if not isinstance(self._query, LiteralQuery):
            return False

        candidate = self._query.raw_text + char
        needle = candidate.lower()
        narrowed: dict[int, list[SearchMatch]] = {}
        for target in self._targets:
            current = self._results.get(id(target))
            if not current:
                continue
            text = target.get_text()
            _range_start, range_end = self._boundaries.offset_range(target)
            kept: list[SearchMatch] = []
            for match in current:
                end = match.start_offset + len(candidate)
                if end > len(text) or end > range_end:
                    continue
                if text[match.start_offset:end].lower() == needle:
                    kept.append(match.with_end(end))
            if kept:
                narrowed[id(target)] = kept

        if not narrowed and self._results:
            return False

        self._query = LiteralQuery(candidate)
        self._results = narrowed
        logger.debug("narrowed to %r: %d matches", candidate, self.match_count)
        return True

    def clear(self) -> None:
        self._results = {}
        self._query = LiteralQuery("")


__all__ = ["SearchProcessor"]
