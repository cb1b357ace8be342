from __future__ import annotations

from dataclasses import dataclass

from .contracts import TargetContext


@dataclass(eq=False)
class SearchMatch:
    """One located occurrence; identity is (target, start_offset)."""

    target: TargetContext
    start_offset: int
    end_offset: int
    label: str | None = None

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset

    def is_visible(self) -> bool:
        start, end = self.target.viewport_range()
        return start <= self.start_offset <= end

    def distance_to(self, offset: int) -> int:
        return abs(self.start_offset - int(offset))

    def with_end(self, end_offset: int) -> "SearchMatch":
        return SearchMatch(self.target, self.start_offset, int(end_offset), self.label)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchMatch):
            return NotImplemented
        return self.target is other.target and self.start_offset == other.start_offset

    def __hash__(self) -> int:
        return hash((id(self.target), self.start_offset))

    def __repr__(self) -> str:
        return f"SearchMatch({self.start_offset}:{self.end_offset}, label={self.label!r})"
