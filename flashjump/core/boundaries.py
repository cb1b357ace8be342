"""Offset ranges that restrict where jump matches are valid."""

from __future__ import annotations

from dataclasses import dataclass

from .contracts import TargetContext


class Boundaries:
    """Range predicate over a target's text.

    ``offset_range`` returns an inclusive ``(start, end)`` pair used to bound
    the scan; ``is_offset_inside`` decides whether a located match start is
    kept.
    """

    def offset_range(self, target: TargetContext) -> tuple[int, int]:
        raise NotImplementedError

    def is_offset_inside(self, target: TargetContext, offset: int) -> bool:
        raise NotImplementedError

    def intersection(self, other: "Boundaries") -> "Boundaries":
        return IntersectionBoundaries(self, other)


def _text_length(target: TargetContext) -> int:
    return len(target.get_text())


def _visible_range(target: TargetContext) -> tuple[int, int]:
    length = _text_length(target)
    start, end = target.viewport_range()
    start = max(0, min(int(start), length))
    end = max(start, min(int(end), length))
    return start, end


@dataclass(frozen=True)
class WholeFile(Boundaries):
    def offset_range(self, target: TargetContext) -> tuple[int, int]:
        return 0, _text_length(target)

    def is_offset_inside(self, target: TargetContext, offset: int) -> bool:
        return 0 <= offset <= _text_length(target)


@dataclass(frozen=True)
class VisibleOnScreen(Boundaries):
    def offset_range(self, target: TargetContext) -> tuple[int, int]:
        return _visible_range(target)

    def is_offset_inside(self, target: TargetContext, offset: int) -> bool:
        start, end = _visible_range(target)
        return start <= offset <= end


@dataclass(frozen=True)
class BeforeCaret(Boundaries):
    search_whole_file: bool = False

    def offset_range(self, target: TargetContext) -> tuple[int, int]:
        caret = target.caret_offset()
        start = 0 if self.search_whole_file else _visible_range(target)[0]
        return start, caret

    def is_offset_inside(self, target: TargetContext, offset: int) -> bool:
        return 0 <= offset < target.caret_offset()


@dataclass(frozen=True)
class AfterCaret(Boundaries):
    search_whole_file: bool = False

    def offset_range(self, target: TargetContext) -> tuple[int, int]:
        caret = target.caret_offset()
        end = _text_length(target) if self.search_whole_file else _visible_range(target)[1]
        return caret, end

    def is_offset_inside(self, target: TargetContext, offset: int) -> bool:
        return target.caret_offset() < offset <= _text_length(target)


@dataclass(frozen=True)
class IntersectionBoundaries(Boundaries):
    first: Boundaries
    second: Boundaries

    def offset_range(self, target: TargetContext) -> tuple[int, int]:
        a_start, a_end = self.first.offset_range(target)
        b_start, b_end = self.second.offset_range(target)
        start = max(a_start, b_start)
        end = min(a_end, b_end)
        # Disjoint operands collapse to a single point instead of inverting.
        if start <= end:
            return start, end
        return start, start

    def is_offset_inside(self, target: TargetContext, offset: int) -> bool:
        return self.first.is_offset_inside(target, offset) and self.second.is_offset_inside(target, offset)


WHOLE_FILE = WholeFile()
VISIBLE_ON_SCREEN = VisibleOnScreen()


def before_caret(search_whole_file: bool = False) -> Boundaries:
    return BeforeCaret(search_whole_file=bool(search_whole_file))


def after_caret(search_whole_file: bool = False) -> Boundaries:
    return AfterCaret(search_whole_file=bool(search_whole_file))


def default_boundaries(search_whole_file: bool) -> Boundaries:
    return WHOLE_FILE if search_whole_file else VISIBLE_ON_SCREEN


__all__ = [
    "Boundaries",
    "WholeFile",
    "VisibleOnScreen",
    "BeforeCaret",
    "AfterCaret",
    "IntersectionBoundaries",
    "WHOLE_FILE",
    "VISIBLE_ON_SCREEN",
    "before_caret",
    "after_caret",
    "default_boundaries",
]
