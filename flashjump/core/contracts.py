"""Host capability contracts consumed by the jump core (pure Python).

These contracts keep the session engine independent of the editor toolkit:
a Qt editor, a terminal buffer or a test fake can all take part in a jump
session as long as they provide the methods below.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol


class TargetContext(Protocol):
    def get_text(self) -> str:
        ...

    def caret_offset(self) -> int:
        ...

    def set_caret_offset(self, offset: int) -> None:
        ...

    def selection(self) -> tuple[int, int] | None:
        ...

    def set_selection(self, start: int, end: int) -> None:
        ...

    def viewport_range(self) -> tuple[int, int]:
        ...

    def is_live(self) -> bool:
        ...

    def scroll_to_offset(self, offset: int) -> None:
        ...


class SpecialKey(Enum):
    ENTER = "enter"
    SHIFT_ENTER = "shift_enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"


@dataclass(frozen=True, slots=True)
class KeyHandlers:
    # Each handler returns True when the key was consumed.
    on_char: Callable[[str], bool]
    on_special: Callable[[SpecialKey], bool]


class KeyRouter(Protocol):
    def claim(self, target: TargetContext, handlers: KeyHandlers) -> None:
        ...

    def release(self, target: TargetContext) -> None:
        ...


@dataclass(frozen=True, slots=True)
class TagMarker:
    start_offset: int
    end_offset: int
    label: str


@dataclass(frozen=True, slots=True)
class RenderSnapshot:
    """Everything an overlay needs to redraw one target."""

    markers: tuple[TagMarker, ...] = ()
    highlights: tuple[tuple[int, int], ...] = ()
    default_match: tuple[int, int] | None = None
    typed_prefix: str = ""
    show_backdrop: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.markers and not self.highlights and self.default_match is None


class RenderSink(Protocol):
    def publish(self, target: TargetContext, snapshot: RenderSnapshot) -> None:
        ...

    def set_caret_accent(self, target: TargetContext, color: str | None) -> None:
        ...

    def unbind(self, target: TargetContext) -> None:
        ...


class NullRenderSink:
    """Render sink for headless use; drops every update."""

    def publish(self, target: TargetContext, snapshot: RenderSnapshot) -> None:
        pass

    def set_caret_accent(self, target: TargetContext, color: str | None) -> None:
        pass

    def unbind(self, target: TargetContext) -> None:
        pass


__all__ = [
    "TargetContext",
    "SpecialKey",
    "KeyHandlers",
    "KeyRouter",
    "TagMarker",
    "RenderSnapshot",
    "RenderSink",
    "NullRenderSink",
]
