from __future__ import annotations

from enum import Enum


class JumpMode(Enum):
    DISABLED = "disabled"
    JUMP = "jump"
    JUMP_END = "jump_end"
    TARGET = "target"
    DEFINITION = "definition"

    @property
    def caret_color(self) -> str | None:
        return _CARET_COLORS.get(self)


_CARET_COLORS: dict[JumpMode, str] = {
    JumpMode.JUMP: "#0096FF",
    JumpMode.JUMP_END: "#FF9600",
    JumpMode.TARGET: "#FF3264",
    JumpMode.DEFINITION: "#64FF64",
}

CYCLE_ORDER: tuple[JumpMode, ...] = (JumpMode.JUMP, JumpMode.JUMP_END, JumpMode.TARGET)


class JumpModeTracker:
    """Tracks the active jump mode and the position in the cycle order."""

    def __init__(self) -> None:
        self._index = -1
        self._current = JumpMode.DISABLED

    @property
    def current(self) -> JumpMode:
        return self._current

    def cycle(self, forward: bool = True) -> JumpMode:
        size = len(CYCLE_ORDER)
        if forward:
            self._index = (self._index + 1) % size
        else:
            self._index = size - 1 if self._index <= 0 else self._index - 1
        self._current = CYCLE_ORDER[self._index]
        return self._current

    def toggle(self, mode: JumpMode) -> JumpMode:
        if mode is JumpMode.DISABLED or mode is self._current:
            self.reset()
            return self._current
        self._index = CYCLE_ORDER.index(mode) if mode in CYCLE_ORDER else -1
        self._current = mode
        return self._current

    def reset(self) -> None:
        self._index = -1
        self._current = JumpMode.DISABLED


__all__ = ["JumpMode", "CYCLE_ORDER", "JumpModeTracker"]
