from __future__ import annotations

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtWidgets import QApplication
from shiboken6 import isValid

from flashjump.core.contracts import KeyHandlers, SpecialKey

_BLOCKING_MODIFIERS = Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier


def special_key_for(key: int, modifiers) -> SpecialKey | None:
    if key in (Qt.Key_Return, Qt.Key_Enter):
        return SpecialKey.SHIFT_ENTER if modifiers & Qt.ShiftModifier else SpecialKey.ENTER
    if key == Qt.Key_Escape:
        return SpecialKey.ESCAPE
    if key == Qt.Key_Backspace:
        return SpecialKey.BACKSPACE
    return None


def typed_char_for(text: str, modifiers) -> str | None:
    if modifiers & _BLOCKING_MODIFIERS:
        return None
    if len(text) != 1 or not text.isprintable():
        return None
    return text


class QtKeyRouter(QObject):
    """Routes key presses on claimed editors to the owning jump session.

    One application-wide event filter is installed while at least one
    editor is claimed. Targets are expected to expose their widget as
    ``target.editor``.
    """

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._claims: dict[int, tuple[object, KeyHandlers]] = {}
        self._installed = False

    def claim(self, target, handlers: KeyHandlers) -> None:
        widget = target.editor
        self._claims[id(widget)] = (widget, handlers)
        self._sync_filter()

    def release(self, target) -> None:
        widget = getattr(target, "editor", None)
        self._claims.pop(id(widget), None)
        self._sync_filter()

    def is_claimed(self, target) -> bool:
        return id(getattr(target, "editor", None)) in self._claims

    def _sync_filter(self) -> None:
        app = QApplication.instance()
        if app is None:
            return
        if self._claims and not self._installed:
            app.installEventFilter(self)
            self._installed = True
        elif not self._claims and self._installed:
            app.removeEventFilter(self)
            self._installed = False

    def _handlers_for(self, watched) -> KeyHandlers | None:
        entry = self._claims.get(id(watched))
        if entry is None:
            return None
        widget, handlers = entry
        if widget is not watched or not isValid(widget):
            return None
        return handlers

    def eventFilter(self, watched, event):
        etype = event.type()
        if etype not in (QEvent.KeyPress, QEvent.ShortcutOverride):
            return super().eventFilter(watched, event)
        handlers = self._handlers_for(watched)
        if handlers is None:
            return super().eventFilter(watched, event)

        modifiers = event.modifiers()
        special = special_key_for(event.key(), modifiers)
        char = None if special is not None else typed_char_for(event.text(), modifiers)
        if special is None and char is None:
            return super().eventFilter(watched, event)

        if etype == QEvent.ShortcutOverride:
            # Keep editor shortcuts from stealing keys the session consumes.
            event.accept()
            return True

        if special is not None:
            consumed = handlers.on_special(special)
        else:
            consumed = handlers.on_char(char)
        if consumed:
            event.accept()
            return True
        return super().eventFilter(watched, event)


__all__ = ["QtKeyRouter", "special_key_for", "typed_char_for"]
