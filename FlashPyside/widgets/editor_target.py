from __future__ import annotations

from PySide6.QtCore import QPoint
from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QPlainTextEdit
from shiboken6 import isValid


class PlainTextEditTarget:
    """Exposes a QPlainTextEdit as a jump target.

    Offsets are positions in ``toPlainText()``, which match document
    positions for plain text without surrogate pairs.
    """

    def __init__(self, editor: QPlainTextEdit):
        self.editor = editor

    def __repr__(self) -> str:
        name = self.editor.objectName() if self.is_live() else "<deleted>"
        return f"PlainTextEditTarget({name!r})"

    def get_text(self) -> str:
        return self.editor.toPlainText()

    def caret_offset(self) -> int:
        return int(self.editor.textCursor().position())

    def _clamp(self, offset: int) -> int:
        return max(0, min(int(offset), len(self.editor.toPlainText())))

    def set_caret_offset(self, offset: int) -> None:
        pos = self._clamp(offset)
        cursor = self.editor.textCursor()
        # Qt cannot place the caret inside a selection without dropping it;
        # a selection that already covers the offset is kept as is.
        if cursor.hasSelection() and cursor.selectionStart() <= pos <= cursor.selectionEnd():
            if pos in (cursor.selectionStart(), cursor.selectionEnd()):
                anchor = cursor.selectionEnd() if pos == cursor.selectionStart() else cursor.selectionStart()
                cursor.setPosition(anchor)
                cursor.setPosition(pos, QTextCursor.KeepAnchor)
                self.editor.setTextCursor(cursor)
            return
        cursor.setPosition(pos)
        self.editor.setTextCursor(cursor)

    def selection(self) -> tuple[int, int] | None:
        cursor = self.editor.textCursor()
        if not cursor.hasSelection():
            return None
        return int(cursor.selectionStart()), int(cursor.selectionEnd())

    def set_selection(self, start: int, end: int) -> None:
        lo, hi = sorted((self._clamp(start), self._clamp(end)))
        cursor = self.editor.textCursor()
        cursor.setPosition(lo)
        cursor.setPosition(hi, QTextCursor.KeepAnchor)
        self.editor.setTextCursor(cursor)

    def viewport_range(self) -> tuple[int, int]:
        viewport = self.editor.viewport()
        top = self.editor.cursorForPosition(QPoint(0, 0))
        bottom = self.editor.cursorForPosition(QPoint(viewport.width() - 1, viewport.height() - 1))
        end_cursor = QTextCursor(bottom)
        end_cursor.movePosition(QTextCursor.EndOfBlock)
        return int(top.block().position()), int(end_cursor.position())

    def is_live(self) -> bool:
        return isValid(self.editor)

    def scroll_to_offset(self, offset: int) -> None:
        start, end = self.viewport_range()
        pos = self._clamp(offset)
        if start <= pos <= end:
            return
        cursor = self.editor.textCursor()
        if cursor.position() == pos and not cursor.hasSelection():
            self.editor.ensureCursorVisible()
            return
        block = self.editor.document().findBlock(pos)
        if block.isValid():
            bar = self.editor.verticalScrollBar()
            bar.setValue(max(bar.minimum(), min(bar.maximum(), block.blockNumber())))

    def overlay_host(self):
        """Widget the jump overlay is painted on."""
        return self.editor.viewport()

    def offset_rect(self, offset: int, length: int = 1):
        """Viewport rectangle covering ``length`` characters from ``offset``."""
        pos = self._clamp(offset)
        cursor = QTextCursor(self.editor.document())
        cursor.setPosition(pos)
        rect = self.editor.cursorRect(cursor)
        width = self.editor.fontMetrics().horizontalAdvance("M") * max(1, int(length))
        rect.setWidth(width)
        return rect


__all__ = ["PlainTextEditTarget"]
