from __future__ import annotations

import logging

from PySide6.QtCore import QEvent, QObject, QRect, Qt
from PySide6.QtGui import QColor, QFont, QFontMetrics, QPainter
from PySide6.QtWidgets import QWidget
from shiboken6 import isValid

from flashjump.core.contracts import RenderSnapshot
from flashjump.settings_schema import FlashConfig

from .editor_target import PlainTextEditTarget

logger = logging.getLogger(__name__)


class TagOverlay(QWidget):
    """Transparent layer over an editor viewport that paints jump labels."""

    def __init__(self, target: PlainTextEditTarget, config: FlashConfig):
        host = target.overlay_host()
        super().__init__(host)
        self._target = target
        self._config = config
        self._snapshot = RenderSnapshot()
        self._accent: QColor | None = None

        self.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WA_NoSystemBackground, True)
        self.setFocusPolicy(Qt.NoFocus)
        self.setGeometry(host.rect())
        host.installEventFilter(self)
        target.editor.updateRequest.connect(self._on_update_request)

    @property
    def snapshot(self) -> RenderSnapshot:
        return self._snapshot

    @property
    def accent(self) -> QColor | None:
        return self._accent

    def set_snapshot(self, snapshot: RenderSnapshot) -> None:
        self._snapshot = snapshot
        self.raise_()
        self.show()
        self.update()

    def set_accent(self, color: str | None) -> None:
        self._accent = QColor(color) if color else None
        self.update()

    def detach(self) -> None:
        host = self.parentWidget()
        if host is not None and isValid(host):
            host.removeEventFilter(self)
        editor = self._target.editor
        if isValid(editor):
            try:
                editor.updateRequest.disconnect(self._on_update_request)
            except (RuntimeError, TypeError):
                logger.debug("overlay update hook already disconnected")
        self.hide()
        self.deleteLater()

    def _on_update_request(self, *_args) -> None:
        if self.isVisible():
            self.update()

    def eventFilter(self, watched: QObject, event):
        if watched is self.parentWidget() and event.type() == QEvent.Resize:
            self.setGeometry(watched.rect())
        return super().eventFilter(watched, event)

    # ---- painting --------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            self._paint(painter)
        finally:
            painter.end()

    def _paint(self, painter: QPainter) -> None:
        snap = self._snapshot
        cfg = self._config
        if snap.show_backdrop:
            painter.fillRect(self.rect(), QColor(0, 0, 0, cfg.backdrop_alpha))

        highlight = QColor(cfg.match_highlight_color)
        for start, end in snap.highlights:
            painter.fillRect(self._rect_for(start, end), highlight)

        if snap.default_match is not None:
            start, end = snap.default_match
            painter.fillRect(self._rect_for(start, end), QColor(cfg.default_match_background_color))

        if snap.markers:
            self._paint_labels(painter, snap)

        if self._accent is not None:
            caret = self._target.editor.cursorRect()
            painter.fillRect(QRect(caret.x(), caret.y(), 2, caret.height()), self._accent)

    def _paint_labels(self, painter: QPainter, snap: RenderSnapshot) -> None:
        cfg = self._config
        font = QFont(self._target.editor.font())
        size = font.pointSizeF()
        if size > 0:
            font.setPointSizeF(max(1.0, size * cfg.label_font_scale))
        font.setBold(True)
        painter.setFont(font)
        metrics = QFontMetrics(font)

        background = QColor(cfg.label_background_color)
        foreground = QColor(cfg.label_foreground_color)
        dimmed = QColor(foreground)
        dimmed.setAlpha(110)
        prefix = snap.typed_prefix

        for marker in snap.markers:
            label = marker.label
            anchor = self._target.offset_rect(marker.start_offset, 1)
            width = metrics.horizontalAdvance(label) + 4
            box = QRect(anchor.x(), anchor.y(), max(width, anchor.width()), anchor.height())
            painter.fillRect(box, background)
            x = box.x() + 2
            baseline = box.y() + (box.height() + metrics.ascent() - metrics.descent()) // 2
            if prefix and label.lower().startswith(prefix.lower()):
                typed, rest = label[: len(prefix)], label[len(prefix):]
                painter.setPen(dimmed)
                painter.drawText(x, baseline, typed)
                x += metrics.horizontalAdvance(typed)
                painter.setPen(foreground)
                painter.drawText(x, baseline, rest)
            else:
                painter.setPen(foreground)
                painter.drawText(x, baseline, label)

    def _rect_for(self, start: int, end: int) -> QRect:
        return self._target.offset_rect(start, max(1, end - start))


class OverlayRenderSink:
    """Keeps one TagOverlay per target while a session publishes to it."""

    def __init__(self, config: FlashConfig | None = None):
        self.config = config if config is not None else FlashConfig.defaults()
        self._overlays: dict[int, TagOverlay] = {}

    def overlay_for(self, target) -> TagOverlay | None:
        return self._overlays.get(id(target))

    def _ensure(self, target) -> TagOverlay | None:
        overlay = self._overlays.get(id(target))
        if overlay is not None and isValid(overlay):
            return overlay
        if not target.is_live():
            return None
        overlay = TagOverlay(target, self.config)
        self._overlays[id(target)] = overlay
        return overlay

    def publish(self, target, snapshot: RenderSnapshot) -> None:
        overlay = self._ensure(target)
        if overlay is not None:
            overlay.set_snapshot(snapshot)

    def set_caret_accent(self, target, color: str | None) -> None:
        overlay = self._overlays.get(id(target)) if color is None else self._ensure(target)
        if overlay is not None and isValid(overlay):
            overlay.set_accent(color)

    def unbind(self, target) -> None:
        overlay = self._overlays.pop(id(target), None)
        if overlay is not None and isValid(overlay):
            overlay.detach()


__all__ = ["TagOverlay", "OverlayRenderSink"]
