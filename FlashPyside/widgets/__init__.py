"""Reusable PySide widgets for label-based jump navigation."""

from .editor_target import PlainTextEditTarget
from .key_router import QtKeyRouter
from .tag_overlay import OverlayRenderSink, TagOverlay

__all__ = ["PlainTextEditTarget", "QtKeyRouter", "OverlayRenderSink", "TagOverlay"]
