"""Jump-to-match navigation for PySide6 text editors."""

__version__ = "0.1.0"
