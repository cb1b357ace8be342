import logging
import os
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QHBoxLayout, QMainWindow, QPlainTextEdit, QWidget

from flashjump.core.session import JumpSuccess
from flashjump.settings_store import JsonSettingsStore
from flashjump.ui import FlashJumpController

APP_NAME = "FlashJump"
DEBUG_ENV = "FLASHJUMP_DEBUG"


def _configure_logging() -> None:
    if os.environ.get(DEBUG_ENV, "").strip():
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )


def _load_text(path_value: str | None) -> str:
    text = str(path_value or "").strip()
    if text:
        candidate = Path(text).expanduser()
        if candidate.is_file():
            try:
                return candidate.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                logging.getLogger(__name__).warning("could not read %s", candidate)
    return Path(__file__).read_text(encoding="utf-8")


class DemoWindow(QMainWindow):
    def __init__(self, text: str, controller: FlashJumpController):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.controller = controller

        central = QWidget(self)
        layout = QHBoxLayout(central)
        self.editors: list[QPlainTextEdit] = []
        for name in ("left", "right"):
            editor = QPlainTextEdit(central)
            editor.setObjectName(name)
            editor.setPlainText(text)
            editor.setLineWrapMode(QPlainTextEdit.NoWrap)
            layout.addWidget(editor)
            controller.attach_editor(editor)
            self.editors.append(editor)
        self.setCentralWidget(central)

        controller.sessionEnded.connect(self._on_session_ended)
        self.statusBar().showMessage("Ctrl+; to jump, Ctrl+Alt+W for any word")

    def _on_session_ended(self, result) -> None:
        if isinstance(result, JumpSuccess):
            self.statusBar().showMessage(f"Jumped to offset {result.match.start_offset}", 2500)
        else:
            self.statusBar().showMessage("Jump cancelled", 1500)

    def closeEvent(self, event):
        self.controller.shutdown()
        super().closeEvent(event)


if __name__ == "__main__":
    _configure_logging()
    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    app.setApplicationName(APP_NAME)
    controller = FlashJumpController(JsonSettingsStore())
    window = DemoWindow(_load_text(sys.argv[1] if len(sys.argv) > 1 else None), controller)
    window.resize(1100, 700)
    window.show()
    sys.exit(app.exec())
