"""Controller that wires editors, shortcuts and the session registry together."""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Qt, Signal
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QPlainTextEdit
from shiboken6 import isValid

from flashjump.actions import RESET_ACTION_ID, action_ids, run_action
from flashjump.keybindings import action_definition, find_conflicts, get_action_sequence, qkeysequence_from_sequence
from flashjump.core.search_match import SearchMatch
from flashjump.core.session import JumpResult, Session, SessionListener
from flashjump.core.session_registry import SessionRegistry
from flashjump.settings_store import JsonSettingsStore
from FlashPyside.widgets.editor_target import PlainTextEditTarget
from FlashPyside.widgets.key_router import QtKeyRouter
from FlashPyside.widgets.tag_overlay import OverlayRenderSink

logger = logging.getLogger(__name__)


class _SignalBridge(SessionListener):
    def __init__(self, controller: "FlashJumpController"):
        self._controller = controller

    def on_jump(self, match: SearchMatch) -> None:
        self._controller.jumped.emit(match)

    def on_session_end(self, result: JumpResult) -> None:
        self._controller.sessionEnded.emit(result)


class FlashJumpController(QObject):
    jumped = Signal(object)
    sessionEnded = Signal(object)

    def __init__(self, settings: JsonSettingsStore | None = None, parent: QObject | None = None):
        super().__init__(parent)
        self.settings = settings if settings is not None else JsonSettingsStore()
        self.settings.load()
        if self.settings.last_error:
            logger.warning("settings not loaded: %s", self.settings.last_error)
        self.config = self.settings.flash_config()
        self.key_router = QtKeyRouter(self)
        self.render_sink = OverlayRenderSink(self.config)
        self.registry = SessionRegistry(
            key_router=self.key_router,
            render_sink=self.render_sink,
            config=self.config,
        )
        self._bridge = _SignalBridge(self)
        self._targets: dict[int, PlainTextEditTarget] = {}
        self._actions: dict[int, list[QAction]] = {}
        for conflict in find_conflicts(self.settings.keybindings()):
            logger.warning(
                "shortcut %s for %r is already bound to another jump command",
                conflict.sequence_text,
                conflict.action_name,
            )

    # ---- editors ---------------------------------------------------------

    def attach_editor(self, editor: QPlainTextEdit) -> PlainTextEditTarget:
        existing = self._targets.get(id(editor))
        if existing is not None:
            return existing
        target = PlainTextEditTarget(editor)
        self._targets[id(editor)] = target
        self._actions[id(editor)] = self._install_actions(editor)
        editor.destroyed.connect(lambda *_args, key=id(editor): self._forget(key))
        return target

    def detach_editor(self, editor: QPlainTextEdit) -> None:
        target = self._targets.get(id(editor))
        if target is not None:
            self.registry.end(target)
        for action in self._actions.get(id(editor), []):
            if isValid(editor) and isValid(action):
                editor.removeAction(action)
                action.deleteLater()
        self._forget(id(editor))

    def target_for(self, editor: QPlainTextEdit) -> PlainTextEditTarget | None:
        return self._targets.get(id(editor))

    def _forget(self, key: int) -> None:
        self._targets.pop(key, None)
        self._actions.pop(key, None)

    def _install_actions(self, editor: QPlainTextEdit) -> list[QAction]:
        keybindings = self.settings.keybindings()
        actions: list[QAction] = []
        for action_id in action_ids():
            definition = action_definition(action_id)
            action = QAction(definition.action_name if definition else action_id, editor)
            action.setObjectName(action_id)
            action.setShortcutContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
            sequence = get_action_sequence(keybindings, action_id)
            if sequence:
                action.setShortcut(qkeysequence_from_sequence(sequence))
            action.triggered.connect(
                lambda _checked=False, aid=action_id, ed=editor: self.trigger(aid, ed)
            )
            editor.addAction(action)
            actions.append(action)
        return actions

    def _live_targets(self) -> list[PlainTextEditTarget]:
        live = []
        for target in list(self._targets.values()):
            if target.is_live() and target.editor.isVisible():
                live.append(target)
        return live

    def targets_for(self, primary: PlainTextEditTarget) -> list[PlainTextEditTarget]:
        if not self.config.multi_window:
            return [primary]
        return [primary] + [t for t in self._live_targets() if t is not primary]

    # ---- commands --------------------------------------------------------

    def trigger(self, action_id: str, editor: QPlainTextEdit) -> Session | None:
        primary = self.attach_editor(editor)
        targets = self.targets_for(primary)
        if action_id != RESET_ACTION_ID:
            # Listen before the command runs; it may end the session at once.
            self.registry.start(primary, targets).add_listener(self._bridge)
        return run_action(action_id, self.registry, primary, targets)

    def active_session(self, editor: QPlainTextEdit) -> Session | None:
        target = self._targets.get(id(editor))
        return self.registry.get(target) if target is not None else None

    def reload_settings(self) -> None:
        """Re-read the settings file; running sessions keep their config."""
        self.settings.load()
        self.config = self.settings.flash_config()
        self.registry.update_config(self.config)
        self.render_sink.config = self.config
        for key, target in list(self._targets.items()):
            editor = target.editor
            for action in self._actions.get(key, []):
                editor.removeAction(action)
                action.deleteLater()
            self._actions[key] = self._install_actions(editor)

    def shutdown(self) -> None:
        self.registry.end_all()


__all__ = ["FlashJumpController"]
