"""Keybinding table for the jump commands, with normalization helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from PySide6.QtGui import QKeySequence

FLASH_SCOPE = "flash"

_MODIFIER_ORDER = ("Ctrl", "Alt", "Shift", "Meta")
_MODIFIER_ALIASES: dict[str, str] = {
    "ctrl": "Ctrl",
    "control": "Ctrl",
    "alt": "Alt",
    "option": "Alt",
    "shift": "Shift",
    "meta": "Meta",
    "cmd": "Meta",
    "command": "Meta",
    "super": "Meta",
    "win": "Meta",
}
_KEY_ALIASES: dict[str, str] = {
    "semicolon": ";",
    "slash": "/",
    "comma": ",",
    "period": ".",
}


@dataclass(frozen=True, slots=True)
class KeybindingAction:
    action_id: str
    action_name: str
    default_sequence: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class KeybindingConflict:
    action_id: str
    action_name: str
    sequence_text: str


KEYBINDING_ACTIONS: tuple[KeybindingAction, ...] = (
    KeybindingAction("action.flash_activate_or_cycle", "Activate / Cycle Jump Mode", ("Ctrl+;",)),
    KeybindingAction(
        "action.flash_activate_or_reverse_cycle",
        "Activate / Reverse Cycle Jump Mode",
        ("Ctrl+Shift+;",),
    ),
    KeybindingAction("action.flash_toggle_jump", "Toggle Jump Mode", ("Ctrl+Alt+J",)),
    KeybindingAction("action.flash_toggle_jump_end", "Toggle Jump End Mode", ("Ctrl+Alt+E",)),
    KeybindingAction("action.flash_toggle_target", "Toggle Target Mode", ("Ctrl+Alt+S",)),
    KeybindingAction("action.flash_toggle_forward_jump", "Jump Forward", ("Ctrl+Alt+Right",)),
    KeybindingAction("action.flash_toggle_backward_jump", "Jump Backward", ("Ctrl+Alt+Left",)),
    KeybindingAction("action.flash_all_words", "Jump to Any Word", ("Ctrl+Alt+W",)),
    KeybindingAction("action.flash_all_words_forward", "Jump to Word After Caret", ()),
    KeybindingAction("action.flash_all_words_backward", "Jump to Word Before Caret", ()),
    KeybindingAction("action.flash_all_line_starts", "Jump to Line Start", ("Ctrl+Alt+Home",)),
    KeybindingAction("action.flash_all_line_ends", "Jump to Line End", ("Ctrl+Alt+End",)),
    KeybindingAction("action.flash_all_line_indents", "Jump to Line Indent", ("Ctrl+Alt+I",)),
    KeybindingAction("action.flash_all_line_marks", "Jump to Line Start or End", ("Ctrl+Alt+L",)),
    KeybindingAction("action.flash_reset", "Cancel Jump", ()),
)

_ACTION_BY_ID: dict[str, KeybindingAction] = {entry.action_id: entry for entry in KEYBINDING_ACTIONS}


def default_keybindings() -> dict[str, dict[str, list[str]]]:
    return {FLASH_SCOPE: {action.action_id: list(action.default_sequence) for action in KEYBINDING_ACTIONS}}


def action_definition(action_id: str) -> KeybindingAction | None:
    return _ACTION_BY_ID.get(str(action_id or "").strip())


def _chords(text: Any) -> list[str]:
    """Split ``"Ctrl+J, Ctrl+K"`` into its comma-separated chords."""
    return [chunk.strip() for chunk in str(text or "").split(",") if chunk.strip()]


def _chord_parts(chord: str) -> list[str]:
    return [piece.strip() for piece in str(chord or "").split("+") if piece.strip()]


def _spell_chord(text: str) -> str:
    """Alias-aware spelling of one chord, independent of Qt."""
    held: set[str] = set()
    key = ""
    for piece in _chord_parts(text):
        modifier = _MODIFIER_ALIASES.get(piece.lower())
        if modifier is None:
            key = _KEY_ALIASES.get(piece.lower(), piece)
        else:
            held.add(modifier)
    if not key:
        return ""
    if len(key) == 1 and key.isalpha():
        key = key.upper()
    return "+".join([*(name for name in _MODIFIER_ORDER if name in held), key])


def canonicalize_chord_text(text: str) -> str:
    typed = str(text or "").strip()
    if not typed:
        return ""
    spelled = _spell_chord(typed)
    portable = QKeySequence(typed).toString(QKeySequence.PortableText).strip()
    if not portable:
        return spelled or typed
    # Qt drops modifiers on some punctuation chords; keep what the user typed.
    if len(_chord_parts(spelled)) > 1 and len(_chord_parts(portable)) < 2:
        return spelled
    head = next(iter(_chords(portable)), portable)
    return _spell_chord(head) or head


def normalize_sequence(value: Any) -> list[str]:
    if isinstance(value, str):
        items = [value]
    elif isinstance(value, (list, tuple)):
        items = [item for item in value if isinstance(item, str)]
    else:
        items = []
    chords = (canonicalize_chord_text(chord) for item in items for chord in _chords(item))
    return [chord for chord in chords if chord]


def sequence_to_text(sequence: list[str] | tuple[str, ...]) -> str:
    return ", ".join(normalize_sequence(list(sequence)))


def normalize_keybindings(raw: Any) -> dict[str, dict[str, list[str]]]:
    merged = default_keybindings()
    if not isinstance(raw, Mapping):
        return merged
    payload = raw.get(FLASH_SCOPE)
    if not isinstance(payload, Mapping):
        return merged
    scope_map = merged[FLASH_SCOPE]
    for action_key, value in payload.items():
        action_id = str(action_key or "").strip()
        if action_id not in _ACTION_BY_ID:
            continue
        # An explicit empty list unbinds the action.
        scope_map[action_id] = normalize_sequence(value)
    return merged


def get_action_sequence(keybindings: Mapping[str, Any] | None, action_id: str) -> list[str]:
    normalized = normalize_keybindings(keybindings)
    action_key = str(action_id or "").strip()
    from_scope = normalized[FLASH_SCOPE]
    if action_key in from_scope:
        return list(from_scope[action_key])
    definition = action_definition(action_key)
    return list(definition.default_sequence) if definition is not None else []


def qkeysequence_from_sequence(sequence: list[str] | tuple[str, ...]) -> QKeySequence:
    return QKeySequence(sequence_to_text(list(sequence)))


def find_conflicts(keybindings: Mapping[str, Any] | None) -> list[KeybindingConflict]:
    """Every action whose sequence is also bound to an earlier action."""
    normalized = normalize_keybindings(keybindings)
    seen: dict[str, str] = {}
    conflicts: list[KeybindingConflict] = []
    for action in KEYBINDING_ACTIONS:
        text = sequence_to_text(normalized[FLASH_SCOPE].get(action.action_id, []))
        if not text:
            continue
        if text in seen:
            conflicts.append(KeybindingConflict(action.action_id, action.action_name, text))
            continue
        seen[text] = action.action_id
    return conflicts


__all__ = [
    "FLASH_SCOPE",
    "KeybindingAction",
    "KeybindingConflict",
    "KEYBINDING_ACTIONS",
    "default_keybindings",
    "action_definition",
    "canonicalize_chord_text",
    "normalize_sequence",
    "sequence_to_text",
    "normalize_keybindings",
    "get_action_sequence",
    "qkeysequence_from_sequence",
    "find_conflicts",
]
