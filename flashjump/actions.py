"""Jump commands, keyed by the action ids used in the keybinding table."""

from __future__ import annotations

from typing import Callable, Sequence

from flashjump.core.boundaries import VISIBLE_ON_SCREEN, WHOLE_FILE, Boundaries, after_caret, before_caret
from flashjump.core.contracts import TargetContext
from flashjump.core.jump_mode import JumpMode
from flashjump.core.search_query import ALL_WORDS, LINE_END, LINE_INDENT, LINE_START, RegexQuery, SearchQuery
from flashjump.core.session import JumpCancelled, Session
from flashjump.core.session_registry import SessionRegistry

SessionCommand = Callable[[Session], None]


def _query_command(query: SearchQuery, boundaries: Callable[[Session], Boundaries]) -> SessionCommand:
    def run(session: Session) -> None:
        session.toggle_jump_mode(JumpMode.JUMP)
        # Toggling an already active Jump mode ends the session.
        if not session.is_disposed:
            session.start_query_search(query, boundaries(session))

    return run


def _fixed(boundaries: Boundaries) -> Callable[[Session], Boundaries]:
    return lambda _session: boundaries


def _after(session: Session) -> Boundaries:
    return after_caret(session.config.search_whole_file)


def _before(session: Session) -> Boundaries:
    return before_caret(session.config.search_whole_file)


SESSION_COMMANDS: dict[str, SessionCommand] = {
    "action.flash_activate_or_cycle": lambda s: s.cycle_next_jump_mode(),
    "action.flash_activate_or_reverse_cycle": lambda s: s.cycle_previous_jump_mode(),
    "action.flash_toggle_jump": lambda s: s.toggle_jump_mode(JumpMode.JUMP),
    "action.flash_toggle_jump_end": lambda s: s.toggle_jump_mode(JumpMode.JUMP_END),
    "action.flash_toggle_target": lambda s: s.toggle_jump_mode(JumpMode.TARGET),
    "action.flash_toggle_forward_jump": lambda s: s.toggle_jump_mode(JumpMode.JUMP, _after(s)),
    "action.flash_toggle_backward_jump": lambda s: s.toggle_jump_mode(JumpMode.JUMP, _before(s)),
    "action.flash_all_words": _query_command(ALL_WORDS, _fixed(WHOLE_FILE)),
    "action.flash_all_words_forward": _query_command(ALL_WORDS, _after),
    "action.flash_all_words_backward": _query_command(ALL_WORDS, _before),
    "action.flash_all_line_starts": _query_command(LINE_START, _fixed(VISIBLE_ON_SCREEN)),
    "action.flash_all_line_ends": _query_command(LINE_END, _fixed(VISIBLE_ON_SCREEN)),
    "action.flash_all_line_indents": _query_command(LINE_INDENT, _fixed(VISIBLE_ON_SCREEN)),
    "action.flash_all_line_marks": _query_command(RegexQuery(r"(?m)^|$"), _fixed(VISIBLE_ON_SCREEN)),
}

RESET_ACTION_ID = "action.flash_reset"


def run_action(
    action_id: str,
    registry: SessionRegistry,
    primary: TargetContext,
    targets: Sequence[TargetContext] | None = None,
) -> Session | None:
    """Run one jump command against the session owned by ``primary``.

    Returns the session the command ran on, or None for the reset command.
    Unknown ids raise KeyError.
    """
    if action_id == RESET_ACTION_ID:
        registry.end(primary, JumpCancelled())
        return None
    command = SESSION_COMMANDS[action_id]
    session = registry.start(primary, targets)
    command(session)
    return session


def action_ids() -> list[str]:
    return [*SESSION_COMMANDS, RESET_ACTION_ID]


__all__ = [
    "SessionCommand",
    "SESSION_COMMANDS",
    "RESET_ACTION_ID",
    "run_action",
    "action_ids",
]
