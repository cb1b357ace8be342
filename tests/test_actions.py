"""Unit tests for the jump command table."""

import pytest

from flashjump.actions import RESET_ACTION_ID, SESSION_COMMANDS, action_ids, run_action
from flashjump.core.jump_mode import JumpMode
from flashjump.keybindings import KEYBINDING_ACTIONS
from flashjump.core.search_query import ALL_WORDS, LINE_INDENT

from .fakes import FakeTarget


def _starts(session) -> list[int]:
    return [m.start_offset for m in session.processor.all_matches]


class TestCommandTable:
    """Every bindable action maps to a command."""

    def test_ids_match_keybinding_table(self) -> None:
        assert set(action_ids()) == {action.action_id for action in KEYBINDING_ACTIONS}
        assert RESET_ACTION_ID not in SESSION_COMMANDS

    def test_unknown_id_raises(self, registry) -> None:
        with pytest.raises(KeyError):
            run_action("action.flash_unknown", registry, FakeTarget("abc"))


class TestModeCommands:
    """Activation, cycling and toggling."""

    def test_activate_then_cycle(self, registry) -> None:
        target = FakeTarget("abc")
        session = run_action("action.flash_activate_or_cycle", registry, target)
        assert session.jump_mode is JumpMode.JUMP
        assert run_action("action.flash_activate_or_cycle", registry, target) is session
        assert session.jump_mode is JumpMode.JUMP_END

    def test_reverse_cycle(self, registry) -> None:
        session = run_action("action.flash_activate_or_reverse_cycle", registry, FakeTarget("abc"))
        assert session.jump_mode is JumpMode.TARGET

    def test_toggle_twice_ends_session(self, registry) -> None:
        target = FakeTarget("abc")
        session = run_action("action.flash_toggle_target", registry, target)
        run_action("action.flash_toggle_target", registry, target)
        assert session.is_disposed
        assert not registry.has_active_session(target)

    def test_forward_jump_limits_search(self, registry, router) -> None:
        target = FakeTarget("ab ab ab", caret=3)
        session = run_action("action.flash_toggle_forward_jump", registry, target)
        router.type(target, "ab")
        assert _starts(session) == [6]

    def test_backward_jump_limits_search(self, registry, router) -> None:
        target = FakeTarget("ab ab ab", caret=3)
        session = run_action("action.flash_toggle_backward_jump", registry, target)
        router.type(target, "ab")
        assert _starts(session) == [0]

    def test_reset_ends_session(self, registry) -> None:
        target = FakeTarget("abc")
        session = run_action("action.flash_toggle_jump", registry, target)
        assert run_action(RESET_ACTION_ID, registry, target) is None
        assert session.is_disposed


class TestQueryCommands:
    """Word and line commands start labeled searches at once."""

    def test_all_words(self, registry) -> None:
        target = FakeTarget("one two three")
        session = run_action("action.flash_all_words", registry, target)
        assert session.jump_mode is JumpMode.JUMP
        assert session.processor.query == ALL_WORDS
        assert _starts(session) == [0, 4, 8]
        assert session.labeler.has_labels()

    def test_all_words_forward_and_backward(self, registry) -> None:
        target = FakeTarget("one two three", caret=5)
        forward = run_action("action.flash_all_words_forward", registry, target)
        assert _starts(forward) == [8]
        registry.end(target)
        backward = run_action("action.flash_all_words_backward", registry, target)
        assert _starts(backward) == [0, 4]

    def test_line_starts_and_ends(self, registry) -> None:
        target = FakeTarget("ab\ncd\nef")
        starts = run_action("action.flash_all_line_starts", registry, target)
        assert _starts(starts) == [0, 3, 6]
        registry.end(target)
        ends = run_action("action.flash_all_line_ends", registry, target)
        assert _starts(ends) == [2, 5]

    def test_line_indents(self, registry) -> None:
        target = FakeTarget("a\n  b\n\tc")
        session = run_action("action.flash_all_line_indents", registry, target)
        assert session.processor.query == LINE_INDENT
        assert _starts(session) == [0, 4, 7]

    def test_line_marks(self, registry) -> None:
        target = FakeTarget("ab\ncd")
        session = run_action("action.flash_all_line_marks", registry, target)
        assert _starts(session) == [0, 2, 3]

    def test_jump_by_label_after_word_command(self, registry, router) -> None:
        target = FakeTarget("one two three")
        session = run_action("action.flash_all_words", registry, target)
        label = next(m.label for m in session.processor.all_matches if m.start_offset == 4)
        router.type(target, label)
        assert target.caret == 4
        assert session.is_disposed
