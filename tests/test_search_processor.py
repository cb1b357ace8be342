"""Unit tests for SearchProcessor."""

import pytest

from flashjump.core.boundaries import VISIBLE_ON_SCREEN, WHOLE_FILE, after_caret
from flashjump.core.search_query import LINE_END, LiteralQuery, RegexQuery
from flashjump.core.search_processor import SearchProcessor

from .fakes import FakeTarget


def _starts(processor: SearchProcessor) -> list[int]:
    return [m.start_offset for m in processor.all_matches]


class TestSearch:
    """Scanning targets within their boundaries."""

    def test_single_occurrence_has_pattern_length(self) -> None:
        target = FakeTarget("the Needle in a haystack")
        processor = SearchProcessor.from_char([target], "n", WHOLE_FILE)
        processor.search(LiteralQuery("needle"))
        assert processor.match_count == 1
        match = processor.all_matches[0]
        assert (match.start_offset, match.end_offset) == (4, 10)

    def test_matches_outside_viewport_are_dropped(self) -> None:
        target = FakeTarget("a....a....a", viewport=(3, 8))
        processor = SearchProcessor.from_char([target], "a", VISIBLE_ON_SCREEN)
        assert _starts(processor) == [5]

    def test_match_ending_past_range_is_dropped(self) -> None:
        target = FakeTarget("xx ab", viewport=(0, 4))
        processor = SearchProcessor([target], VISIBLE_ON_SCREEN)
        processor.search(LiteralQuery("ab"))
        assert processor.match_count == 0

    def test_zero_width_query_gets_minimum_length(self) -> None:
        target = FakeTarget("ab\ncd\n")
        processor = SearchProcessor([target], WHOLE_FILE)
        processor.search(LINE_END)
        assert [(m.start_offset, m.end_offset) for m in processor.all_matches] == [(2, 3), (5, 6)]

    def test_after_caret_excludes_caret_offset(self) -> None:
        target = FakeTarget("a a a a", caret=2)
        processor = SearchProcessor.from_char([target], "a", after_caret(True))
        assert _starts(processor) == [4, 6]

    def test_targets_without_matches_are_omitted(self) -> None:
        first = FakeTarget("xyz", name="first")
        second = FakeTarget("abc", name="second")
        processor = SearchProcessor.from_char([first, second], "b", WHOLE_FILE)
        assert processor.matches_for(first) == []
        assert [m.target for m in processor.all_matches] == [second]

    def test_all_matches_follow_target_order(self) -> None:
        first = FakeTarget("b.b", name="first")
        second = FakeTarget("bb", name="second")
        processor = SearchProcessor.from_char([second, first], "b", WHOLE_FILE)
        assert [(m.target.name, m.start_offset) for m in processor.all_matches] == [
            ("second", 0),
            ("second", 1),
            ("first", 0),
            ("first", 2),
        ]

    def test_invalid_regex_yields_no_matches(self) -> None:
        processor = SearchProcessor.from_regex([FakeTarget("abc")], "(", WHOLE_FILE)
        assert processor.match_count == 0

    def test_all_words_and_line_starts_constructors(self) -> None:
        target = FakeTarget("one two\nthree")
        assert _starts(SearchProcessor.for_all_words([target], WHOLE_FILE)) == [0, 4, 8]
        assert _starts(SearchProcessor.for_line_starts([target], WHOLE_FILE)) == [0, 8]


class TestAppendChar:
    """Narrowing a literal search one character at a time."""

    def test_narrows_case_insensitively(self) -> None:
        target = FakeTarget("ab Ac AB")
        processor = SearchProcessor.from_char([target], "a", WHOLE_FILE)
        assert processor.append_char("B")
        assert _starts(processor) == [0, 6]
        assert processor.query == LiteralQuery("aB")
        assert [m.end_offset for m in processor.all_matches] == [2, 8]

    def test_failed_narrowing_leaves_state_untouched(self) -> None:
        target = FakeTarget("ab ac")
        processor = SearchProcessor.from_char([target], "a", WHOLE_FILE)
        assert not processor.append_char("z")
        assert processor.query == LiteralQuery("a")
        assert _starts(processor) == [0, 3]

    def test_match_running_off_the_text_is_dropped(self) -> None:
        target = FakeTarget("ab a")
        processor = SearchProcessor.from_char([target], "a", WHOLE_FILE)
        assert processor.append_char("b")
        assert _starts(processor) == [0]

    def test_match_running_past_boundary_is_dropped(self) -> None:
        target = FakeTarget("ab...ab", viewport=(0, 6))
        processor = SearchProcessor.from_char([target], "a", VISIBLE_ON_SCREEN)
        assert _starts(processor) == [0, 5]
        assert processor.append_char("b")
        assert _starts(processor) == [0]

    def test_non_literal_query_cannot_be_extended(self) -> None:
        processor = SearchProcessor([FakeTarget("abc")], WHOLE_FILE)
        processor.search(RegexQuery("a"))
        assert not processor.append_char("b")

    def test_rejects_more_than_one_character(self) -> None:
        processor = SearchProcessor.from_char([FakeTarget("abc")], "a", WHOLE_FILE)
        with pytest.raises(ValueError):
            processor.append_char("bc")

    def test_clear(self) -> None:
        processor = SearchProcessor.from_char([FakeTarget("abc")], "a", WHOLE_FILE)
        processor.clear()
        assert processor.match_count == 0
        assert processor.all_matches == []
