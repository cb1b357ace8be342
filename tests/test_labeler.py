"""Unit tests for label assignment and label input resolution."""

from flashjump.core.labeler import (
    Labeler,
    LabelInvalid,
    LabelJump,
    LabelPartial,
    generate_labels,
    label_length_for,
)
from flashjump.core.search_match import SearchMatch

from .fakes import FakeTarget


def _matches(target: FakeTarget, starts: list[int], length: int = 1) -> list[SearchMatch]:
    return [SearchMatch(target, s, s + length) for s in starts]


class TestLabelGeneration:
    """Label length and cartesian enumeration."""

    def test_length_grows_with_match_count(self) -> None:
        assert label_length_for(2, 2) == 1
        assert label_length_for(4, 2) == 2
        assert label_length_for(5, 2) == 3

    def test_length_is_capped(self) -> None:
        assert label_length_for(1000, 2) == 3

    def test_generation_order(self) -> None:
        assert generate_labels(["a", "b"], 2, 3) == ["aa", "ab", "ba"]


class TestAssignLabels:
    """Ordering, exclusion and capacity rules."""

    def test_five_matches_on_two_letter_alphabet(self) -> None:
        target = FakeTarget("x" * 20)
        matches = _matches(target, [0, 2, 4, 6, 8])
        labels = Labeler(target, "ab").assign_labels(matches, "")
        assert len(labels) == 5
        assert all(len(label) == 3 for label in labels)
        assert sorted(labels) == ["aaa", "aab", "aba", "abb", "baa"]

    def test_labels_are_distinct(self) -> None:
        target = FakeTarget("y" * 200)
        matches = _matches(target, list(range(0, 200, 2)))
        labels = Labeler(target, "asdf").assign_labels(matches, "")
        assert len(set(labels)) == len(labels) == 64

    def test_excess_matches_stay_unlabeled(self) -> None:
        target = FakeTarget("z" * 40)
        matches = _matches(target, list(range(10)))
        labeler = Labeler(target, "ab")
        labels = labeler.assign_labels(matches, "")
        assert len(labels) == 8
        assert sum(1 for m in matches if m.label is None) == 2

    def test_next_character_is_excluded(self) -> None:
        target = FakeTarget("ab ac ad")
        matches = _matches(target, [0, 3, 6])
        labeler = Labeler(target, "abcdef")
        labeler.assign_labels(matches, "a")
        assert {m.label for m in matches} == {"a", "e", "f"}

    def test_empty_alphabet_after_exclusion(self) -> None:
        target = FakeTarget("ab ac")
        matches = _matches(target, [0, 3])
        labeler = Labeler(target, "bc")
        assert labeler.assign_labels(matches, "a") == {}
        assert not labeler.has_labels()

    def test_sort_prefers_primary_visible_and_near(self) -> None:
        primary = FakeTarget("q" * 50, caret=20, viewport=(10, 40), name="primary")
        other = FakeTarget("q" * 50, name="other")
        far_other = SearchMatch(other, 21, 22)
        hidden = SearchMatch(primary, 45, 46)
        near = SearchMatch(primary, 22, 23)
        nearer = SearchMatch(primary, 19, 20)
        labeler = Labeler(primary, "abcd")
        labeler.assign_labels([far_other, hidden, near, nearer], "")
        assert [nearer.label, near.label, hidden.label, far_other.label] == ["a", "b", "c", "d"]

    def test_alphabet_is_case_insensitive(self) -> None:
        labeler = Labeler(FakeTarget(""), ["a", "b", "A", "B"])
        assert labeler.alphabet == ["a", "b"]

    def test_reassignment_clears_stale_labels(self) -> None:
        target = FakeTarget("x" * 10)
        first = _matches(target, [0, 2])
        labeler = Labeler(target, "ab")
        labeler.assign_labels(first, "")
        labeler.assign_labels(first[:1], "")
        assert first[1].label is None
        assert labeler.find_match_by_label("b") is None


class TestLabelInput:
    """Resolving typed characters against assigned labels."""

    def _labeler(self, count: int, alphabet: str = "ab") -> tuple[Labeler, list[SearchMatch]]:
        target = FakeTarget("x" * 40)
        matches = _matches(target, list(range(0, count * 2, 2)))
        labeler = Labeler(target, alphabet)
        labeler.assign_labels(matches, "")
        return labeler, matches

    def test_exact_label_resolves(self) -> None:
        labeler, matches = self._labeler(2)
        result = labeler.process_label_input("b")
        assert result == LabelJump(matches[1], "b")

    def test_partial_then_complete(self) -> None:
        labeler, matches = self._labeler(4)
        assert labeler.process_label_input("a") == LabelPartial("a")
        assert labeler.current_prefix == "a"
        result = labeler.process_label_input("b")
        assert isinstance(result, LabelJump)
        assert result.label == "ab"
        assert labeler.current_prefix == ""

    def test_unique_prefix_autocompletes(self) -> None:
        labeler, matches = self._labeler(3)
        # Labels are aa, ab, ba; "b" only leads to "ba".
        result = labeler.process_label_input("b")
        assert result == LabelJump(matches[2], "ba")

    def test_exact_match_wins_over_longer_labels(self) -> None:
        target = FakeTarget("x" * 10)
        match = SearchMatch(target, 0, 1)
        longer = SearchMatch(target, 2, 3)
        labeler = Labeler(target, "ab")
        labeler._label_to_match = {"a": match, "ab": longer}
        assert labeler.process_label_input("a") == LabelJump(match, "a")

    def test_invalid_input_resets_prefix(self) -> None:
        labeler, _ = self._labeler(4)
        labeler.process_label_input("a")
        assert labeler.process_label_input("z") == LabelInvalid()
        assert labeler.current_prefix == ""

    def test_uppercase_input_is_folded(self) -> None:
        labeler, matches = self._labeler(2)
        assert labeler.process_label_input("A") == LabelJump(matches[0], "a")

    def test_is_valid_label_char_does_not_mutate(self) -> None:
        labeler, _ = self._labeler(4)
        assert labeler.is_valid_label_char("a")
        assert not labeler.is_valid_label_char("q")
        assert labeler.current_prefix == ""

    def test_clear(self) -> None:
        labeler, _ = self._labeler(4)
        labeler.process_label_input("a")
        labeler.clear()
        assert not labeler.has_labels()
        assert labeler.current_prefix == ""
        assert labeler.alphabet == ["a", "b"]
