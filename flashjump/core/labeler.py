"""Label assignment and typed-label resolution.

Labels are built from the configured alphabet. When more matches exist than
single characters, labels grow to two or three characters; every label has
the same length within one assignment so no label is a prefix of another.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from .contracts import TargetContext
from .search_match import SearchMatch

logger = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 3


@dataclass(frozen=True)
class LabelJump:
    match: SearchMatch
    label: str


@dataclass(frozen=True)
class LabelPartial:
    prefix: str


@dataclass(frozen=True)
class LabelInvalid:
    pass


LabelResult = Union[LabelJump, LabelPartial, LabelInvalid]


def label_length_for(match_count: int, alphabet_size: int) -> int:
    if alphabet_size <= 0:
        return 1
    length = 1
    while alphabet_size ** length < match_count and length < MAX_LABEL_LENGTH:
        length += 1
    return length


def generate_labels(alphabet: Sequence[str], length: int, count: int) -> list[str]:
    combos = itertools.product(alphabet, repeat=max(1, length))
    return ["".join(combo) for combo in itertools.islice(combos, max(0, count))]


class Labeler:
    def __init__(self, primary: TargetContext, label_chars: Iterable[str]) -> None:
        self._primary = primary
        self._alphabet: list[str] = list(dict.fromkeys(str(ch).lower() for ch in label_chars if str(ch)))
        self._label_to_match: dict[str, SearchMatch] = {}
        self._prefix = ""

    @property
    def alphabet(self) -> list[str]:
        return list(self._alphabet)

    @property
    def current_prefix(self) -> str:
        return self._prefix

    def has_labels(self) -> bool:
        return bool(self._label_to_match)

    def assign_labels(self, matches: Sequence[SearchMatch], pattern: str) -> dict[str, SearchMatch]:
        for match in [*self._label_to_match.values(), *matches]:
            match.label = None
        self._label_to_match = {}
        self._prefix = ""
        if not matches:
            return {}

        available = self._available_chars(matches, pattern)
        if not available:
            logger.debug("no label characters left for pattern %r", pattern)
            return {}

        ordered = self._sort_matches(matches)
        length = label_length_for(len(ordered), len(available))
        labels = generate_labels(available, length, len(ordered))
        for label, match in zip(labels, ordered):
            match.label = label
            self._label_to_match[label] = match

        logger.debug("assigned %d labels of length %d", len(self._label_to_match), length)
        return dict(self._label_to_match)

    def _available_chars(self, matches: Sequence[SearchMatch], pattern: str) -> list[str]:
        if not pattern:
            return list(self._alphabet)
        # A character that would continue the pattern somewhere must keep
        # extending the search, so it cannot start a label.
        skip: set[str] = set()
        texts: dict[int, str] = {}
        for match in matches:
            key = id(match.target)
            if key not in texts:
                texts[key] = match.target.get_text()
            text = texts[key]
            next_offset = match.start_offset + len(pattern)
            if next_offset < len(text):
                skip.add(text[next_offset].lower())
        return [ch for ch in self._alphabet if ch not in skip]

    def _sort_matches(self, matches: Sequence[SearchMatch]) -> list[SearchMatch]:
        caret = self._primary.caret_offset()
        return sorted(
            matches,
            key=lambda m: (
                0 if m.target is self._primary else 1,
                0 if m.is_visible() else 1,
                m.distance_to(caret),
            ),
        )

    def process_label_input(self, char: str) -> LabelResult:
        prefix = self._prefix + char.lower()

        exact = self._label_to_match.get(prefix)
        if exact is not None:
            self._prefix = ""
            return LabelJump(exact, prefix)

        candidates = [label for label in self._label_to_match if label.startswith(prefix)]
        if not candidates:
            self._prefix = ""
            return LabelInvalid()
        if len(candidates) == 1:
            self._prefix = ""
            label = candidates[0]
            return LabelJump(self._label_to_match[label], label)
        self._prefix = prefix
        return LabelPartial(prefix)

    def is_valid_label_char(self, char: str) -> bool:
        prefix = self._prefix + char.lower()
        return any(label.startswith(prefix) for label in self._label_to_match)

    def find_match_by_label(self, label: str) -> SearchMatch | None:
        return self._label_to_match.get(str(label or "").lower())

    def labeled_matches(self) -> list[SearchMatch]:
        return list(self._label_to_match.values())

    def reset_prefix(self) -> None:
        self._prefix = ""

    def clear(self) -> None:
        for match in self._label_to_match.values():
            match.label = None
        self._label_to_match = {}
        self._prefix = ""


__all__ = [
    "MAX_LABEL_LENGTH",
    "LabelJump",
    "LabelPartial",
    "LabelInvalid",
    "LabelResult",
    "label_length_for",
    "generate_labels",
    "Labeler",
]
