"""Jump session: ties search, labeling and jump execution together.

One session exists per primary target. It claims exclusive key routing on
the primary target for its whole lifetime and publishes a full render
snapshot for every participating target after each update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Sequence, Union

from flashjump.settings_schema import FlashConfig

from .boundaries import Boundaries, default_boundaries
from .contracts import KeyHandlers, KeyRouter, RenderSink, RenderSnapshot, SpecialKey, TagMarker, TargetContext
from .jump_mode import JumpMode, JumpModeTracker
from .labeler import Labeler, LabelInvalid, LabelJump, LabelPartial
from .search_match import SearchMatch
from .search_processor import SearchProcessor
from .search_query import LiteralQuery, RegexQuery, SearchQuery

if TYPE_CHECKING:
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    LABELING = "labeling"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class JumpSuccess:
    match: SearchMatch


@dataclass(frozen=True)
class JumpCancelled:
    pass


JumpResult = Union[JumpSuccess, JumpCancelled]


class SessionListener:
    def on_jump(self, match: SearchMatch) -> None:
        pass

    def on_session_end(self, result: JumpResult) -> None:
        pass


class Session:
    def __init__(
        self,
        primary: TargetContext,
        targets: Sequence[TargetContext],
        *,
        config: FlashConfig,
        key_router: KeyRouter,
        render_sink: RenderSink,
        registry: "SessionRegistry | None" = None,
    ) -> None:
        ordered = list(targets) or [primary]
        if not any(t is primary for t in ordered):
            raise ValueError("Primary target must be one of the session targets.")
        # Primary first, remaining targets keep their order.
        self._targets: list[TargetContext] = [primary] + [t for t in ordered if t is not primary]
        self._primary = primary
        self._config = config
        self._router = key_router
        self._sink = render_sink
        self._registry = registry

        self._boundaries: Boundaries = default_boundaries(config.search_whole_file)
        self._mode_tracker = JumpModeTracker()
        self._jump_mode = JumpMode.DISABLED
        self._processor: SearchProcessor | None = None
        self._labeler = Labeler(primary, config.label_chars())
        self._pattern = ""
        self._regex_mode = False
        self._default_match: SearchMatch | None = None
        self._listeners: list[SessionListener] = []
        self._disposed = False

        self._router.claim(
            primary,
            KeyHandlers(on_char=self.handle_typed_char, on_special=self.handle_special_key),
        )
        logger.debug("session created for %d targets", len(self._targets))

    # ---- accessors -------------------------------------------------------

    @property
    def primary(self) -> TargetContext:
        return self._primary

    @property
    def targets(self) -> list[TargetContext]:
        return list(self._targets)

    @property
    def config(self) -> FlashConfig:
        return self._config

    @property
    def jump_mode(self) -> JumpMode:
        return self._jump_mode

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def boundaries(self) -> Boundaries:
        return self._boundaries

    @property
    def default_match(self) -> SearchMatch | None:
        return self._default_match

    @property
    def labeler(self) -> Labeler:
        return self._labeler

    @property
    def processor(self) -> SearchProcessor | None:
        return self._processor

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> SessionState:
        if self._disposed:
            return SessionState.DISPOSED
        if self._processor is None:
            return SessionState.IDLE
        if self._regex_mode or len(self._pattern) >= self._config.min_pattern_length:
            return SessionState.LABELING
        return SessionState.SEARCHING

    def add_listener(self, listener: SessionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---- key handling ----------------------------------------------------

    def handle_special_key(self, key: SpecialKey) -> bool:
        if self._disposed:
            return False
        if key is SpecialKey.ENTER:
            self.jump_to_default()
        elif key is SpecialKey.SHIFT_ENTER:
            self.select_backward()
        elif key is SpecialKey.ESCAPE:
            logger.debug("escape")
            self.end(JumpCancelled())
        elif key is SpecialKey.BACKSPACE:
            self.handle_backspace()
        else:
            raise TypeError(f"Unsupported special key: {key!r}")
        return True

    def handle_typed_char(self, char: str) -> bool:
        if self._disposed or len(char) != 1:
            return False
        logger.debug("typed %r, pattern=%r, state=%s", char, self._pattern, self.state.value)

        state = self.state
        if state is SessionState.IDLE:
            self._start_search(char)
            return True
        if state is SessionState.SEARCHING:
            # Below the minimum length a character can never be a label.
            self._append_to_search(char)
            return True

        if not self._regex_mode and self._literal_count(self._pattern + char) > 0:
            self._labeler.reset_prefix()
            self._append_to_search(char)
            return True

        result = self._labeler.process_label_input(char)
        if isinstance(result, LabelJump):
            self.perform_jump(result.match)
        elif isinstance(result, LabelPartial):
            self._publish()
        elif isinstance(result, LabelInvalid):
            logger.debug("%r is neither a search extension nor a label", char)
        else:
            raise TypeError(f"Unsupported label result: {result!r}")
        return True

    def handle_backspace(self) -> None:
        if not self._pattern:
            self.end(JumpCancelled())
            return
        self._pattern = self._pattern[:-1]
        if not self._pattern:
            self.restart()
            return
        processor = self._processor
        if processor is None:
            self.restart()
            return
        processor.search(LiteralQuery(self._pattern))
        self._labeler.reset_prefix()
        if processor.match_count == 0:
            self.end(JumpCancelled())
            return
        self._update_search()

    def jump_to_default(self) -> None:
        if self._config.confirm_behavior == "cancel" or not self._labeler.has_labels():
            self.end(JumpCancelled())
            return
        match = self._default_match
        if match is None:
            self.end(JumpCancelled())
            return
        self.perform_jump(match)

    def select_backward(self) -> None:
        """Reserved for jumping to the previous match; consumes the key only."""

    # ---- searching -------------------------------------------------------

    def _start_search(self, char: str) -> None:
        self._pattern = char
        self._regex_mode = False
        self._processor = SearchProcessor.from_char(self._targets, char, self._boundaries)
        if self._processor.match_count == 0:
            logger.debug("no matches for %r", char)
            self.end(JumpCancelled())
            return
        self._update_search()

    def _literal_count(self, pattern: str) -> int:
        processor = self._processor
        boundaries = processor.boundaries if processor is not None else self._boundaries
        trial = SearchProcessor(self._targets, boundaries)
        trial.search(LiteralQuery(pattern))
        return trial.match_count

    def _append_to_search(self, char: str) -> None:
        processor = self._processor
        if processor is None:
            return
        self._pattern += char
        # A fresh search, so occurrences dropped by an earlier Backspace come back.
        processor.search(LiteralQuery(self._pattern))
        if processor.match_count == 0:
            logger.debug("no matches for %r", self._pattern)
            self.end(JumpCancelled())
            return
        self._after_literal_update()

    def _after_literal_update(self) -> None:
        self._update_search()
        processor = self._processor
        if self._disposed or processor is None:
            return
        if self._config.auto_jump and processor.match_count == 1:
            self.perform_jump(processor.all_matches[0])

    def start_regex_search(self, pattern: str, boundaries: Boundaries | None = None) -> None:
        self.start_query_search(RegexQuery(pattern), boundaries)

    def start_query_search(self, query: SearchQuery, boundaries: Boundaries | None = None) -> None:
        if self._disposed:
            return
        logger.debug("query search %r", query)
        self._labeler.clear()
        self._default_match = None
        self._publish_cleared()

        requested = boundaries if boundaries is not None else self._boundaries
        self._boundaries = requested.intersection(default_boundaries(self._config.search_whole_file))
        self._processor = SearchProcessor(self._targets, self._boundaries)
        self._processor.search(query)
        self._pattern = ""
        self._regex_mode = True
        if self._processor.match_count == 0:
            self.end(JumpCancelled())
            return
        self._update_search()

    def _update_search(self) -> None:
        processor = self._processor
        if processor is None:
            return
        matches = processor.all_matches
        self._default_match = self.find_default_match(matches)

        if self.state is SessionState.LABELING:
            exclusion = self._pattern if isinstance(processor.query, LiteralQuery) else ""
            self._labeler.assign_labels(matches, exclusion)
        else:
            self._labeler.clear()
        self._publish()

    def find_default_match(self, matches: Sequence[SearchMatch]) -> SearchMatch | None:
        if not matches:
            return None
        own = [m for m in matches if m.target is self._primary]
        if not own:
            return matches[0]
        caret = self._primary.caret_offset()
        after = [m for m in own if m.start_offset > caret]
        if after:
            return min(after, key=lambda m: m.start_offset)
        before = [m for m in own if m.start_offset <= caret]
        if before:
            return max(before, key=lambda m: m.start_offset)
        return own[0]

    def restart(self) -> None:
        """Drop the search but keep the session open."""
        logger.debug("restart")
        self._labeler.clear()
        self._processor = None
        self._pattern = ""
        self._regex_mode = False
        self._default_match = None
        self._publish_cleared()

    # ---- jump modes ------------------------------------------------------

    def _set_jump_mode(self, mode: JumpMode) -> None:
        if self._disposed:
            return
        self._jump_mode = mode
        logger.debug("jump mode %s", mode.value)
        if mode is JumpMode.DISABLED:
            self.end(JumpCancelled())
            return
        self._publish()
        self._sink.set_caret_accent(self._primary, mode.caret_color)

    def cycle_next_jump_mode(self) -> None:
        self._set_jump_mode(self._mode_tracker.cycle(forward=True))

    def cycle_previous_jump_mode(self) -> None:
        self._set_jump_mode(self._mode_tracker.cycle(forward=False))

    def toggle_jump_mode(self, mode: JumpMode, boundaries: Boundaries | None = None) -> None:
        if boundaries is not None:
            self._boundaries = self._boundaries.intersection(boundaries)
        self._set_jump_mode(self._mode_tracker.toggle(mode))

    # ---- jumping ---------------------------------------------------------

    def perform_jump(self, match: SearchMatch) -> None:
        if self._disposed:
            return
        target = match.target
        mode = self._jump_mode
        logger.debug("jump (%s) to %d", mode.value, match.start_offset)

        if mode in (JumpMode.JUMP, JumpMode.DEFINITION):
            target.set_caret_offset(match.start_offset)
        elif mode is JumpMode.JUMP_END:
            target.set_caret_offset(match.end_offset)
        elif mode is JumpMode.TARGET:
            origin = self._primary.caret_offset()
            self._primary.set_selection(min(origin, match.start_offset), max(origin, match.end_offset))
            target.set_caret_offset(match.start_offset)
        elif mode is not JumpMode.DISABLED:
            raise TypeError(f"Unsupported jump mode: {mode!r}")

        target.scroll_to_offset(target.caret_offset())
        for listener in list(self._listeners):
            self._guarded("on_jump listener", listener.on_jump, match)
        self.end(JumpSuccess(match))

    # ---- rendering -------------------------------------------------------

    def _snapshot_for(self, target: TargetContext) -> RenderSnapshot:
        processor = self._processor
        matches = processor.matches_for(target) if processor is not None else []
        labeled = [m for m in self._labeler.labeled_matches() if m.target is target and m.label]
        default = self._default_match
        highlights: tuple[tuple[int, int], ...] = ()
        if self._config.highlight_matches:
            highlights = tuple((m.start_offset, m.end_offset) for m in matches)
        return RenderSnapshot(
            markers=tuple(TagMarker(m.start_offset, m.end_offset, m.label or "") for m in labeled),
            highlights=highlights,
            default_match=(
                (default.start_offset, default.end_offset)
                if default is not None and default.target is target
                else None
            ),
            typed_prefix=self._labeler.current_prefix,
            show_backdrop=self._config.show_backdrop and self._jump_mode is not JumpMode.DISABLED,
        )

    def _publish(self) -> None:
        for target in self._targets:
            self._sink.publish(target, self._snapshot_for(target))

    def _publish_cleared(self) -> None:
        backdrop = self._config.show_backdrop and self._jump_mode is not JumpMode.DISABLED
        for target in self._targets:
            self._sink.publish(target, RenderSnapshot(show_backdrop=backdrop))

    # ---- teardown --------------------------------------------------------

    def end(self, result: JumpResult | None = None) -> None:
        if self._registry is not None:
            self._registry.end(self._primary, result)
        else:
            self.dispose(result)

    def dispose(self, result: JumpResult | None = None) -> None:
        if self._disposed:
            return
        self._disposed = True
        final = result if result is not None else JumpCancelled()
        logger.debug("dispose: %s", type(final).__name__)
        if self._registry is not None:
            self._registry.discard(self._primary, self)

        self._labeler.clear()
        self._processor = None
        self._default_match = None
        self._guarded("release key routing", self._router.release, self._primary)
        for target in self._targets:
            self._guarded("unbind overlay", self._sink.unbind, target)
        if self._guarded("liveness check", self._primary.is_live):
            self._guarded("restore caret", self._sink.set_caret_accent, self._primary, None)

        for listener in list(self._listeners):
            self._guarded("on_session_end listener", listener.on_session_end, final)

        focus = final.match.target if isinstance(final, JumpSuccess) else self._primary
        if self._guarded("liveness check", focus.is_live):
            self._guarded("scroll", lambda: focus.scroll_to_offset(focus.caret_offset()))

    @staticmethod
    def _guarded(what: str, fn: Callable, *args):
        try:
            return fn(*args)
        except Exception:
            logger.exception("session step failed: %s", what)
            return None


__all__ = [
    "SessionState",
    "JumpSuccess",
    "JumpCancelled",
    "JumpResult",
    "SessionListener",
    "Session",
]
