"""Process-wide table of active jump sessions, one per primary target."""

from __future__ import annotations

import logging
import threading
from typing import Sequence

from flashjump.settings_schema import FlashConfig

from .contracts import KeyRouter, NullRenderSink, RenderSink, TargetContext
from .session import JumpResult, Session

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns the shared key router, render sink and configuration.

    Entries are keyed by target identity. Targets that report not-live are
    pruned before every lookup.
    """

    def __init__(
        self,
        *,
        key_router: KeyRouter,
        render_sink: RenderSink | None = None,
        config: FlashConfig | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[int, tuple[TargetContext, Session]] = {}
        self.key_router = key_router
        self.render_sink: RenderSink = render_sink if render_sink is not None else NullRenderSink()
        self.config: FlashConfig = config if config is not None else FlashConfig.defaults()

    def update_config(self, config: FlashConfig) -> None:
        """Applies to sessions started afterwards."""
        self.config = config

    def start(self, primary: TargetContext, targets: Sequence[TargetContext] | None = None) -> Session:
        self._prune()
        with self._lock:
            entry = self._sessions.get(id(primary))
            if entry is not None:
                return entry[1]
            session = Session(
                primary,
                list(targets) if targets else [primary],
                config=self.config,
                key_router=self.key_router,
                render_sink=self.render_sink,
                registry=self,
            )
            self._sessions[id(primary)] = (primary, session)
        logger.debug("session started; %d active", len(self._sessions))
        return session

    def get(self, target: TargetContext) -> Session | None:
        self._prune()
        with self._lock:
            entry = self._sessions.get(id(target))
        return entry[1] if entry is not None else None

    def has_active_session(self, target: TargetContext) -> bool:
        return self.get(target) is not None

    def end(self, target: TargetContext, result: JumpResult | None = None) -> None:
        with self._lock:
            entry = self._sessions.pop(id(target), None)
        # Dispose outside the lock; listeners may call back into the registry.
        if entry is not None:
            entry[1].dispose(result)

    def discard(self, target: TargetContext, session: Session) -> None:
        """Drop the entry for ``target`` if it still belongs to ``session``."""
        with self._lock:
            entry = self._sessions.get(id(target))
            if entry is not None and entry[1] is session:
                del self._sessions[id(target)]

    def end_all(self) -> None:
        with self._lock:
            entries = list(self._sessions.values())
            self._sessions.clear()
        for _target, session in entries:
            session.dispose(None)

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _prune(self) -> None:
        with self._lock:
            dead = [key for key, (target, _s) in self._sessions.items() if not _target_is_live(target)]
            stale = [self._sessions.pop(key) for key in dead]
        for _target, session in stale:
            session.dispose(None)


def _target_is_live(target: TargetContext) -> bool:
    try:
        return bool(target.is_live())
    except Exception:
        return False


__all__ = ["SessionRegistry"]
