"""Unit tests for the session registry."""

import threading

from flashjump.core.session import JumpCancelled
from flashjump.core.session_registry import SessionRegistry

from .fakes import FakeTarget, make_config


class TestSessionRegistry:
    """At most one session per primary target."""

    def test_redundant_start_returns_existing_session(self, registry) -> None:
        target = FakeTarget("abc")
        first = registry.start(target)
        assert registry.start(target) is first
        assert registry.active_count() == 1

    def test_sessions_are_keyed_by_identity(self, registry) -> None:
        one = FakeTarget("same")
        two = FakeTarget("same")
        assert registry.start(one) is not registry.start(two)
        assert registry.active_count() == 2

    def test_end_disposes_and_forgets(self, registry, router) -> None:
        target = FakeTarget("abc")
        session = registry.start(target)
        registry.end(target, JumpCancelled())
        assert session.is_disposed
        assert registry.get(target) is None
        assert id(target) not in router.claims

    def test_end_unknown_target_is_a_no_op(self, registry) -> None:
        registry.end(FakeTarget("abc"))
        assert registry.active_count() == 0

    def test_dead_targets_are_pruned_on_lookup(self, registry) -> None:
        target = FakeTarget("abc")
        session = registry.start(target)
        target.live = False
        assert registry.get(target) is None
        assert session.is_disposed

    def test_start_after_end_creates_fresh_session(self, registry) -> None:
        target = FakeTarget("abc")
        first = registry.start(target)
        first.end()
        assert registry.start(target) is not first

    def test_end_all(self, registry) -> None:
        sessions = [registry.start(FakeTarget(str(i))) for i in range(3)]
        registry.end_all()
        assert registry.active_count() == 0
        assert all(s.is_disposed for s in sessions)

    def test_update_config_applies_to_new_sessions(self, registry) -> None:
        old = registry.start(FakeTarget("a"))
        registry.update_config(make_config(min_pattern_length=1))
        new = registry.start(FakeTarget("b"))
        assert old.config.min_pattern_length == 2
        assert new.config.min_pattern_length == 1

    def test_concurrent_starts_share_one_session(self, router, sink, config) -> None:
        registry = SessionRegistry(key_router=router, render_sink=sink, config=config)
        target = FakeTarget("abc")
        results = []
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            results.append(registry.start(target))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len({id(s) for s in results}) == 1
        assert registry.active_count() == 1
