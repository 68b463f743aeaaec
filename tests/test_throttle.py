"""Tests for the recompute cooldown gate and the freshness cache."""

from vynce_analytics.utils.throttle import CooldownGate, FreshnessCache


class TestCooldownGate:
    def test_repeat_inside_window_is_dropped(self, clock):
        gate = CooldownGate(3, clock=clock.monotonic)
        assert gate.try_acquire()
        clock.advance(seconds=1)
        assert not gate.try_acquire()
        clock.advance(seconds=2)
        assert gate.try_acquire()

    def test_dropped_trigger_does_not_extend_window(self, clock):
        gate = CooldownGate(3, clock=clock.monotonic)
        gate.try_acquire()
        clock.advance(seconds=2)
        gate.try_acquire()
        clock.advance(seconds=1)
        assert gate.try_acquire()

    def test_reset(self, clock):
        gate = CooldownGate(3, clock=clock.monotonic)
        gate.try_acquire()
        gate.reset()
        assert gate.try_acquire()


class TestFreshnessCache:
    def test_loader_called_once_while_fresh(self, clock):
        cache = FreshnessCache(300, clock=clock.monotonic)
        calls = []

        def loader():
            calls.append(1)
            return ["value"]

        assert cache.get_or_load("k", loader) == ["value"]
        clock.advance(seconds=299)
        assert cache.get_or_load("k", loader) == ["value"]
        assert len(calls) == 1

        clock.advance(seconds=1)
        cache.get_or_load("k", loader)
        assert len(calls) == 2

    def test_missing_key(self, clock):
        assert FreshnessCache(300, clock=clock.monotonic).get("missing") is None

    def test_clear(self, clock):
        cache = FreshnessCache(300, clock=clock.monotonic)
        cache.set("k", 1)
        cache.clear()
        assert cache.get("k") is None
