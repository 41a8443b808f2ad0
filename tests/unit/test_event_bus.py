# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the bounded event bus: backpressure, batching and fan-out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import pytest

from gameguard.core.constants import Severity
from gameguard.events.bus import EventBus
from gameguard.models.events import SecurityEvent


def _event(actor_id: str = "p1", event_type: str = "LOOT_ROLL") -> SecurityEvent:
    return SecurityEvent.create(actor_id, event_type, Severity.LOW)


class Collector:
    def __init__(self) -> None:
        self.batches: list[Sequence[SecurityEvent]] = []

    async def __call__(self, events: Sequence[SecurityEvent]) -> None:
        self.batches.append(events)

    @property
    def events(self) -> list[SecurityEvent]:
        return [e for batch in self.batches for e in batch]


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


class TestEmit:
    def test_emit_enqueues(self) -> None:
        bus = EventBus()
        assert bus.emit(_event()) is True
        assert bus.queue_depth == 1

    def test_queue_full_drops_newest(self) -> None:
        bus = EventBus(max_queue_size=5)
        results = [bus.emit(_event(actor_id=f"p{i}")) for i in range(12)]
        assert results == [True] * 5 + [False] * 7
        assert bus.queue_depth == 5
        assert bus.dropped_count == 7

    def test_drop_warning_every_hundred(self, caplog: pytest.LogCaptureFixture) -> None:
        bus = EventBus(max_queue_size=0)
        with caplog.at_level(logging.WARNING, logger="gameguard.events.bus"):
            for _ in range(250):
                bus.emit(_event())
        warnings = [r for r in caplog.records if "dropped" in r.getMessage()]
        assert len(warnings) == 2

    def test_emit_quick_uses_bus_clock(self, clock) -> None:
        bus = EventBus(clock=clock)
        assert bus.emit_quick("p1", "SAVE", Severity.HIGH, {"k": 1}, "1.1.1.1", "/api/save")
        assert bus.queue_depth == 1

    def test_emit_quick_swallows_malformed_event(self) -> None:
        bus = EventBus()
        assert bus.emit_quick("p1", "SAVE", "not-a-severity") is False
        assert bus.queue_depth == 0


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDrain:
    async def test_drain_empty_queue(self) -> None:
        assert await EventBus().drain() == 0

    async def test_drain_dispatches_one_batch_in_order(self, clock) -> None:
        bus = EventBus(batch_size=3, clock=clock)
        collector = Collector()
        bus.register_consumer("c", collector)
        for i in range(5):
            bus.emit_quick(f"p{i}", "LOOT_ROLL", Severity.LOW)

        assert await bus.drain() == 3
        assert [e.actor_id for e in collector.events] == ["p0", "p1", "p2"]
        assert bus.queue_depth == 2

        assert await bus.drain() == 2
        assert [len(b) for b in collector.batches] == [3, 2]
        assert bus.batches_dispatched == 2

    async def test_every_consumer_sees_the_same_batch(self) -> None:
        bus = EventBus()
        first, second = Collector(), Collector()
        bus.register_consumer("first", first)
        bus.register_consumer("second", second)
        bus.emit(_event())
        await bus.drain()
        assert first.batches[0] is second.batches[0]

    async def test_consumer_failure_is_isolated(self) -> None:
        bus = EventBus()
        good = Collector()

        async def broken(events: Sequence[SecurityEvent]) -> None:
            raise RuntimeError("detector crashed")

        bus.register_consumer("broken", broken)
        bus.register_consumer("good", good)
        bus.emit(_event())
        assert await bus.drain() == 1
        assert len(good.events) == 1
        assert bus.consumer_failures() == {"broken": 1, "good": 0}
        assert bus.processing is False

    async def test_single_flight(self) -> None:
        bus = EventBus(batch_size=1)
        release = asyncio.Event()
        seen: list[str] = []

        async def slow(events: Sequence[SecurityEvent]) -> None:
            seen.extend(e.actor_id for e in events)
            await release.wait()

        bus.register_consumer("slow", slow)
        bus.emit(_event("a"))
        bus.emit(_event("b"))

        first = asyncio.create_task(bus.drain())
        await asyncio.sleep(0)
        assert bus.processing is True
        assert await bus.drain() == 0

        release.set()
        assert await first == 1
        assert seen == ["a"]
        assert bus.queue_depth == 1

    async def test_unregister_consumer(self) -> None:
        bus = EventBus()
        collector = Collector()
        bus.register_consumer("c", collector)
        assert bus.unregister_consumer("c") is True
        assert bus.unregister_consumer("c") is False
        bus.emit(_event())
        await bus.drain()
        assert collector.events == []


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    async def test_timer_drains_queue(self) -> None:
        bus = EventBus(drain_interval=0.01)
        collector = Collector()
        bus.register_consumer("c", collector)
        bus.start()
        bus.start()
        try:
            for i in range(3):
                bus.emit(_event(f"p{i}"))
            for _ in range(100):
                if len(collector.events) == 3:
                    break
                await asyncio.sleep(0.01)
        finally:
            await bus.stop()
        assert len(collector.events) == 3
        assert bus.running is False

    async def test_stop_leaves_queue_intact(self) -> None:
        bus = EventBus(drain_interval=10)
        bus.start()
        bus.emit(_event())
        await bus.stop()
        await bus.stop()
        assert bus.queue_depth == 1

    async def test_reset_stats(self) -> None:
        bus = EventBus(max_queue_size=0)
        bus.register_consumer("c", Collector())
        bus.emit(_event())
        bus.reset_stats()
        assert bus.dropped_count == 0
        assert bus.consumer_failures() == {"c": 0}
