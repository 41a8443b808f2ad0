# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the sampled anomaly analyzer."""

from __future__ import annotations

import random

import pytest

from gameguard.core.constants import EventType, Severity
from gameguard.detectors.anomaly import DEFAULT_THRESHOLDS, AnomalyAnalyzer
from gameguard.models.events import SecurityEvent


def _events(actor_id: str, event_type: str, n: int) -> list[SecurityEvent]:
    return [SecurityEvent.create(actor_id, event_type, Severity.LOW) for _ in range(n)]


@pytest.fixture
def analyzer(emitter, clock) -> AnomalyAnalyzer:
    return AnomalyAnalyzer(emitter, sample_rate=1.0, clock=clock)


class TestCounting:
    async def test_counts_per_type(self, analyzer: AnomalyAnalyzer) -> None:
        await analyzer.on_batch(_events("p1", "LOOT_ROLL", 3) + _events("p1", "SAVE", 2))
        metrics = analyzer.metrics_for("p1")
        assert metrics is not None
        assert metrics.total_events == 5
        assert metrics.event_counts == {"LOOT_ROLL": 3, "SAVE": 2}

    async def test_window_resets_wholesale(self, analyzer: AnomalyAnalyzer, clock) -> None:
        await analyzer.on_batch(_events("p1", "LOOT_ROLL", 5))
        clock.advance(60)
        await analyzer.on_batch(_events("p1", "LOOT_ROLL", 1))
        assert analyzer.metrics_for("p1").event_counts["LOOT_ROLL"] == 6

        clock.advance(0.1)
        await analyzer.on_batch(_events("p1", "LOOT_ROLL", 1))
        assert analyzer.metrics_for("p1").event_counts["LOOT_ROLL"] == 1


class TestScoring:
    async def test_below_threshold_no_score(self, analyzer: AnomalyAnalyzer, emitter) -> None:
        await analyzer.on_batch(_events("p1", "LOOT_ROLL", 10))
        assert analyzer.anomaly_score("p1") == 0.0
        assert emitter.calls == []

    async def test_excess_scored_and_decayed(self, analyzer: AnomalyAnalyzer, emitter) -> None:
        await analyzer.on_batch(_events("p1", "LOOT_ROLL", 15))
        # (15 - 10) * 2 = 10, below the alert threshold, minus 5 decay
        assert analyzer.anomaly_score("p1") == pytest.approx(5.0)
        assert emitter.calls == []

    async def test_alert_over_threshold(self, analyzer: AnomalyAnalyzer, emitter) -> None:
        await analyzer.on_batch(_events("p1", "LOOT_ROLL", 30))
        assert len(emitter.calls) == 1
        call = emitter.calls[0]
        assert call["event_type"] == EventType.ANOMALY_DETECTED
        assert call["severity"] == Severity.HIGH
        assert call["data"]["score"] == pytest.approx(40.0)
        assert call["data"]["event_counts"] == {"LOOT_ROLL": 30}
        assert analyzer.anomaly_score("p1") == pytest.approx(35.0)

    async def test_score_floors_at_zero(self, analyzer: AnomalyAnalyzer) -> None:
        await analyzer.on_batch(_events("p1", "LOOT_ROLL", 11))
        for _ in range(3):
            await analyzer.on_batch([])
        assert analyzer.anomaly_score("p1") >= 0.0

    async def test_unknown_types_not_scored(self, analyzer: AnomalyAnalyzer) -> None:
        await analyzer.on_batch(_events("p1", "CHAT", 500))
        assert analyzer.anomaly_score("p1") == 0.0

    async def test_custom_thresholds(self, emitter, clock) -> None:
        analyzer = AnomalyAnalyzer(emitter, thresholds={"CHAT": 1}, sample_rate=1.0, clock=clock)
        assert analyzer.thresholds == {"CHAT": 1}
        await analyzer.on_batch(_events("p1", "CHAT", 4))
        assert analyzer.anomaly_score("p1") == pytest.approx(1.0)

    def test_default_thresholds(self, analyzer: AnomalyAnalyzer) -> None:
        assert analyzer.thresholds == DEFAULT_THRESHOLDS


class TestSampling:
    async def test_small_batches_fully_counted(self, emitter, clock) -> None:
        analyzer = AnomalyAnalyzer(emitter, sample_rate=0.0, clock=clock)
        await analyzer.on_batch(_events("p1", "SAVE", 9))
        assert analyzer.metrics_for("p1").total_events == 9

    async def test_zero_rate_drops_large_batches(self, emitter, clock) -> None:
        analyzer = AnomalyAnalyzer(emitter, sample_rate=0.0, clock=clock)
        await analyzer.on_batch(_events("p1", "SAVE", 50))
        assert analyzer.metrics_for("p1") is None

    async def test_seeded_sampling_is_deterministic(self, emitter, clock) -> None:
        counts = []
        for _ in range(2):
            analyzer = AnomalyAnalyzer(
                emitter, sample_rate=0.5, rng=random.Random(42), clock=clock
            )
            await analyzer.on_batch(_events("p1", "SAVE", 200))
            counts.append(analyzer.metrics_for("p1").total_events)
        assert counts[0] == counts[1]
        assert 0 < counts[0] < 200


class TestCleanup:
    async def test_stale_metrics_removed(self, analyzer: AnomalyAnalyzer, clock) -> None:
        await analyzer.on_batch(_events("p1", "SAVE", 1))
        clock.advance(100)
        await analyzer.on_batch(_events("p2", "SAVE", 1))
        clock.advance(250)
        assert analyzer.cleanup_stale() == 1
        assert analyzer.actor_count == 1
        assert analyzer.metrics_for("p2") is not None
