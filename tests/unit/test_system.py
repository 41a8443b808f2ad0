# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the SecuritySystem facade wiring the whole pipeline together."""

from __future__ import annotations

import asyncio
import random

import pytest

from gameguard.core.config import Settings
from gameguard.core.constants import EventType, Severity
from gameguard.detectors.profile import DetectionProfile, SuspiciousSequence
from gameguard.inline.checks import RATE_LIMITED_REASON
from gameguard.models.events import RequestContext
from gameguard.policy.engine import COOLDOWN_REASON, SUSPENDED_REASON
from gameguard.system import (
    FAIL_CLOSED_REASON,
    SecuritySystem,
    get_security_system,
    reset_security_system,
)


def _ctx(actor_id: str = "p1", endpoint: str = "/api/loot/roll") -> RequestContext:
    return RequestContext(actor_id=actor_id, endpoint=endpoint, ip="10.0.0.1")


@pytest.fixture
def system(settings: Settings, clock) -> SecuritySystem:
    return SecuritySystem(settings, clock=clock, rng=random.Random(0))


async def _drain_all(system: SecuritySystem) -> None:
    while system.bus.queue_depth or system.bus.processing:
        if not await system.bus.drain():
            await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    async def test_start_is_idempotent(self, system: SecuritySystem) -> None:
        await system.start()
        await system.start()
        try:
            assert system.running
            assert system.bus.consumer_names == [
                "pattern_detector",
                "anomaly_analyzer",
                "log_aggregator",
            ]
            assert system.scheduler.job_names == ["compaction", "log_flush", "violation_decay"]
        finally:
            await system.stop()
        assert not system.running

    async def test_restart_does_not_duplicate_consumers(self, system: SecuritySystem) -> None:
        await system.start()
        await system.stop()
        await system.start()
        await system.stop()
        assert len(system.bus.consumer_names) == 3

    async def test_stats_after_stop(self, system: SecuritySystem) -> None:
        await system.start()
        system.emit_event("p1", "SAVE", Severity.LOW)
        await system.stop()
        stats = system.get_system_stats()
        assert stats.running is False
        assert stats.queue_depth == 1
        assert stats.last_compaction is None
        assert stats.alerting["configured"] is False


# ---------------------------------------------------------------------------
# Inline checks
# ---------------------------------------------------------------------------


class TestCheckRequest:
    def test_allows_normal_traffic(self, system: SecuritySystem) -> None:
        result = system.check_request(_ctx())
        assert result.allowed is True
        assert result.reason is None

    def test_rate_limit_denial_emits_event(self, system: SecuritySystem) -> None:
        results = [system.check_request(_ctx()) for _ in range(31)]
        assert all(r.allowed for r in results[:30])
        assert results[30].allowed is False
        assert results[30].reason == RATE_LIMITED_REASON
        assert system.bus.queue_depth == 1

    def test_violation_escalation(self, system: SecuritySystem, clock) -> None:
        for _ in range(11):
            system.record_violation("p1")

        first = system.check_request(_ctx())
        assert first.allowed is False
        assert first.reason == COOLDOWN_REASON
        assert system.bans.is_banned("p1")

        second = system.evaluate_policy(_ctx())
        assert second.reason == SUSPENDED_REASON

        clock.advance(300)
        system.clear_violations("p1")
        assert system.check_request(_ctx()).allowed is True

    def test_fail_open(self, system: SecuritySystem, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom(ctx):
            raise RuntimeError("policy store down")

        monkeypatch.setattr(system.policy, "evaluate", boom)
        assert system.check_request(_ctx()).allowed is True

    def test_fail_closed(self, settings: Settings, clock, monkeypatch: pytest.MonkeyPatch) -> None:
        system = SecuritySystem(settings.model_copy(update={"fail_open": False}), clock=clock)

        def boom(ctx):
            raise RuntimeError("policy store down")

        monkeypatch.setattr(system.inline, "perform", boom)
        result = system.check_request(_ctx())
        assert result.allowed is False
        assert result.reason == FAIL_CLOSED_REASON


# ---------------------------------------------------------------------------
# Asynchronous tier
# ---------------------------------------------------------------------------


class TestPipeline:
    async def test_events_reach_every_consumer(self, system: SecuritySystem) -> None:
        await system.start()
        try:
            for _ in range(3):
                assert system.emit_event("p1", EventType.LOOT_ROLL, Severity.LOW)
            await _drain_all(system)
        finally:
            await system.stop()

        assert system.pattern_detector.suspicion_score("p1") == pytest.approx(9.0)
        assert system.anomaly_analyzer.metrics_for("p1").total_events == 3
        assert system.log_aggregator.stats()["total_events"] == 3

    async def test_pattern_alert_flows_back_onto_bus(
        self, settings: Settings, clock
    ) -> None:
        system = SecuritySystem(
            settings.model_copy(update={"pattern_alert_threshold": 5}), clock=clock
        )
        await system.start()
        try:
            for _ in range(3):
                system.emit_event("p1", EventType.LOOT_ROLL, Severity.LOW)
            await system.bus.drain()
            assert system.bus.queue_depth == 1
            await system.bus.drain()
        finally:
            await system.stop()

        entry = system.log_aggregator.entry_for(EventType.PATTERN_ALERT, Severity.HIGH)
        assert entry is not None
        assert entry.count == 1

    async def test_compaction_job(self, system: SecuritySystem, clock) -> None:
        system.register_session("tok", "p1")
        clock.advance(1801)
        await system.scheduler.run_job("compaction")
        stats = system.get_system_stats()
        assert stats.sessions == 0
        assert stats.last_compaction["sessions_cleared"] == 1

    async def test_violation_decay_job(self, system: SecuritySystem) -> None:
        system.record_violation("p1")
        await system.scheduler.run_job("violation_decay")
        assert system.get_system_stats().tracked_violations == 0


# ---------------------------------------------------------------------------
# Sessions and configuration
# ---------------------------------------------------------------------------


class TestEmitEvent:
    async def test_severity_case_insensitive(self, system: SecuritySystem) -> None:
        assert system.emit_event("p1", "SUSPICIOUS_WITHDRAWAL", "HIGH", {"amount": 5000})
        assert system.emit_event("p1", "SUSPICIOUS_WITHDRAWAL", "high")
        assert system.bus.queue_depth == 2

        collected = []

        async def collect(events):
            collected.extend(events)

        system.bus.register_consumer("collect", collect)
        await system.bus.drain()
        assert [e.severity for e in collected] == [Severity.HIGH, Severity.HIGH]

    def test_unknown_severity_dropped(self, system: SecuritySystem) -> None:
        assert system.emit_event("p1", "SAVE", "SEVERE") is False
        assert system.bus.queue_depth == 0


class TestSessions:
    def test_round_trip(self, system: SecuritySystem) -> None:
        system.register_session("tok", "p1")
        assert system.validate_session("tok").actor_id == "p1"
        assert system.validate_actor_session("p1", "tok").allow is True
        assert system.validate_actor_session("p2", "tok").allow is False
        assert system.invalidate_session("tok") is True
        assert system.validate_session("tok").valid is False


class TestProfiles:
    def test_profile_overrides_tables(self, settings: Settings, clock) -> None:
        profile = DetectionProfile(
            patterns=[SuspiciousSequence(name="x", events=["A"], window_seconds=1, score=1)],
            anomaly_thresholds={"CHAT": 3},
        )
        system = SecuritySystem(settings, profile=profile, clock=clock)
        assert [s.name for s in system.pattern_detector.sequences] == ["x"]
        assert system.anomaly_analyzer.thresholds == {"CHAT": 3}

    def test_missing_profile_falls_back(self, settings: Settings, tmp_path, clock) -> None:
        settings = settings.model_copy(update={"detection_profile": str(tmp_path / "none.yml")})
        system = SecuritySystem(settings, clock=clock)
        assert len(system.pattern_detector.sequences) == 3

    def test_profile_loaded_from_settings(self, settings: Settings, tmp_path, clock) -> None:
        path = tmp_path / "p.yml"
        path.write_text("anomaly_thresholds:\n  SAVE: 2\n", encoding="utf-8")
        settings = settings.model_copy(update={"detection_profile": str(path)})
        system = SecuritySystem(settings, clock=clock)
        assert system.anomaly_analyzer.thresholds == {"SAVE": 2}


class TestSingleton:
    def test_get_and_reset(self) -> None:
        first = get_security_system()
        assert get_security_system() is first
        reset_security_system()
        assert get_security_system() is not first
