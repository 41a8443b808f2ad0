# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Collaborator-facing facade over the tiered security pipeline.

:class:`SecuritySystem` owns one instance of every component, wires the
bus consumers and background jobs on :meth:`start`, and exposes the
inline-check, ingestion, escalation, session and diagnostics entry
points.  None of the public methods raise.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any

from pydantic import BaseModel

from gameguard.alerting.base import AlertSink
from gameguard.alerting.dispatcher import AlertDispatcher
from gameguard.alerting.factory import build_dispatcher
from gameguard.core.config import Settings, get_settings
from gameguard.core.constants import Clock, Severity
from gameguard.core.exceptions import ConfigurationError
from gameguard.detectors.anomaly import DEFAULT_THRESHOLDS, AnomalyAnalyzer
from gameguard.detectors.pattern import PatternDetector
from gameguard.detectors.profile import DEFAULT_SEQUENCES, DetectionProfile, load_detection_profile
from gameguard.events.bus import EventBus
from gameguard.inline.bans import BanList
from gameguard.inline.checks import InlineChecker
from gameguard.inline.rate_limiter import RateLimiter
from gameguard.inline.sessions import SessionRegistry
from gameguard.maintenance.compactor import MemoryCompactor
from gameguard.maintenance.log_aggregator import LogAggregator
from gameguard.maintenance.scheduler import BackgroundScheduler, PeriodicJob
from gameguard.models.events import PolicyDecision, RequestContext
from gameguard.models.results import CheckResult, SessionValidation
from gameguard.policy.engine import PolicyEngine

logger = logging.getLogger("gameguard.system")

FAIL_CLOSED_REASON = "Security check unavailable"

# Module-level singleton
_system: SecuritySystem | None = None


class SystemStats(BaseModel):
    """Read-only diagnostics snapshot."""

    sessions: int
    pattern_actors: int
    anomaly_actors: int
    queue_depth: int
    dropped_events: int
    aggregated_logs: dict[str, int]
    last_compaction: dict[str, Any] | None
    rate_limit_buckets: int
    active_bans: int
    tracked_violations: int
    consumer_failures: dict[str, int]
    alerting: dict[str, Any]
    running: bool


class SecuritySystem:
    """The whole anti-cheat pipeline for one process.

    Args:
        settings: Application settings; loaded from the environment if omitted.
        alert_sink: Outward notifier; built from settings if omitted.
        profile: Detection profile overriding pattern and anomaly tables.
            If omitted and ``settings.detection_profile`` is set, it is
            loaded from that path.
        clock: Time source shared by every component.
        rng: Random source for anomaly sampling.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        alert_sink: AlertSink | None = None,
        profile: DetectionProfile | None = None,
        clock: Clock = time.time,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        s = self._settings
        profile = profile or self._load_profile()

        self.bus = EventBus(
            max_queue_size=s.bus_max_queue_size,
            batch_size=s.bus_batch_size,
            drain_interval=s.bus_drain_interval,
            clock=clock,
        )
        self.alerts: AlertDispatcher = build_dispatcher(s, sink=alert_sink, clock=clock)

        self.rate_limiter = RateLimiter(
            s.rate_limits, cleanup_interval=s.rate_limit_cleanup_interval, clock=clock
        )
        self.sessions = SessionRegistry(ttl=s.session_ttl, clock=clock)
        self.bans = BanList(clock=clock)
        self.inline = InlineChecker(self.rate_limiter, self.bans, self.sessions, self.bus.emit_quick)
        self.policy = PolicyEngine(
            self.bans,
            self.bus.emit_quick,
            violation_threshold=s.violation_threshold,
            ban_seconds=s.violation_ban_seconds,
        )

        sequences = DEFAULT_SEQUENCES
        if profile and profile.patterns is not None:
            sequences = tuple(profile.patterns)
        self.pattern_detector = PatternDetector(
            self.bus.emit_quick,
            sequences=sequences,
            max_recent_events=s.pattern_max_recent_events,
            analysis_cooldown=s.pattern_analysis_cooldown,
            alert_threshold=s.pattern_alert_threshold,
            score_decay=s.pattern_score_decay,
            stale_after=s.pattern_stale_after,
            clock=clock,
        )
        thresholds = s.anomaly_thresholds or DEFAULT_THRESHOLDS
        if profile and profile.anomaly_thresholds is not None:
            thresholds = profile.anomaly_thresholds
        self.anomaly_analyzer = AnomalyAnalyzer(
            self.bus.emit_quick,
            thresholds=thresholds,
            window=s.anomaly_window,
            sample_rate=s.anomaly_sample_rate,
            small_batch=s.anomaly_small_batch,
            weight=s.anomaly_weight,
            alert_threshold=s.anomaly_alert_threshold,
            score_decay=s.anomaly_score_decay,
            stale_after=s.anomaly_stale_after,
            rng=rng,
            clock=clock,
        )
        self.log_aggregator = LogAggregator(
            self.alerts,
            max_sample_actors=s.aggregator_max_sample_actors,
            flush_threshold=s.aggregator_flush_threshold,
            clock=clock,
        )

        self.compactor = MemoryCompactor(
            sessions=self.sessions,
            detectors=[self.pattern_detector, self.anomaly_analyzer],
            aggregator=self.log_aggregator,
            bus=self.bus,
            rate_limiter=self.rate_limiter,
            bans=self.bans,
            alerts=self.alerts,
            clock=clock,
        )
        self.scheduler = BackgroundScheduler(
            [
                PeriodicJob("compaction", s.compaction_interval, self.compactor.run_compaction),
                PeriodicJob("log_flush", s.log_flush_interval, self.log_aggregator.flush),
                PeriodicJob("violation_decay", s.violation_decay_interval, self.policy.decay_violations),
            ]
        )

        self._consumers_wired = False

    def _load_profile(self) -> DetectionProfile | None:
        path = self._settings.detection_profile
        if not path:
            return None
        try:
            return load_detection_profile(path)
        except ConfigurationError as exc:
            logger.warning("Ignoring detection profile, using defaults: %s", exc)
            return None

    @property
    def settings(self) -> Settings:
        return self._settings

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self.bus.running

    async def start(self) -> None:
        """Wire consumers and start timers. Repeat calls are no-ops."""
        if self.running:
            return
        if not self._consumers_wired:
            for consumer in (self.pattern_detector, self.anomaly_analyzer, self.log_aggregator):
                self.bus.register_consumer(consumer.name, consumer.on_batch)
            self._consumers_wired = True
        self.bus.start()
        self.scheduler.start()
        logger.info("Tiered anti-cheat system started")

    async def stop(self) -> None:
        """Halt timers. Queued events and in-flight work are left as they are."""
        await self.bus.stop()
        await self.scheduler.stop()

    # ------------------------------------------------------------------
    # Inline checks
    # ------------------------------------------------------------------

    def evaluate_policy(self, context: RequestContext) -> PolicyDecision:
        """Full decision: policy rules first, then ban and rate-limit checks."""
        try:
            decision = self.policy.evaluate(context)
            if not decision.allow:
                return decision
            return self.inline.perform(context)
        except Exception:
            logger.exception("Inline check failed for %s", context.actor_id)
            if self._settings.fail_open:
                return PolicyDecision.allowed()
            return PolicyDecision.denied(FAIL_CLOSED_REASON)

    def check_request(self, context: RequestContext) -> CheckResult:
        decision = self.evaluate_policy(context)
        return CheckResult(allowed=decision.allow, reason=decision.reason)

    # ------------------------------------------------------------------
    # Ingestion and escalation
    # ------------------------------------------------------------------

    def emit_event(
        self,
        actor_id: str,
        event_type: str,
        severity: Severity | str,
        data: dict[str, Any] | None = None,
        ip: str | None = None,
        endpoint: str | None = None,
    ) -> bool:
        """Fire-and-forget ingestion. Returns ``False`` if the event was dropped."""
        return self.bus.emit_quick(actor_id, event_type, severity, data, ip, endpoint)

    def record_violation(self, actor_id: str) -> int:
        try:
            return self.policy.record_violation(actor_id)
        except Exception:
            logger.exception("Failed to record violation for %s", actor_id)
            return 0

    def clear_violations(self, actor_id: str) -> None:
        self.policy.clear_violations(actor_id)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def register_session(self, token: str, actor_id: str) -> None:
        self.sessions.register(token, actor_id)

    def validate_session(self, token: str | None) -> SessionValidation:
        return self.sessions.validate(token)

    def validate_actor_session(self, actor_id: str, token: str | None) -> PolicyDecision:
        return self.inline.validate_session(actor_id, token)

    def invalidate_session(self, token: str) -> bool:
        return self.sessions.invalidate(token)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def get_system_stats(self) -> SystemStats:
        last = self.compactor.last_compaction
        return SystemStats(
            sessions=self.sessions.active_count,
            pattern_actors=self.pattern_detector.actor_count,
            anomaly_actors=self.anomaly_analyzer.actor_count,
            queue_depth=self.bus.queue_depth,
            dropped_events=self.bus.dropped_count,
            aggregated_logs=self.log_aggregator.stats(),
            last_compaction=last.to_dict() if last else None,
            rate_limit_buckets=self.rate_limiter.bucket_count,
            active_bans=self.bans.active_count,
            tracked_violations=self.policy.tracked_actors,
            consumer_failures=self.bus.consumer_failures(),
            alerting=self.alerts.status(),
            running=self.running,
        )


def get_security_system() -> SecuritySystem:
    """Return the module-level :class:`SecuritySystem` singleton."""
    global _system
    if _system is None:
        _system = SecuritySystem()
    return _system


def reset_security_system() -> None:
    """Reset the singleton (useful for testing)."""
    global _system
    _system = None
