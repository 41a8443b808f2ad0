# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""De-duplicating counters for noisy security event storms.

Events are folded into one entry per ``(event_type, severity)``.  A flush
logs a summary, forwards high-severity entries to the alert dispatcher and
resets all aggregated state.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from gameguard.alerting.dispatcher import AlertDispatcher
from gameguard.core.constants import Clock, Severity
from gameguard.detectors.base import BatchConsumer
from gameguard.models.events import SecurityEvent

logger = logging.getLogger("gameguard.maintenance.log_aggregator")

_DEFAULT_MAX_SAMPLE_ACTORS = 5
_DEFAULT_FLUSH_THRESHOLD = 100


@dataclass(slots=True)
class AggregatedLogEntry:
    event_type: str
    severity: Severity
    first_seen_at: float
    last_seen_at: float
    count: int = 0
    sample_actor_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "event_type": self.event_type,
            "severity": str(self.severity),
            "count": self.count,
            "first_seen_at": self.first_seen_at,
            "last_seen_at": self.last_seen_at,
            "sample_actor_ids": list(self.sample_actor_ids),
        }


@dataclass(frozen=True, slots=True)
class FlushReport:
    total_events: int = 0
    duration: float = 0.0
    entries: tuple[AggregatedLogEntry, ...] = ()

    @property
    def high_severity(self) -> list[AggregatedLogEntry]:
        return [e for e in self.entries if e.severity.at_least(Severity.HIGH)]


class LogAggregator(BatchConsumer):
    """Bus consumer that collapses repeated events into counters."""

    def __init__(
        self,
        alerts: AlertDispatcher | None = None,
        *,
        max_sample_actors: int = _DEFAULT_MAX_SAMPLE_ACTORS,
        flush_threshold: int = _DEFAULT_FLUSH_THRESHOLD,
        clock: Clock = time.time,
    ) -> None:
        self._alerts = alerts
        self._max_sample_actors = max_sample_actors
        self._flush_threshold = flush_threshold
        self._clock = clock
        self._entries: dict[tuple[str, Severity], AggregatedLogEntry] = {}
        self._total_events = 0
        self._last_flush = clock()

    @property
    def name(self) -> str:
        return "log_aggregator"

    async def on_batch(self, events: Sequence[SecurityEvent]) -> None:
        for event in events:
            self.aggregate(event)
        if len(self._entries) > self._flush_threshold:
            await self.flush()

    def aggregate(self, event: SecurityEvent) -> None:
        key = (event.event_type, event.severity)
        entry = self._entries.get(key)
        if entry is None:
            entry = AggregatedLogEntry(
                event_type=event.event_type,
                severity=event.severity,
                first_seen_at=event.timestamp,
                last_seen_at=event.timestamp,
            )
            self._entries[key] = entry

        entry.count += 1
        entry.last_seen_at = event.timestamp
        if (
            len(entry.sample_actor_ids) < self._max_sample_actors
            and event.actor_id not in entry.sample_actor_ids
        ):
            entry.sample_actor_ids.append(event.actor_id)

        self._total_events += 1

    async def flush(self) -> FlushReport:
        """Log and reset everything aggregated so far."""
        if not self._entries:
            return FlushReport()

        now = self._clock()
        report = FlushReport(
            total_events=self._total_events,
            duration=now - self._last_flush,
            entries=tuple(self._entries.values()),
        )
        self._entries.clear()
        self._total_events = 0
        self._last_flush = now

        logger.info("Flush: %d events in %.1fs", report.total_events, report.duration)
        for entry in report.high_severity:
            logger.warning(
                "[%s] %s: %d occurrences (actors: %s)",
                entry.severity.upper(),
                entry.event_type,
                entry.count,
                ", ".join(entry.sample_actor_ids),
            )

        if self._alerts is not None:
            for entry in report.high_severity:
                try:
                    await self._alerts.alert_security_event(
                        entry.event_type,
                        f"{entry.count} {entry.severity} occurrences since last flush",
                        entry.to_dict(),
                    )
                except Exception:
                    logger.exception("Failed to raise alert for %s", entry.event_type)

        return report

    def stats(self) -> dict[str, int]:
        critical = sum(
            e.count for e in self._entries.values() if e.severity == Severity.CRITICAL
        )
        return {
            "log_count": len(self._entries),
            "total_events": self._total_events,
            "critical_count": critical,
        }

    def entry_for(self, event_type: str, severity: Severity) -> AggregatedLogEntry | None:
        return self._entries.get((event_type, severity))
