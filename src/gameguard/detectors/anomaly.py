# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Sampled per-actor event frequency counting.

Only a random sample of each batch is counted, unless the batch is small,
in which case every event is counted.  Windows reset wholesale once stale
rather than sliding, so rates are approximate.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from gameguard.core.constants import Clock, EventType, Severity
from gameguard.detectors.base import BatchConsumer
from gameguard.events.bus import EventEmitter
from gameguard.models.events import SecurityEvent

logger = logging.getLogger("gameguard.detectors.anomaly")

DEFAULT_THRESHOLDS: dict[str, int] = {
    EventType.LOOT_ROLL: 10,
    EventType.COMBAT_ACTION: 30,
    EventType.SAVE: 15,
    EventType.FORGE_ATTEMPT: 10,
}


@dataclass(slots=True)
class AnomalyMetrics:
    window_started_at: float
    last_event_at: float
    total_events: int = 0
    event_counts: dict[str, int] = field(default_factory=dict)
    anomaly_score: float = 0.0


class AnomalyAnalyzer(BatchConsumer):
    """Bus consumer flagging actors whose per-type rates exceed thresholds."""

    def __init__(
        self,
        emit: EventEmitter,
        *,
        thresholds: dict[str, int] | None = None,
        window: float = 60.0,
        sample_rate: float = 0.1,
        small_batch: int = 10,
        weight: float = 2.0,
        alert_threshold: float = 30.0,
        score_decay: float = 5.0,
        stale_after: float = 5 * 60,
        rng: random.Random | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._emit = emit
        self._thresholds = dict(DEFAULT_THRESHOLDS if thresholds is None else thresholds)
        self._window = window
        self._sample_rate = sample_rate
        self._small_batch = small_batch
        self._weight = weight
        self._alert_threshold = alert_threshold
        self._decay = score_decay
        self._stale_after = stale_after
        self._rng = rng or random.Random()
        self._clock = clock
        self._metrics: dict[str, AnomalyMetrics] = {}

    @property
    def name(self) -> str:
        return "anomaly_analyzer"

    @property
    def thresholds(self) -> dict[str, int]:
        return dict(self._thresholds)

    async def on_batch(self, events: Sequence[SecurityEvent]) -> None:
        for event in self._sample(events):
            self._update_metrics(event)
        self._check_for_anomalies()

    def _sample(self, events: Sequence[SecurityEvent]) -> list[SecurityEvent]:
        if len(events) < self._small_batch or self._sample_rate >= 1.0:
            return list(events)
        return [e for e in events if self._rng.random() < self._sample_rate]

    def _update_metrics(self, event: SecurityEvent) -> None:
        now = self._clock()
        metrics = self._metrics.get(event.actor_id)
        if metrics is None or now - metrics.window_started_at > self._window:
            metrics = AnomalyMetrics(window_started_at=now, last_event_at=now)
            self._metrics[event.actor_id] = metrics

        metrics.total_events += 1
        metrics.last_event_at = now
        metrics.event_counts[event.event_type] = metrics.event_counts.get(event.event_type, 0) + 1

    def _check_for_anomalies(self) -> None:
        for actor_id, metrics in self._metrics.items():
            tripped = False
            for event_type, threshold in self._thresholds.items():
                count = metrics.event_counts.get(event_type, 0)
                if count > threshold:
                    tripped = True
                    metrics.anomaly_score += (count - threshold) * self._weight

            if tripped and metrics.anomaly_score > self._alert_threshold:
                logger.warning(
                    "Anomalous activity for %s (score=%.1f)",
                    actor_id,
                    metrics.anomaly_score,
                    extra={"actor_id": actor_id, "event_type": EventType.ANOMALY_DETECTED},
                )
                self._emit(
                    actor_id,
                    EventType.ANOMALY_DETECTED,
                    Severity.HIGH,
                    {
                        "score": metrics.anomaly_score,
                        "event_counts": dict(metrics.event_counts),
                    },
                )

            metrics.anomaly_score = max(0.0, metrics.anomaly_score - self._decay)

    def cleanup_stale(self) -> int:
        now = self._clock()
        stale = [a for a, m in self._metrics.items() if now - m.last_event_at > self._stale_after]
        for actor_id in stale:
            del self._metrics[actor_id]
        return len(stale)

    def anomaly_score(self, actor_id: str) -> float:
        metrics = self._metrics.get(actor_id)
        return metrics.anomaly_score if metrics else 0.0

    def metrics_for(self, actor_id: str) -> AnomalyMetrics | None:
        return self._metrics.get(actor_id)

    @property
    def actor_count(self) -> int:
        return len(self._metrics)
