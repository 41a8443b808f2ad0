# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Periodic expiry sweep across every component's in-memory state."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass

from gameguard.alerting.dispatcher import AlertDispatcher
from gameguard.core.constants import Clock
from gameguard.detectors.base import BatchConsumer
from gameguard.events.bus import EventBus
from gameguard.inline.bans import BanList
from gameguard.inline.rate_limiter import RateLimiter
from gameguard.inline.sessions import SessionRegistry
from gameguard.maintenance.log_aggregator import LogAggregator

logger = logging.getLogger("gameguard.maintenance.compactor")


@dataclass(frozen=True, slots=True)
class CompactionStats:
    sessions_cleared: int
    metrics_cleared: int
    buckets_cleared: int
    bans_cleared: int
    events_flushed: int
    event_queue_size: int
    timestamp: float

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


class MemoryCompactor:
    """Sweeps expired sessions, stale detector state, buckets and bans."""

    def __init__(
        self,
        *,
        sessions: SessionRegistry,
        detectors: list[BatchConsumer],
        aggregator: LogAggregator,
        bus: EventBus,
        rate_limiter: RateLimiter,
        bans: BanList,
        alerts: AlertDispatcher | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._sessions = sessions
        self._detectors = detectors
        self._aggregator = aggregator
        self._bus = bus
        self._rate_limiter = rate_limiter
        self._bans = bans
        self._alerts = alerts
        self._clock = clock
        self._last_compaction: CompactionStats | None = None

    @property
    def last_compaction(self) -> CompactionStats | None:
        return self._last_compaction

    async def run_compaction(self) -> CompactionStats:
        sessions_cleared = self._sessions.sweep_expired()
        metrics_cleared = sum(d.cleanup_stale() for d in self._detectors)
        buckets_cleared = self._rate_limiter.sweep_expired()
        bans_cleared = self._bans.sweep_expired()
        if self._alerts is not None:
            self._alerts.prune_cooldowns()

        report = await self._aggregator.flush()

        stats = CompactionStats(
            sessions_cleared=sessions_cleared,
            metrics_cleared=metrics_cleared,
            buckets_cleared=buckets_cleared,
            bans_cleared=bans_cleared,
            events_flushed=report.total_events,
            event_queue_size=self._bus.queue_depth,
            timestamp=self._clock(),
        )
        self._last_compaction = stats

        if sessions_cleared or metrics_cleared:
            logger.info(
                "Compaction cleaned %d sessions, %d metrics", sessions_cleared, metrics_cleared
            )
        return stats
