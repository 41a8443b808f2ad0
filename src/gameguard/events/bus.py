# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Bounded security event queue with periodic batched fan-out.

``emit`` is the only method on the request hot path: it appends to a
bounded deque and never blocks or raises.  A background timer drains the
queue in fixed-size batches and hands each batch to every registered
consumer concurrently.  A single in-flight flag guarantees that at most
one drain runs at a time even when timer ticks overlap.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from gameguard.core.constants import Clock, Severity
from gameguard.models.events import SecurityEvent

logger = logging.getLogger("gameguard.events.bus")

BatchHandler = Callable[[Sequence[SecurityEvent]], Awaitable[None]]


class EventEmitter(Protocol):
    """Anything shaped like :meth:`EventBus.emit_quick`."""

    def __call__(
        self,
        actor_id: str,
        event_type: str,
        severity: Severity | str,
        data: dict[str, Any] | None = None,
        ip: str | None = None,
        endpoint: str | None = None,
    ) -> bool: ...


_DEFAULT_MAX_QUEUE_SIZE = 1000
_DEFAULT_BATCH_SIZE = 50
_DEFAULT_DRAIN_INTERVAL = 0.5
_DROP_WARNING_EVERY = 100


class EventBus:
    """In-process event bus feeding asynchronous detectors."""

    def __init__(
        self,
        *,
        max_queue_size: int = _DEFAULT_MAX_QUEUE_SIZE,
        batch_size: int = _DEFAULT_BATCH_SIZE,
        drain_interval: float = _DEFAULT_DRAIN_INTERVAL,
        clock: Clock = time.time,
    ) -> None:
        self._queue: deque[SecurityEvent] = deque()
        self._max_queue_size = max_queue_size
        self._batch_size = batch_size
        self._drain_interval = drain_interval
        self._clock = clock

        self._consumers: dict[str, BatchHandler] = {}
        self._processing = False
        self._timer: asyncio.Task[None] | None = None
        self._drains: set[asyncio.Task[int]] = set()

        self._dropped_count = 0
        self._batches_dispatched = 0
        self._consumer_failures: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        """Start the drain timer. Calling it again while running is a no-op."""
        if self._timer is not None:
            return
        self._timer = asyncio.get_running_loop().create_task(self._loop())
        logger.info(
            "Event bus started (interval=%ss, batch=%d, capacity=%d)",
            self._drain_interval,
            self._batch_size,
            self._max_queue_size,
        )

    async def stop(self) -> None:
        """Stop the drain timer.

        Queued events stay queued and a drain already in flight is left
        to finish on its own.
        """
        if self._timer is None:
            return
        self._timer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._timer
        self._timer = None
        logger.info("Event bus stopped (%d events left queued)", len(self._queue))

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._drain_interval)
            self._tick()

    def _tick(self) -> None:
        if self._processing or not self._queue:
            return
        task = asyncio.get_running_loop().create_task(self.drain())
        self._drains.add(task)
        task.add_done_callback(self._drains.discard)

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------

    def register_consumer(self, name: str, handler: BatchHandler) -> None:
        """Register *handler* under *name*, replacing any previous handler."""
        self._consumers[name] = handler
        self._consumer_failures.setdefault(name, 0)
        logger.info("Registered event consumer: %s", name)

    def unregister_consumer(self, name: str) -> bool:
        return self._consumers.pop(name, None) is not None

    @property
    def consumer_names(self) -> list[str]:
        return list(self._consumers)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def emit(self, event: SecurityEvent) -> bool:
        """Enqueue *event*. Returns ``False`` if it was dropped."""
        if len(self._queue) >= self._max_queue_size:
            self._dropped_count += 1
            if self._dropped_count % _DROP_WARNING_EVERY == 0:
                logger.warning("Event queue full, dropped %d events", self._dropped_count)
            return False
        self._queue.append(event)
        return True

    def emit_quick(
        self,
        actor_id: str,
        event_type: str,
        severity: Severity | str,
        data: dict[str, Any] | None = None,
        ip: str | None = None,
        endpoint: str | None = None,
    ) -> bool:
        """Build an event stamped with the bus clock and enqueue it."""
        try:
            event = SecurityEvent.create(
                actor_id,
                event_type,
                severity,
                data,
                timestamp=self._clock(),
                ip=ip,
                endpoint=endpoint,
            )
        except Exception:
            logger.exception("Discarding malformed %s event for actor %s", event_type, actor_id)
            return False
        return self.emit(event)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def drain(self) -> int:
        """Dispatch one batch to all consumers.

        Returns the number of events dispatched, or ``0`` if the queue was
        empty or another drain is already in flight.
        """
        if self._processing or not self._queue:
            return 0

        self._processing = True
        try:
            count = min(self._batch_size, len(self._queue))
            batch = tuple(self._queue.popleft() for _ in range(count))

            await asyncio.gather(
                *(
                    self._run_consumer(name, handler, batch)
                    for name, handler in list(self._consumers.items())
                )
            )
            self._batches_dispatched += 1
            return len(batch)
        finally:
            self._processing = False

    async def _run_consumer(
        self, name: str, handler: BatchHandler, batch: tuple[SecurityEvent, ...]
    ) -> None:
        try:
            await handler(batch)
        except Exception:
            self._consumer_failures[name] = self._consumer_failures.get(name, 0) + 1
            logger.exception("Consumer %s failed on batch of %d events", name, len(batch))

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def queue_depth(self) -> int:
        return len(self._queue)

    @property
    def dropped_count(self) -> int:
        return self._dropped_count

    @property
    def batches_dispatched(self) -> int:
        return self._batches_dispatched

    @property
    def processing(self) -> bool:
        return self._processing

    def consumer_failures(self) -> dict[str, int]:
        return dict(self._consumer_failures)

    def reset_stats(self) -> None:
        self._dropped_count = 0
        self._batches_dispatched = 0
        self._consumer_failures = {name: 0 for name in self._consumers}
