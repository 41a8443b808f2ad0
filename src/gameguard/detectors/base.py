# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract base interface for event bus consumers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from gameguard.models.events import SecurityEvent


class BatchConsumer(ABC):
    """All asynchronous detectors implement this interface."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name the consumer is registered under on the bus."""
        ...

    @abstractmethod
    async def on_batch(self, events: Sequence[SecurityEvent]) -> None:
        """Fold a batch of events into the consumer's private state."""
        ...

    def cleanup_stale(self) -> int:
        """Drop per-actor state that has gone stale. Returns entries removed."""
        return 0
