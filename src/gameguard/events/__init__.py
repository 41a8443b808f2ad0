# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Security event ingestion and batched dispatch."""

from gameguard.events.bus import BatchHandler, EventBus, EventEmitter

__all__ = ["BatchHandler", "EventBus", "EventEmitter"]
