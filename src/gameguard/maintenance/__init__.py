# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tier-3 maintenance: log aggregation, compaction, and scheduling."""

from gameguard.maintenance.compactor import CompactionStats, MemoryCompactor
from gameguard.maintenance.log_aggregator import AggregatedLogEntry, FlushReport, LogAggregator
from gameguard.maintenance.scheduler import BackgroundScheduler, PeriodicJob

__all__ = [
    "AggregatedLogEntry",
    "BackgroundScheduler",
    "CompactionStats",
    "FlushReport",
    "LogAggregator",
    "MemoryCompactor",
    "PeriodicJob",
]
