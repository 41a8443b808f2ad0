# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tier-2 asynchronous detectors fed by the event bus."""

from gameguard.detectors.anomaly import AnomalyAnalyzer, AnomalyMetrics
from gameguard.detectors.base import BatchConsumer
from gameguard.detectors.pattern import PatternDetector, SuspicionState
from gameguard.detectors.profile import (
    DEFAULT_SEQUENCES,
    DetectionProfile,
    SuspiciousSequence,
    load_detection_profile,
)

__all__ = [
    "DEFAULT_SEQUENCES",
    "AnomalyAnalyzer",
    "AnomalyMetrics",
    "BatchConsumer",
    "DetectionProfile",
    "PatternDetector",
    "SuspicionState",
    "SuspiciousSequence",
    "load_detection_profile",
]
