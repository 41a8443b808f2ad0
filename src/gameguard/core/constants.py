# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, severity ordering, and well-known event type names."""

from collections.abc import Callable
from enum import StrEnum

# Returns the current time in float seconds.
Clock = Callable[[], float]


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def _missing_(cls, value: object) -> "Severity | None":
        # Collaborators commonly send "HIGH" or "High"
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]

    def at_least(self, other: "Severity") -> bool:
        return self.rank >= SEVERITY_RANK[other]


SEVERITY_RANK: dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class MitigationType(StrEnum):
    LOG = "LOG"
    RATE_LIMIT = "RATE_LIMIT"
    TEMP_BAN = "TEMP_BAN"
    ALERT = "ALERT"


class AlertLevel(StrEnum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class EventType(StrEnum):
    """Event types the pipeline itself produces or scores.

    The taxonomy is open: collaborators may emit any string, these are just
    the names the built-in detectors and rules know about.
    """

    LOOT_ROLL = "LOOT_ROLL"
    COMBAT_ACTION = "COMBAT_ACTION"
    FORGE_ATTEMPT = "FORGE_ATTEMPT"
    SAVE = "SAVE"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    VIOLATION_RECORDED = "VIOLATION_RECORDED"
    PATTERN_ALERT = "PATTERN_ALERT"
    ANOMALY_DETECTED = "ANOMALY_DETECTED"
    SUSPICIOUS_WITHDRAWAL = "SUSPICIOUS_WITHDRAWAL"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    BOT_DETECTED = "BOT_DETECTED"
    ADMIN_ACCESS_FAILED = "ADMIN_ACCESS_FAILED"


# Event types that always escalate to a critical alert.
CRITICAL_ALERT_EVENTS: frozenset[str] = frozenset({
    EventType.SUSPICIOUS_WITHDRAWAL,
    EventType.RATE_LIMIT_EXCEEDED,
    EventType.INVALID_SIGNATURE,
    EventType.BOT_DETECTED,
    EventType.ADMIN_ACCESS_FAILED,
    EventType.PATTERN_ALERT,
    EventType.ANOMALY_DETECTED,
})
