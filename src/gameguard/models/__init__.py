# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Value types exchanged between the pipeline and its collaborators."""

from gameguard.models.events import (
    MitigationAction,
    PolicyDecision,
    RequestContext,
    SecurityEvent,
)
from gameguard.models.results import CheckResult, RateLimitResult, SessionValidation

__all__ = [
    "CheckResult",
    "MitigationAction",
    "PolicyDecision",
    "RateLimitResult",
    "RequestContext",
    "SecurityEvent",
    "SessionValidation",
]
