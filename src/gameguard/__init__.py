# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""gameguard - Tiered real-time anti-cheat event pipeline for game servers."""

__version__ = "0.1.0"

from gameguard.core.constants import Severity
from gameguard.models.events import PolicyDecision, RequestContext, SecurityEvent
from gameguard.system import SecuritySystem, get_security_system, reset_security_system

__all__ = [
    "PolicyDecision",
    "RequestContext",
    "SecurityEvent",
    "SecuritySystem",
    "Severity",
    "__version__",
    "get_security_system",
    "reset_security_system",
]
