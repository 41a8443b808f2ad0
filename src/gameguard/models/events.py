# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Security event, request context, and policy decision models."""

from __future__ import annotations

import time
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gameguard.core.constants import MitigationType, Severity


class SecurityEvent(BaseModel):
    """An immutable behavioural fact attributed to one actor.

    Events are stamped with an id and timestamp at ingestion and are
    discarded once every bus consumer has seen them.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: float = Field(default_factory=time.time)
    actor_id: str
    event_type: str
    severity: Severity
    data: dict[str, Any] = Field(default_factory=dict)
    source_ip: str | None = None
    endpoint: str | None = None

    @classmethod
    def create(
        cls,
        actor_id: str,
        event_type: str,
        severity: Severity | str,
        data: dict[str, Any] | None = None,
        *,
        timestamp: float | None = None,
        ip: str | None = None,
        endpoint: str | None = None,
    ) -> SecurityEvent:
        """Build an event, stamping it with *timestamp* or the wall clock."""
        return cls(
            timestamp=time.time() if timestamp is None else timestamp,
            actor_id=actor_id,
            event_type=str(event_type),
            severity=Severity(severity),
            data=dict(data or {}),
            source_ip=ip,
            endpoint=endpoint,
        )


class RequestContext(BaseModel):
    """Input to an inline check, built once per inbound request."""

    model_config = ConfigDict(frozen=True)

    actor_id: str
    endpoint: str
    ip: str
    user_agent: str | None = None
    session_id: str | None = None
    timestamp: float = Field(default_factory=time.time)


class MitigationAction(BaseModel):
    """A structured instruction attached to a policy decision."""

    model_config = ConfigDict(frozen=True)

    type: MitigationType
    duration_seconds: float | None = None
    severity: Severity | None = None
    message: str | None = None

    @classmethod
    def log(cls, severity: Severity) -> MitigationAction:
        return cls(type=MitigationType.LOG, severity=severity)

    @classmethod
    def rate_limit(cls, duration_seconds: float) -> MitigationAction:
        return cls(type=MitigationType.RATE_LIMIT, duration_seconds=max(0.0, duration_seconds))

    @classmethod
    def temp_ban(cls, duration_seconds: float) -> MitigationAction:
        return cls(type=MitigationType.TEMP_BAN, duration_seconds=duration_seconds)

    @classmethod
    def alert(cls, message: str) -> MitigationAction:
        return cls(type=MitigationType.ALERT, message=message)


class PolicyDecision(BaseModel):
    """Outcome of an inline check. Computed fresh for every call."""

    model_config = ConfigDict(frozen=True)

    allow: bool
    reason: str | None = None
    actions: list[MitigationAction] = Field(default_factory=list)

    @classmethod
    def allowed(cls) -> PolicyDecision:
        return cls(allow=True)

    @classmethod
    def denied(cls, reason: str, *actions: MitigationAction) -> PolicyDecision:
        return cls(allow=False, reason=reason, actions=list(actions))
