# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Synchronous allow/deny checks run on the request's critical path."""

from __future__ import annotations

import logging

from gameguard.core.constants import EventType, Severity
from gameguard.events.bus import EventEmitter
from gameguard.inline.bans import BanList
from gameguard.inline.rate_limiter import RateLimiter
from gameguard.inline.sessions import SessionRegistry
from gameguard.models.events import MitigationAction, PolicyDecision, RequestContext

logger = logging.getLogger("gameguard.inline.checks")

BANNED_REASON = "Temporarily banned for suspicious activity"
RATE_LIMITED_REASON = "Rate limit exceeded"


class InlineChecker:
    """Ban and rate-limit gate consulted after the policy engine."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        bans: BanList,
        sessions: SessionRegistry,
        emit: EventEmitter,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._bans = bans
        self._sessions = sessions
        self._emit = emit

    def perform(self, context: RequestContext) -> PolicyDecision:
        if self._bans.is_banned(context.actor_id):
            return PolicyDecision.denied(BANNED_REASON)

        result = self._rate_limiter.check(context.actor_id, context.endpoint)
        if not result.allowed:
            self._emit(
                context.actor_id,
                EventType.RATE_LIMIT_EXCEEDED,
                Severity.MEDIUM,
                {"endpoint": context.endpoint, "remaining": result.remaining},
                context.ip,
                context.endpoint,
            )
            return PolicyDecision.denied(
                RATE_LIMITED_REASON,
                MitigationAction.rate_limit(result.retry_after),
                MitigationAction.log(Severity.MEDIUM),
            )

        return PolicyDecision.allowed()

    def validate_session(self, actor_id: str, session_id: str | None) -> PolicyDecision:
        """Deny unless *session_id* is a live session owned by *actor_id*."""
        validation = self._sessions.validate_for_actor(actor_id, session_id)
        if not validation.valid:
            return PolicyDecision.denied(validation.error or "Invalid session")
        return PolicyDecision.allowed()
