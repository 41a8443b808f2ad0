# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""TTL-based session token to actor mapping with sliding expiry."""

from __future__ import annotations

import logging
import time

from gameguard.core.constants import Clock
from gameguard.models.results import SessionValidation

logger = logging.getLogger("gameguard.inline.sessions")

_DEFAULT_TTL = 30 * 60


class _SessionRecord:
    __slots__ = ("actor_id", "last_seen_at")

    def __init__(self, actor_id: str, last_seen_at: float) -> None:
        self.actor_id = actor_id
        self.last_seen_at = last_seen_at


class SessionRegistry:
    """Tracks live sessions. Records idle longer than ``ttl`` count as absent."""

    def __init__(self, *, ttl: float = _DEFAULT_TTL, clock: Clock = time.time) -> None:
        self._sessions: dict[str, _SessionRecord] = {}
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> float:
        return self._ttl

    def register(self, token: str, actor_id: str) -> None:
        self._sessions[token] = _SessionRecord(actor_id, self._clock())

    def validate(self, token: str | None) -> SessionValidation:
        """Check *token*, evicting it if expired and refreshing it if live."""
        if not token:
            return SessionValidation(valid=False, error="No session provided")

        record = self._sessions.get(token)
        if record is None:
            return SessionValidation(valid=False, error="Session not found")

        now = self._clock()
        if now - record.last_seen_at > self._ttl:
            del self._sessions[token]
            return SessionValidation(valid=False, error="Session expired")

        record.last_seen_at = now
        return SessionValidation(valid=True, actor_id=record.actor_id)

    def validate_for_actor(self, actor_id: str, token: str | None) -> SessionValidation:
        """Like :meth:`validate`, but also require the session to belong to *actor_id*."""
        result = self.validate(token)
        if result.valid and result.actor_id != actor_id:
            logger.warning(
                "Session presented by %s belongs to another actor",
                actor_id,
                extra={"actor_id": actor_id},
            )
            return SessionValidation(valid=False, error="Session does not belong to actor")
        return result

    def invalidate(self, token: str) -> bool:
        return self._sessions.pop(token, None) is not None

    def sweep_expired(self) -> int:
        now = self._clock()
        expired = [t for t, r in self._sessions.items() if now - r.last_seen_at > self._ttl]
        for t in expired:
            del self._sessions[t]
        return len(expired)

    def __contains__(self, token: object) -> bool:
        return token in self._sessions

    @property
    def active_count(self) -> int:
        return len(self._sessions)
