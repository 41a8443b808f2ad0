# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Temporary bans keyed by actor, cleared lazily once expired."""

from __future__ import annotations

import logging
import time

from gameguard.core.constants import Clock

logger = logging.getLogger("gameguard.inline.bans")


class BanList:
    def __init__(self, *, clock: Clock = time.time) -> None:
        self._bans: dict[str, float] = {}
        self._clock = clock

    def add_temp_ban(self, actor_id: str, duration: float) -> float:
        """Ban *actor_id* for *duration* seconds. Returns the expiry time."""
        expires_at = self._clock() + duration
        self._bans[actor_id] = expires_at
        logger.warning(
            "Temporary ban applied to %s for %.0fs",
            actor_id,
            duration,
            extra={"actor_id": actor_id},
        )
        return expires_at

    def remove_temp_ban(self, actor_id: str) -> bool:
        return self._bans.pop(actor_id, None) is not None

    def is_banned(self, actor_id: str) -> bool:
        expires_at = self._bans.get(actor_id)
        if expires_at is None:
            return False
        if self._clock() >= expires_at:
            del self._bans[actor_id]
            return False
        return True

    def ban_expires_at(self, actor_id: str) -> float | None:
        return self._bans.get(actor_id) if self.is_banned(actor_id) else None

    def sweep_expired(self) -> int:
        now = self._clock()
        expired = [a for a, exp in self._bans.items() if now >= exp]
        for a in expired:
            del self._bans[a]
        return len(expired)

    @property
    def active_count(self) -> int:
        return len(self._bans)
