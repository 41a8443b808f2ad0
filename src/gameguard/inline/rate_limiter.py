# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Fixed-window per-(actor, action class) request counters.

Buckets reset lazily on the first access at or after their window
boundary, so expired buckets never affect decisions.  The periodic sweep
only reclaims memory.
"""

from __future__ import annotations

import logging
import time

from gameguard.core.config import RateLimitConfig
from gameguard.core.constants import Clock
from gameguard.models.results import RateLimitResult

logger = logging.getLogger("gameguard.inline.rate_limiter")

DEFAULT_CLASS = "default"
_FALLBACK_CONFIG = RateLimitConfig(max_requests=60, window_seconds=60)


class _Bucket:
    __slots__ = ("count", "reset_at")

    def __init__(self, reset_at: float) -> None:
        self.count = 0
        self.reset_at = reset_at


class RateLimiter:
    """Fixed-window rate limiter.

    Args:
        limits: Ordered mapping of action-class substring to its limit.
            The ``"default"`` entry applies when nothing else matches.
        cleanup_interval: Minimum seconds between opportunistic sweeps.
    """

    def __init__(
        self,
        limits: dict[str, RateLimitConfig] | None = None,
        *,
        cleanup_interval: float = 60.0,
        clock: Clock = time.time,
    ) -> None:
        self._limits = dict(limits) if limits else {DEFAULT_CLASS: _FALLBACK_CONFIG}
        self._default = self._limits.get(DEFAULT_CLASS, _FALLBACK_CONFIG)
        self._buckets: dict[str, _Bucket] = {}
        self._cleanup_interval = cleanup_interval
        self._clock = clock
        self._last_cleanup = clock()

    def resolve(self, action_class: str) -> RateLimitConfig:
        """Return the limit for *action_class* (first substring match wins)."""
        for key, config in self._limits.items():
            if key != DEFAULT_CLASS and key in action_class:
                return config
        return self._default

    def check(self, actor_id: str, action_class: str) -> RateLimitResult:
        """Count one request and report whether it fits in the window."""
        now = self._clock()
        if now - self._last_cleanup > self._cleanup_interval:
            self.sweep_expired()

        config = self.resolve(action_class)
        key = f"{actor_id}:{action_class}"
        bucket = self._buckets.get(key)
        if bucket is None or now >= bucket.reset_at:
            bucket = _Bucket(now + config.window_seconds)
            self._buckets[key] = bucket

        bucket.count += 1
        return RateLimitResult(
            allowed=bucket.count <= config.max_requests,
            remaining=max(0, config.max_requests - bucket.count),
            reset_at=bucket.reset_at,
            retry_after=bucket.reset_at - now,
        )

    def sweep_expired(self) -> int:
        """Drop buckets whose window has elapsed. Returns how many were dropped."""
        now = self._clock()
        expired = [k for k, b in self._buckets.items() if now >= b.reset_at]
        for k in expired:
            del self._buckets[k]
        self._last_cleanup = now
        if expired:
            logger.debug("Swept %d expired rate-limit buckets", len(expired))
        return len(expired)

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)
