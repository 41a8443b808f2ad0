# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Lightweight result records returned by the inline-check components."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float
    # Seconds until the window resets, measured on the limiter clock
    retry_after: float = 0.0


@dataclass(frozen=True, slots=True)
class SessionValidation:
    valid: bool
    actor_id: str | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Collaborator-facing answer to ``check_request``."""

    allowed: bool
    reason: str | None = None

    def to_dict(self) -> dict[str, object]:
        result: dict[str, object] = {"allowed": self.allowed}
        if self.reason is not None:
            result["reason"] = self.reason
        return result
