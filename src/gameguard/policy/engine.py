# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Ordered first-match-wins policy rules plus violation bookkeeping.

Rules are evaluated by descending priority; ties keep declaration order.
The first rule whose condition holds decides the request.  Matching rules
are never combined.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from gameguard.core.constants import EventType, Severity
from gameguard.events.bus import EventEmitter
from gameguard.inline.bans import BanList
from gameguard.models.events import MitigationAction, PolicyDecision, RequestContext

logger = logging.getLogger("gameguard.policy.engine")

SUSPENDED_REASON = "Account temporarily suspended"
COOLDOWN_REASON = "Too many violations, temporary cooldown applied"

_DEFAULT_VIOLATION_THRESHOLD = 10
_DEFAULT_BAN_SECONDS = 5 * 60


@dataclass(frozen=True)
class PolicyRule:
    """A single policy rule.

    ``condition`` and ``action`` both receive the request context and the
    owning engine, so rules can read violation and ban state.
    """

    id: str
    priority: int
    condition: Callable[[RequestContext, PolicyEngine], bool]
    action: Callable[[RequestContext, PolicyEngine], PolicyDecision]


def _is_banned(ctx: RequestContext, engine: PolicyEngine) -> bool:
    return engine.bans.is_banned(ctx.actor_id)


def _suspended(ctx: RequestContext, engine: PolicyEngine) -> PolicyDecision:
    return PolicyDecision.denied(SUSPENDED_REASON)


def _too_many_violations(ctx: RequestContext, engine: PolicyEngine) -> bool:
    return engine.violation_count(ctx.actor_id) > engine.violation_threshold


def _apply_cooldown(ctx: RequestContext, engine: PolicyEngine) -> PolicyDecision:
    engine.bans.add_temp_ban(ctx.actor_id, engine.ban_seconds)
    return PolicyDecision.denied(
        COOLDOWN_REASON,
        MitigationAction.temp_ban(engine.ban_seconds),
        MitigationAction.alert(
            f"Actor {ctx.actor_id} exceeded {engine.violation_threshold} violations"
        ),
    )


BUILTIN_RULES: tuple[PolicyRule, ...] = (
    PolicyRule("banned_actor", 100, _is_banned, _suspended),
    PolicyRule("repeated_violations", 90, _too_many_violations, _apply_cooldown),
)


class PolicyEngine:
    """Evaluates policy rules and tracks per-actor violation pressure."""

    def __init__(
        self,
        bans: BanList,
        emit: EventEmitter,
        *,
        violation_threshold: int = _DEFAULT_VIOLATION_THRESHOLD,
        ban_seconds: float = _DEFAULT_BAN_SECONDS,
        rules: list[PolicyRule] | None = None,
    ) -> None:
        self.bans = bans
        self._emit = emit
        self.violation_threshold = violation_threshold
        self.ban_seconds = ban_seconds
        self._rules: list[PolicyRule] = list(BUILTIN_RULES if rules is None else rules)
        self._violations: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def add_rule(self, rule: PolicyRule) -> None:
        if any(r.id == rule.id for r in self._rules):
            raise ValueError(f"Duplicate policy rule id: {rule.id}")
        self._rules.append(rule)
        logger.info("Registered policy rule: %s (priority %d)", rule.id, rule.priority)

    @property
    def rules(self) -> list[PolicyRule]:
        """Rules in evaluation order."""
        return sorted(self._rules, key=lambda r: r.priority, reverse=True)

    def evaluate(self, context: RequestContext) -> PolicyDecision:
        """Return the decision of the first matching rule, or allow."""
        for rule in self.rules:
            try:
                if rule.condition(context, self):
                    logger.debug("Rule %s matched for %s", rule.id, context.actor_id)
                    return rule.action(context, self)
            except Exception:
                logger.exception("Policy rule %s raised; skipping", rule.id)
        return PolicyDecision.allowed()

    # ------------------------------------------------------------------
    # Violations
    # ------------------------------------------------------------------

    def record_violation(self, actor_id: str) -> int:
        total = self._violations.get(actor_id, 0) + 1
        self._violations[actor_id] = total
        self._emit(
            actor_id,
            EventType.VIOLATION_RECORDED,
            Severity.MEDIUM,
            {"total_violations": total},
        )
        return total

    def clear_violations(self, actor_id: str) -> None:
        self._violations.pop(actor_id, None)

    def violation_count(self, actor_id: str) -> int:
        return self._violations.get(actor_id, 0)

    def decay_violations(self) -> int:
        """Decrement every counter by one. Returns how many entries reached zero."""
        removed = 0
        for actor_id, count in list(self._violations.items()):
            if count <= 1:
                del self._violations[actor_id]
                removed += 1
            else:
                self._violations[actor_id] = count - 1
        return removed

    @property
    def tracked_actors(self) -> int:
        return len(self._violations)
