# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Policy evaluation and violation escalation."""

from gameguard.policy.engine import BUILTIN_RULES, PolicyEngine, PolicyRule

__all__ = ["BUILTIN_RULES", "PolicyEngine", "PolicyRule"]
