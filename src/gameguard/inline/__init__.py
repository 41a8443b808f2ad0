# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tier-1 inline checks: rate limiting, sessions, and temporary bans."""

from gameguard.inline.bans import BanList
from gameguard.inline.checks import InlineChecker
from gameguard.inline.rate_limiter import RateLimiter
from gameguard.inline.sessions import SessionRegistry

__all__ = ["BanList", "InlineChecker", "RateLimiter", "SessionRegistry"]
