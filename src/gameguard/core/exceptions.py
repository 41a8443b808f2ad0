# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for gameguard."""


class GameGuardError(Exception):
    """Base exception for all gameguard errors."""


class ConfigurationError(GameGuardError):
    """Invalid or missing configuration."""


class ProfileError(ConfigurationError):
    """A detection profile failed schema validation."""
