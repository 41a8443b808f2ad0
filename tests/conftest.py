# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

from typing import Any

import pytest

from gameguard.core.config import Settings


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any ``.env`` file."""
    return Settings(
        _env_file=None,
        slack_webhook_url="",
        alert_webhook_url="",
        detection_profile="",
    )


@pytest.fixture(autouse=True)
def _reset_security_system():
    """Reset the system singleton between tests."""
    from gameguard.system import reset_security_system

    reset_security_system()
    yield
    reset_security_system()


class RecordingEmitter:
    """Stands in for ``EventBus.emit_quick`` and remembers every call."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def __call__(self, actor_id, event_type, severity, data=None, ip=None, endpoint=None) -> bool:
        self.calls.append(
            {
                "actor_id": actor_id,
                "event_type": event_type,
                "severity": severity,
                "data": data,
                "ip": ip,
                "endpoint": endpoint,
            }
        )
        return True


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()
