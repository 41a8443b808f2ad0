# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Alert payload model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from gameguard.core.constants import AlertLevel


class Alert(BaseModel):
    """A notification destined for an external alert sink."""

    level: AlertLevel
    title: str
    message: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def throttle_key(self) -> str:
        return f"{self.level}:{self.title}"
