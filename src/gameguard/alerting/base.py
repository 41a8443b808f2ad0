# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract base class for alert sinks."""

from __future__ import annotations

import abc

from gameguard.alerting.models import Alert


class AlertSink(abc.ABC):
    """Base class for outward alert delivery (Slack, generic webhook, ...)."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable sink name (e.g. ``'slack'``)."""

    @abc.abstractmethod
    async def send(self, alert: Alert) -> bool:
        """Deliver an alert.

        Returns:
            ``True`` if the delivery succeeded, ``False`` otherwise.
        """

    def is_configured(self) -> bool:
        return True
