# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Throttled, best-effort delivery of security alerts.

Every alert is logged locally.  Identical ``(level, title)`` alerts
inside the cooldown window are suppressed.  Delivery is at-most-once:
a failing sink is logged and never retried.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from gameguard.alerting.base import AlertSink
from gameguard.alerting.models import Alert
from gameguard.core.constants import CRITICAL_ALERT_EVENTS, AlertLevel, Clock

logger = logging.getLogger("gameguard.alerting.dispatcher")

_DEFAULT_COOLDOWN = 60.0

_LOG_LEVELS = {
    AlertLevel.INFO: logging.INFO,
    AlertLevel.WARNING: logging.WARNING,
    AlertLevel.CRITICAL: logging.CRITICAL,
}


class AlertDispatcher:
    """Send alerts to an optional sink with client-side throttling.

    Args:
        sink: Outward notifier.  ``None`` degrades to log-only alerting.
        cooldown: Seconds during which a repeated ``(level, title)`` is
            suppressed after a successful delivery.
        critical_events: Event types escalated to critical by
            :meth:`alert_security_event`.
    """

    def __init__(
        self,
        sink: AlertSink | None = None,
        *,
        cooldown: float = _DEFAULT_COOLDOWN,
        critical_events: frozenset[str] | set[str] = CRITICAL_ALERT_EVENTS,
        clock: Clock = time.time,
    ) -> None:
        self._sink = sink
        self._cooldown = cooldown
        self._critical_events = frozenset(critical_events)
        self._clock = clock
        self._last_sent: dict[str, float] = {}
        self._sent = 0
        self._throttled = 0
        self._failed = 0

    @property
    def sink(self) -> AlertSink | None:
        return self._sink

    def _is_throttled(self, key: str, now: float) -> bool:
        last = self._last_sent.get(key)
        return last is not None and now - last < self._cooldown

    async def send_alert(self, alert: Alert) -> bool:
        """Deliver *alert*. Returns ``True`` on delivery (or log-only success)."""
        now = self._clock()
        key = alert.throttle_key
        if self._is_throttled(key, now):
            self._throttled += 1
            logger.info("Alert throttled: %s", key)
            return False

        logger.log(
            _LOG_LEVELS[alert.level],
            "SECURITY ALERT %s: %s - %s",
            alert.level.upper(),
            alert.title,
            alert.message,
        )

        if self._sink is None or not self._sink.is_configured():
            logger.info("No alert sink configured - alert logged only")
            self._record(key, now)
            return True

        try:
            delivered = await self._sink.send(alert)
        except Exception:
            logger.exception("Alert sink %s raised while sending %s", self._sink.name, key)
            delivered = False

        if not delivered:
            self._failed += 1
            logger.error("Alert delivery via %s failed: %s", self._sink.name, key)
            return False

        self._record(key, now)
        return True

    def _record(self, key: str, now: float) -> None:
        self._last_sent[key] = now
        self._sent += 1

    async def alert_critical(
        self, title: str, message: str, metadata: dict[str, Any] | None = None
    ) -> bool:
        return await self.send_alert(
            Alert(level=AlertLevel.CRITICAL, title=title, message=message, metadata=metadata or {})
        )

    async def alert_warning(
        self, title: str, message: str, metadata: dict[str, Any] | None = None
    ) -> bool:
        return await self.send_alert(
            Alert(level=AlertLevel.WARNING, title=title, message=message, metadata=metadata or {})
        )

    async def alert_info(
        self, title: str, message: str, metadata: dict[str, Any] | None = None
    ) -> bool:
        return await self.send_alert(
            Alert(level=AlertLevel.INFO, title=title, message=message, metadata=metadata or {})
        )

    async def alert_security_event(
        self, event_type: str, details: str, metadata: dict[str, Any] | None = None
    ) -> bool:
        """Alert on a security event type, critical for the escalation list."""
        level = AlertLevel.CRITICAL if event_type in self._critical_events else AlertLevel.WARNING
        return await self.send_alert(
            Alert(
                level=level,
                title=f"Security Event: {event_type}",
                message=details,
                metadata=metadata or {},
            )
        )

    def prune_cooldowns(self) -> int:
        """Forget cooldown entries that have already lapsed."""
        now = self._clock()
        lapsed = [k for k, ts in self._last_sent.items() if now - ts >= self._cooldown]
        for k in lapsed:
            del self._last_sent[k]
        return len(lapsed)

    def status(self) -> dict[str, object]:
        return {
            "configured": self._sink is not None and self._sink.is_configured(),
            "sink": self._sink.name if self._sink else None,
            "cooldown_entries": len(self._last_sent),
            "sent": self._sent,
            "throttled": self._throttled,
            "failed": self._failed,
        }
