# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Slack alert sink using legacy message attachments."""

from __future__ import annotations

import json
import logging

import httpx

from gameguard.alerting.base import AlertSink
from gameguard.alerting.models import Alert
from gameguard.core.constants import AlertLevel

logger = logging.getLogger("gameguard.alerting.slack")

_TIMEOUT_SECONDS = 10.0

_LEVEL_COLOR = {
    AlertLevel.CRITICAL: "#ff0000",
    AlertLevel.WARNING: "#ffaa00",
    AlertLevel.INFO: "#0088ff",
}

_LEVEL_EMOJI = {
    AlertLevel.CRITICAL: ":rotating_light:",
    AlertLevel.WARNING: ":warning:",
    AlertLevel.INFO: ":information_source:",
}


def _format_value(value: object) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def _build_message(alert: Alert) -> dict:
    """Build the Slack payload for *alert*."""
    fields = [
        {"title": key, "value": _format_value(value), "short": True}
        for key, value in alert.metadata.items()
    ]
    return {
        "text": f"{_LEVEL_EMOJI[alert.level]} *{alert.level.upper()}*: {alert.title}",
        "attachments": [
            {
                "color": _LEVEL_COLOR[alert.level],
                "title": alert.title,
                "text": alert.message,
                "fields": fields,
                "ts": int(alert.timestamp.timestamp()),
            }
        ],
    }


class SlackAlertSink(AlertSink):
    """Post alerts to a Slack incoming webhook."""

    def __init__(self, webhook_url: str) -> None:
        self._webhook_url = webhook_url

    @property
    def name(self) -> str:
        return "slack"

    def is_configured(self) -> bool:
        return bool(self._webhook_url)

    async def send(self, alert: Alert) -> bool:
        if not self._webhook_url:
            logger.warning("Slack webhook URL not configured")
            return False

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
                response = await client.post(self._webhook_url, json=_build_message(alert))
                response.raise_for_status()
            return True
        except Exception:
            logger.exception("Failed to send Slack alert: %s", alert.title)
            return False
