# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Build the alert sink and dispatcher from application settings."""

from __future__ import annotations

import logging

from gameguard.alerting.base import AlertSink
from gameguard.alerting.dispatcher import AlertDispatcher
from gameguard.alerting.slack import SlackAlertSink
from gameguard.alerting.webhook import WebhookAlertSink
from gameguard.core.config import Settings
from gameguard.core.constants import CRITICAL_ALERT_EVENTS, Clock

logger = logging.getLogger("gameguard.alerting.factory")


def build_alert_sink(settings: Settings) -> AlertSink | None:
    """Pick Slack if configured, else the generic webhook, else nothing."""
    if settings.slack_webhook_url:
        return SlackAlertSink(settings.slack_webhook_url)
    if settings.alert_webhook_url:
        return WebhookAlertSink(settings.alert_webhook_url, secret=settings.alert_webhook_secret)
    logger.info("No alert sink configured; alerts will be logged only")
    return None


def build_dispatcher(
    settings: Settings,
    *,
    sink: AlertSink | None = None,
    clock: Clock | None = None,
) -> AlertDispatcher:
    """Create an :class:`AlertDispatcher`, building the sink from *settings* if not given."""
    kwargs = {} if clock is None else {"clock": clock}
    return AlertDispatcher(
        sink if sink is not None else build_alert_sink(settings),
        cooldown=settings.alert_cooldown,
        critical_events=CRITICAL_ALERT_EVENTS | set(settings.alert_extra_critical_events),
        **kwargs,
    )
