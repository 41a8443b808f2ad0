# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Outward security alerting."""

from gameguard.alerting.base import AlertSink
from gameguard.alerting.dispatcher import AlertDispatcher
from gameguard.alerting.factory import build_alert_sink, build_dispatcher
from gameguard.alerting.models import Alert
from gameguard.alerting.slack import SlackAlertSink
from gameguard.alerting.webhook import WebhookAlertSink

__all__ = [
    "Alert",
    "AlertDispatcher",
    "AlertSink",
    "SlackAlertSink",
    "WebhookAlertSink",
    "build_alert_sink",
    "build_dispatcher",
]
