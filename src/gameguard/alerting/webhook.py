# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Generic webhook alert sink for custom HTTP POST endpoints."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging

import httpx

from gameguard.alerting.base import AlertSink
from gameguard.alerting.models import Alert

logger = logging.getLogger("gameguard.alerting.webhook")

_TIMEOUT_SECONDS = 10.0
SIGNATURE_HEADER = "X-GameGuard-Signature"


def compute_signature(payload_bytes: bytes, secret: str) -> str:
    """Compute HMAC-SHA256 signature for a payload."""
    return hmac.new(
        secret.encode("utf-8"),
        payload_bytes,
        hashlib.sha256,
    ).hexdigest()


class WebhookAlertSink(AlertSink):
    """POST alerts as JSON, optionally signed with a shared secret."""

    def __init__(
        self,
        url: str,
        *,
        secret: str = "",
        headers: dict[str, str] | None = None,
    ) -> None:
        self._url = url
        self._secret = secret
        self._extra_headers = headers or {}

    @property
    def name(self) -> str:
        return "webhook"

    def is_configured(self) -> bool:
        return bool(self._url)

    async def send(self, alert: Alert) -> bool:
        if not self._url:
            logger.warning("Alert webhook URL not configured")
            return False

        payload = {"event": "security.alert", **alert.model_dump(mode="json")}
        payload_bytes = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()

        headers: dict[str, str] = {"Content-Type": "application/json"}
        headers.update(self._extra_headers)
        if self._secret:
            headers[SIGNATURE_HEADER] = compute_signature(payload_bytes, self._secret)

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
                response = await client.post(self._url, content=payload_bytes, headers=headers)
                response.raise_for_status()
            return True
        except Exception:
            logger.exception("Failed to deliver alert webhook to %s", self._url)
            return False
