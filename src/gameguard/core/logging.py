# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Structured logging with session token redaction.

Records may carry security context via ``extra``; :class:`JsonFormatter`
lifts the known keys (``actor_id``, ``event_type``, ``endpoint``) into the
emitted object so log pipelines can index on them.
"""

import json
import logging
import re
import sys
from typing import Any

REDACT_PATTERNS = [
    re.compile(r"(Bearer\s+[a-zA-Z0-9\-._~+/]{6})[a-zA-Z0-9\-._~+/]*"),
    re.compile(r"((?:session|token|sid)[=:]\s*[A-Za-z0-9\-_]{4})[A-Za-z0-9\-_]*", re.IGNORECASE),
    re.compile(r"(https://hooks\.slack\.com/services/[A-Z0-9]{4})[A-Za-z0-9/]*"),
]

CONTEXT_FIELDS = ("actor_id", "event_type", "endpoint")

# Third-party loggers that log every outbound alert request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def redact_sensitive(text: str) -> str:
    for pattern in REDACT_PATTERNS:
        text = pattern.sub(r"\1[REDACTED]", text)
    return text


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_sensitive(record.getMessage()),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = str(value)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = redact_sensitive(
                f"{type(record.exc_info[1]).__name__}: {record.exc_info[1]}"
            )
        return json.dumps(entry)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return redact_sensitive(super().format(record))


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single stderr handler on the ``gameguard`` logger."""
    logger = logging.getLogger("gameguard")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            TextFormatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
    logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
