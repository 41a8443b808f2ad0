# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from typing import Annotated

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class RateLimitConfig(BaseModel):
    """Fixed-window limit for one action class."""

    max_requests: int = Field(gt=0)
    window_seconds: float = Field(gt=0)


def _default_rate_limits() -> dict[str, RateLimitConfig]:
    return {
        "save": RateLimitConfig(max_requests=30, window_seconds=60),
        "loot": RateLimitConfig(max_requests=30, window_seconds=60),
        "combat": RateLimitConfig(max_requests=60, window_seconds=60),
        "forge": RateLimitConfig(max_requests=20, window_seconds=60),
        "movement": RateLimitConfig(max_requests=120, window_seconds=60),
        "default": RateLimitConfig(max_requests=60, window_seconds=60),
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GAMEGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Event bus
    bus_max_queue_size: int = 1000
    bus_batch_size: int = 50
    bus_drain_interval: float = 0.5

    # Rate limiting (keys are matched as substrings of the action class)
    rate_limits: dict[str, RateLimitConfig] = Field(default_factory=_default_rate_limits)
    rate_limit_cleanup_interval: float = 60.0

    # Sessions
    session_ttl: float = 30 * 60

    # Policy engine
    violation_threshold: int = 10
    violation_ban_seconds: float = 5 * 60
    violation_decay_interval: float = 60.0
    fail_open: bool = True

    # Pattern detector
    pattern_max_recent_events: int = 100
    pattern_analysis_cooldown: float = 5.0
    pattern_alert_threshold: float = 50.0
    pattern_score_decay: float = 1.0
    pattern_stale_after: float = 5 * 60

    # Anomaly analyzer
    anomaly_window: float = 60.0
    anomaly_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    anomaly_small_batch: int = 10
    anomaly_thresholds: dict[str, int] = Field(
        default_factory=lambda: {
            "LOOT_ROLL": 10,
            "COMBAT_ACTION": 30,
            "SAVE": 15,
            "FORGE_ATTEMPT": 10,
        }
    )
    anomaly_weight: float = 2.0
    anomaly_alert_threshold: float = 30.0
    anomaly_score_decay: float = 5.0
    anomaly_stale_after: float = 5 * 60

    # Detection profile (YAML) overriding pattern/anomaly tables
    detection_profile: str = ""

    # Log aggregator
    aggregator_max_sample_actors: int = 5
    aggregator_flush_threshold: int = 100

    # Scheduler
    compaction_interval: float = 60.0
    log_flush_interval: float = 30.0

    # Alerting
    alert_cooldown: float = 60.0
    slack_webhook_url: str = ""
    alert_webhook_url: str = ""
    alert_webhook_secret: str = ""
    alert_extra_critical_events: Annotated[list[str], NoDecode] = []

    @field_validator("alert_extra_critical_events", mode="before")
    @classmethod
    def _parse_extra_critical_events(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [e.strip() for e in v.split(",") if e.strip()]
        return v if isinstance(v, list) else []

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


def get_settings() -> Settings:
    return Settings()
