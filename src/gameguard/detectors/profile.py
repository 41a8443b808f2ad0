# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Detection profiles: suspicious sequences and anomaly thresholds.

A profile can be loaded from YAML to override the built-in tables::

    patterns:
      - name: loot_spam
        events: [LOOT_ROLL, LOOT_ROLL, LOOT_ROLL]
        window_seconds: 2
        score: 10
    anomaly_thresholds:
      LOOT_ROLL: 10
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from gameguard.core.exceptions import ConfigurationError, ProfileError

logger = logging.getLogger("gameguard.detectors.profile")


class SuspiciousSequence(BaseModel):
    """An ordered run of event types that is suspicious inside a time window."""

    name: str
    events: list[str] = Field(min_length=1)
    window_seconds: float = Field(gt=0)
    score: float = Field(gt=0)


DEFAULT_SEQUENCES: tuple[SuspiciousSequence, ...] = (
    SuspiciousSequence(
        name="loot_roll_burst",
        events=["LOOT_ROLL"] * 3,
        window_seconds=2.0,
        score=10,
    ),
    SuspiciousSequence(
        name="forge_attempt_burst",
        events=["FORGE_ATTEMPT"] * 3,
        window_seconds=3.0,
        score=15,
    ),
    SuspiciousSequence(
        name="combat_action_burst",
        events=["COMBAT_ACTION"] * 4,
        window_seconds=1.0,
        score=20,
    ),
)


class DetectionProfile(BaseModel):
    """Overrides for detector tables. ``None`` keeps the configured default."""

    patterns: list[SuspiciousSequence] | None = None
    anomaly_thresholds: dict[str, int] | None = None


def load_detection_profile(path: str | Path) -> DetectionProfile:
    """Parse and validate a YAML detection profile.

    Raises:
        ConfigurationError: The file is missing or is not valid YAML.
        ProfileError: The YAML does not match the profile schema.
    """
    profile_path = Path(path)
    if not profile_path.is_file():
        raise ConfigurationError(f"Detection profile not found: {profile_path}")

    try:
        data = yaml.safe_load(profile_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {profile_path.name}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProfileError(
            f"Expected a mapping at top level in {profile_path.name}, got {type(data).__name__}"
        )

    try:
        profile = DetectionProfile(**data)
    except ValidationError as exc:
        raise ProfileError(f"Schema validation failed for {profile_path.name}: {exc}") from exc

    logger.info(
        "Loaded detection profile %s (%d patterns, %d thresholds)",
        profile_path.name,
        len(profile.patterns or []),
        len(profile.anomaly_thresholds or {}),
    )
    return profile
