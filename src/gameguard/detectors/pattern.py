# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Sliding-window sequence matching over each actor's recent events.

Every event is recorded in a bounded per-actor ring.  Analysis is
throttled to once per cooldown per actor: it counts non-overlapping
occurrences of each suspicious sequence among the ring entries inside the
sequence's time window and feeds a decaying suspicion score.  Crossing
the alert threshold emits a ``PATTERN_ALERT`` event back onto the bus.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from gameguard.core.constants import Clock, EventType, Severity
from gameguard.detectors.base import BatchConsumer
from gameguard.detectors.profile import DEFAULT_SEQUENCES, SuspiciousSequence
from gameguard.events.bus import EventEmitter
from gameguard.models.events import SecurityEvent

logger = logging.getLogger("gameguard.detectors.pattern")

_DEFAULT_MAX_RECENT = 100
_DEFAULT_COOLDOWN = 5.0
_DEFAULT_ALERT_THRESHOLD = 50.0
_DEFAULT_DECAY = 1.0
_DEFAULT_STALE_AFTER = 5 * 60


@dataclass(slots=True)
class SuspicionState:
    """Per-actor pattern state."""

    recent: deque[tuple[str, float]]
    suspicion_score: float = 0.0
    last_analyzed_at: float = field(default=float("-inf"))


def count_sequence_matches(event_types: Iterable[str], sequence: Sequence[str]) -> int:
    """Count non-overlapping, contiguous occurrences of *sequence*.

    A mismatch resets progress; if the mismatching type is itself the
    first step of the sequence, progress restarts from that event.
    """
    if not sequence:
        return 0
    matches = 0
    idx = 0
    for event_type in event_types:
        if event_type == sequence[idx]:
            idx += 1
            if idx == len(sequence):
                matches += 1
                idx = 0
        else:
            idx = 1 if event_type == sequence[0] else 0
    return matches


class PatternDetector(BatchConsumer):
    """Bus consumer scoring actors on suspicious event sequences."""

    def __init__(
        self,
        emit: EventEmitter,
        *,
        sequences: Sequence[SuspiciousSequence] = DEFAULT_SEQUENCES,
        max_recent_events: int = _DEFAULT_MAX_RECENT,
        analysis_cooldown: float = _DEFAULT_COOLDOWN,
        alert_threshold: float = _DEFAULT_ALERT_THRESHOLD,
        score_decay: float = _DEFAULT_DECAY,
        stale_after: float = _DEFAULT_STALE_AFTER,
        clock: Clock = time.time,
    ) -> None:
        self._emit = emit
        self._sequences = list(sequences)
        self._max_recent = max_recent_events
        self._cooldown = analysis_cooldown
        self._alert_threshold = alert_threshold
        self._decay = score_decay
        self._stale_after = stale_after
        self._clock = clock
        self._states: dict[str, SuspicionState] = {}

    @property
    def name(self) -> str:
        return "pattern_detector"

    @property
    def sequences(self) -> list[SuspiciousSequence]:
        return list(self._sequences)

    async def on_batch(self, events: Sequence[SecurityEvent]) -> None:
        now = self._clock()
        touched: dict[str, SuspicionState] = {}

        for event in events:
            state = self._states.get(event.actor_id)
            if state is None:
                state = SuspicionState(recent=deque(maxlen=self._max_recent))
                self._states[event.actor_id] = state
            state.recent.append((event.event_type, event.timestamp))
            touched[event.actor_id] = state

        for actor_id, state in touched.items():
            if now - state.last_analyzed_at > self._cooldown:
                self._analyze(actor_id, state, now)
                state.last_analyzed_at = now

        self.cleanup_stale()

    def _analyze(self, actor_id: str, state: SuspicionState, now: float) -> None:
        score_increase = 0.0
        matched: list[str] = []

        for seq in self._sequences:
            in_window = (t for t, ts in state.recent if now - ts < seq.window_seconds)
            count = count_sequence_matches(in_window, seq.events)
            if count:
                score_increase += seq.score * count
                matched.append(seq.name)

        if score_increase > 0:
            state.suspicion_score += score_increase
            logger.debug(
                "Actor %s matched %s (+%.1f, score=%.1f)",
                actor_id,
                ",".join(matched),
                score_increase,
                state.suspicion_score,
            )
            if state.suspicion_score > self._alert_threshold:
                logger.warning(
                    "Suspicious pattern for %s (score=%.1f)",
                    actor_id,
                    state.suspicion_score,
                    extra={"actor_id": actor_id, "event_type": EventType.PATTERN_ALERT},
                )
                self._emit(
                    actor_id,
                    EventType.PATTERN_ALERT,
                    Severity.HIGH,
                    {
                        "score": state.suspicion_score,
                        "message": "Suspicious activity pattern detected",
                        "matched": matched,
                    },
                )

        state.suspicion_score = max(0.0, state.suspicion_score - self._decay)

    def cleanup_stale(self) -> int:
        now = self._clock()
        stale = [
            actor_id
            for actor_id, state in self._states.items()
            if not state.recent or now - state.recent[-1][1] > self._stale_after
        ]
        for actor_id in stale:
            del self._states[actor_id]
        return len(stale)

    def suspicion_score(self, actor_id: str) -> float:
        state = self._states.get(actor_id)
        return state.suspicion_score if state else 0.0

    def state_for(self, actor_id: str) -> SuspicionState | None:
        return self._states.get(actor_id)

    @property
    def actor_count(self) -> int:
        return len(self._states)
