"""Timing judgment - classify how close a hit landed to its note."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.constants import DEFAULT_HIT_WINDOW_MS


class HitAccuracy(Enum):
    """Accuracy tiers, best first."""

    PERFECT = "perfect"
    GOOD = "good"
    OKAY = "okay"
    MISS = "miss"

    @property
    def is_hit(self) -> bool:
        return self is not HitAccuracy.MISS


@dataclass(frozen=True)
class TimingWindows:
    """
    Nested tolerance windows as fractions of the hit window.

    A delta within ``perfect * hit_window_ms`` is perfect, within
    ``good * hit_window_ms`` good, within the full window okay.
    """

    hit_window_ms: float = DEFAULT_HIT_WINDOW_MS
    perfect: float = 0.3
    good: float = 0.6

    def __post_init__(self):
        if self.hit_window_ms <= 0:
            raise ValueError(f"Hit window must be positive, got {self.hit_window_ms}")
        if not 0 < self.perfect <= self.good <= 1:
            raise ValueError("Timing windows must satisfy 0 < perfect <= good <= 1")

    def classify(self, delta_ms: float) -> HitAccuracy:
        delta = abs(delta_ms)
        if delta <= self.hit_window_ms * self.perfect:
            return HitAccuracy.PERFECT
        if delta <= self.hit_window_ms * self.good:
            return HitAccuracy.GOOD
        if delta <= self.hit_window_ms:
            return HitAccuracy.OKAY
        return HitAccuracy.MISS


def classify_timing(delta_ms: float, hit_window_ms: float = DEFAULT_HIT_WINDOW_MS) -> HitAccuracy:
    """Classify a signed timing delta (ms) against a hit window."""
    return TimingWindows(hit_window_ms).classify(delta_ms)


@dataclass(frozen=True)
class NoteHit:
    """Result of judging one note."""

    note_id: str
    accuracy: HitAccuracy
    time_delta: float  # ms, input time minus scheduled time (positive = late)
    key_index: Optional[int] = None
    cents_delta: float = 0.0
