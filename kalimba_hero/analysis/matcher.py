"""Pitch matching - map a detected frequency to the nearest kalimba key."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.constants import (
    DEFAULT_CLARITY_THRESHOLD,
    DEFAULT_PITCH_TOLERANCE_CENTS,
    DEFAULT_VOLUME_THRESHOLD,
    MAX_PLAUSIBLE_HZ,
    MIN_PLAUSIBLE_HZ,
    RANGE_MARGIN_HZ,
)
from ..core.note import freq_to_midi, midi_to_note_name
from ..layout import Key, Layout
from .pitch import DetectedPitch

# Absorbs float error at the tolerance boundary
_CENTS_EPSILON = 1e-9


@dataclass(frozen=True)
class PitchMatch:
    """Nearest key to a frequency and the signed offset from it."""

    key: Key
    cents: float  # Positive when the input is sharp of the key

    @property
    def key_index(self) -> int:
        return self.key.index


def cents_between(frequency: float, reference: float) -> float:
    """Signed distance in cents from ``reference`` to ``frequency``."""
    return float(1200.0 * np.log2(frequency / reference))


def frequency_to_note_name(frequency: float) -> str:
    """Nearest 12-TET note name, e.g. 440.0 -> 'A4'."""
    if frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}")
    return midi_to_note_name(int(round(freq_to_midi(frequency))))


def is_in_range(frequency: float, layout: Layout, margin_hz: float = RANGE_MARGIN_HZ) -> bool:
    """Whether a frequency lies within the layout's range widened by a margin."""
    low, high = layout.frequency_range
    return low - margin_hz <= frequency <= high + margin_hz


def find_closest_key(
    frequency: float,
    layout: Layout,
    tolerance_cents: float = DEFAULT_PITCH_TOLERANCE_CENTS,
) -> Optional[PitchMatch]:
    """
    Find the key nearest to a frequency.

    Args:
        frequency: Detected frequency in Hz
        layout: Keys to match against
        tolerance_cents: Largest accepted distance (inclusive)

    Returns:
        PitchMatch with signed cents, or None if no key is within tolerance
    """
    if frequency <= 0:
        return None

    best_key = None
    best_cents = 0.0
    for key in layout:
        cents = cents_between(frequency, key.frequency)
        if best_key is None or abs(cents) < abs(best_cents):
            best_key = key
            best_cents = cents

    if best_key is None or abs(best_cents) > tolerance_cents + _CENTS_EPSILON:
        return None
    return PitchMatch(best_key, best_cents)


class PitchMatcher:
    """
    Match live pitch estimates against a layout.

    Estimates that are too unclear, too quiet, implausible for a kalimba
    or far outside the layout's range are rejected before matching.
    """

    def __init__(
        self,
        layout: Layout,
        tolerance_cents: float = DEFAULT_PITCH_TOLERANCE_CENTS,
        clarity_threshold: float = DEFAULT_CLARITY_THRESHOLD,
        volume_threshold: float = DEFAULT_VOLUME_THRESHOLD,
    ):
        self.layout = layout
        self.tolerance_cents = tolerance_cents
        self.clarity_threshold = clarity_threshold
        self.volume_threshold = volume_threshold

    def accepts(self, pitch: DetectedPitch) -> bool:
        """Whether an estimate passes the clarity, volume and range gates."""
        if pitch.clarity < self.clarity_threshold:
            return False
        if pitch.volume is not None and pitch.volume < self.volume_threshold:
            return False
        if not MIN_PLAUSIBLE_HZ <= pitch.frequency <= MAX_PLAUSIBLE_HZ:
            return False
        return is_in_range(pitch.frequency, self.layout)

    def match(self, pitch: DetectedPitch) -> Optional[PitchMatch]:
        if not self.accepts(pitch):
            return None
        return find_closest_key(pitch.frequency, self.layout, self.tolerance_cents)

    def match_frequency(self, frequency: float) -> Optional[PitchMatch]:
        return find_closest_key(frequency, self.layout, self.tolerance_cents)
