"""Analysis layer - Low-level signal analysis.

This layer turns raw audio into pitch information:
- Pitch detection (f0 of live frames)
- Pitch matching (nearest kalimba key within a cents tolerance)
"""

from .pitch import DetectedPitch, PitchAnalyzer
from .matcher import (
    PitchMatch,
    PitchMatcher,
    cents_between,
    find_closest_key,
    frequency_to_note_name,
    is_in_range,
)

__all__ = [
    "DetectedPitch",
    "PitchAnalyzer",
    "PitchMatch",
    "PitchMatcher",
    "cents_between",
    "find_closest_key",
    "frequency_to_note_name",
    "is_in_range",
]
