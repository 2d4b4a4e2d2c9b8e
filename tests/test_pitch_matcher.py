"""Tests for pitch detection and pitch-to-key matching."""

import numpy as np
import pytest

from kalimba_hero.analysis import (
    DetectedPitch,
    PitchAnalyzer,
    PitchMatcher,
    cents_between,
    find_closest_key,
    frequency_to_note_name,
    is_in_range,
)

C4 = 261.6255653005986


class TestFindClosestKey:
    """Tests for the pure nearest-key search."""

    def test_exact_pitch(self, layout17):
        match = find_closest_key(440.0, layout17)
        assert match.key.note_name == "A4"
        assert match.cents == pytest.approx(0.0, abs=1e-6)

    def test_signed_cents(self, layout17):
        sharp = find_closest_key(C4 * 2 ** (10 / 1200), layout17)
        flat = find_closest_key(C4 * 2 ** (-10 / 1200), layout17)
        assert sharp.key.index == 8 and sharp.cents == pytest.approx(10.0)
        assert flat.key.index == 8 and flat.cents == pytest.approx(-10.0)

    def test_tolerance_boundary_is_inclusive(self, layout17):
        at_boundary = C4 * 2 ** (50 / 1200)
        assert find_closest_key(at_boundary, layout17, tolerance_cents=50) is not None

    def test_one_cent_beyond_is_rejected(self, layout17):
        beyond = C4 * 2 ** (51 / 1200)
        assert find_closest_key(beyond, layout17, tolerance_cents=50) is None

    def test_custom_tolerance(self, layout17):
        freq = C4 * 2 ** (20 / 1200)
        assert find_closest_key(freq, layout17, tolerance_cents=15) is None
        assert find_closest_key(freq, layout17, tolerance_cents=25) is not None

    def test_non_positive_frequency(self, layout17):
        assert find_closest_key(0.0, layout17) is None
        assert find_closest_key(-440.0, layout17) is None

    def test_far_outside_layout(self, layout17):
        assert find_closest_key(40.0, layout17) is None


class TestHelpers:
    """Tests for cents and note-name helpers."""

    def test_cents_between(self):
        assert cents_between(880.0, 440.0) == pytest.approx(1200.0)
        assert cents_between(440.0, 880.0) == pytest.approx(-1200.0)

    def test_frequency_to_note_name(self):
        assert frequency_to_note_name(440.0) == "A4"
        assert frequency_to_note_name(C4 * 1.01) == "C4"
        with pytest.raises(ValueError):
            frequency_to_note_name(0)

    def test_is_in_range(self, layout17):
        low, high = layout17.frequency_range
        assert is_in_range(low - 99, layout17)
        assert not is_in_range(high + 101, layout17)


class TestPitchMatcher:
    """Tests for gating live pitch estimates."""

    def _pitch(self, frequency=440.0, clarity=0.95, volume=0.1):
        return DetectedPitch(frequency=frequency, clarity=clarity, volume=volume, timestamp=0.0)

    def test_accepts_clear_pitch(self, layout17):
        matcher = PitchMatcher(layout17, tolerance_cents=15)
        assert matcher.match(self._pitch()).key.note_name == "A4"

    def test_rejects_unclear(self, layout17):
        matcher = PitchMatcher(layout17)
        assert matcher.match(self._pitch(clarity=0.5)) is None

    def test_rejects_quiet(self, layout17):
        matcher = PitchMatcher(layout17)
        assert matcher.match(self._pitch(volume=0.001)) is None

    def test_volume_is_optional(self, layout17):
        matcher = PitchMatcher(layout17, tolerance_cents=15)
        estimate = DetectedPitch(frequency=440.0, clarity=0.95)
        assert estimate.volume is None
        assert estimate.timestamp == 0.0
        assert matcher.match(estimate).key.note_name == "A4"

    def test_rejects_implausible(self, layout17):
        matcher = PitchMatcher(layout17)
        assert not matcher.accepts(self._pitch(frequency=4000.0))
        assert not matcher.accepts(self._pitch(frequency=30.0))


class TestPitchAnalyzer:
    """Tests for f0 detection on synthetic tones."""

    def test_detects_a4(self, tone):
        analyzer = PitchAnalyzer()
        pitch = analyzer.detect(tone(440.0, 0.5), timestamp=1.5)
        assert pitch is not None
        assert pitch.frequency == pytest.approx(440.0, rel=0.02)
        assert pitch.volume > 0.3
        assert pitch.timestamp == 1.5

    def test_silence(self):
        analyzer = PitchAnalyzer()
        assert analyzer.detect(np.zeros(4096, dtype=np.float32)) is None

    def test_unknown_method(self, tone):
        with pytest.raises(ValueError):
            PitchAnalyzer().detect_f0(tone(440.0, 0.2), method="crepe")
