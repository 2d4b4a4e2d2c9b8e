"""Shared fixtures."""

import numpy as np
import pytest

from kalimba_hero.layout import generate_layout, layout_for_preset


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def layout17():
    """Standard 17-key C4 major layout."""
    return layout_for_preset("17")


@pytest.fixture
def layout7():
    """One octave of C4 major, center-out."""
    return generate_layout(7, root_note="C4")


@pytest.fixture
def layout21():
    return layout_for_preset("21")


@pytest.fixture
def clock():
    return FakeClock()


def sine(freq: float, duration: float, sr: int = 22050, amplitude: float = 0.5) -> np.ndarray:
    """Pure tone for transcription tests."""
    t = np.arange(int(duration * sr)) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def tone():
    return sine
