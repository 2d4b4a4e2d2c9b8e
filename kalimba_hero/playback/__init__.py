"""Playback layer - hear a song before playing it."""

from .synth import AMPLITUDE_ENVELOPE, AudioEngine, Envelope

__all__ = [
    "AMPLITUDE_ENVELOPE",
    "AudioEngine",
    "Envelope",
]
