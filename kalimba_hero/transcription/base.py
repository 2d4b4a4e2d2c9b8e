"""Base classes for transcription."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import List

import numpy as np

from ..core.note import freq_to_midi, midi_to_freq, midi_to_note_name


@dataclass
class TranscribedNote:
    """A pitched note found in audio, before it is mapped onto keys."""

    pitch: float  # MIDI pitch, may be fractional
    onset: float  # Start time in seconds
    offset: float  # End time in seconds
    velocity: int = 80  # 0-127

    def __post_init__(self):
        if self.offset <= self.onset:
            raise ValueError(f"Note offset ({self.offset}) must be after onset ({self.onset})")

    @property
    def duration(self) -> float:
        return self.offset - self.onset

    @property
    def frequency(self) -> float:
        return midi_to_freq(self.pitch)

    @property
    def name(self) -> str:
        return midi_to_note_name(int(round(self.pitch)))

    @classmethod
    def from_frequency(cls, frequency: float, onset: float, offset: float, velocity: int = 80):
        return cls(pitch=freq_to_midi(frequency), onset=onset, offset=offset, velocity=velocity)


@dataclass
class TranscriptionSettings:
    """Detection thresholds for automatic transcription."""

    onset_threshold: float = 0.5  # 0-1, higher = fewer onsets
    frame_threshold: float = 0.3  # 0-1, minimum pitch confidence per frame
    min_note_frames: int = 2  # Shortest accepted note, in analysis frames
    min_rms: float = 0.01  # Segments quieter than this are noise
    transpose: int = 0  # Semitones added before key mapping

    def __post_init__(self):
        for name in ("onset_threshold", "frame_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if self.min_note_frames < 1:
            raise ValueError(f"min_note_frames must be >= 1, got {self.min_note_frames}")

    def relaxed(self) -> "TranscriptionSettings":
        """Looser thresholds for a second attempt on quiet or unclear audio."""
        return replace(
            self,
            onset_threshold=self.onset_threshold * 0.5,
            frame_threshold=self.frame_threshold * 0.5,
            min_note_frames=1,
            min_rms=self.min_rms * 0.25,
        )


class Transcriber(ABC):
    """Abstract base class for audio transcription."""

    @abstractmethod
    def transcribe(
        self, audio: np.ndarray, sr: int, settings: TranscriptionSettings
    ) -> List[TranscribedNote]:
        """
        Transcribe audio to notes.

        Args:
            audio: Audio array (mono)
            sr: Sample rate
            settings: Detection thresholds

        Returns:
            List of detected notes
        """
        pass
