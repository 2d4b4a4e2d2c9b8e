"""NoteEvent data class - the fundamental unit of a compiled song."""

import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .constants import A4_FREQUENCY, A4_MIDI, PITCH_NAMES

_NOTE_NAME_RE = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)?$")
_ACCIDENTAL_OFFSETS = {"": 0, "#": 1, "b": -1}


def new_note_id() -> str:
    """Generate a unique note identifier."""
    return uuid.uuid4().hex[:12]


@dataclass
class NoteEvent:
    """One note (or one member of a chord) scheduled on the song timeline."""

    key_index: int  # Index into a Layout
    time: float  # Seconds from song start
    duration: float  # Seconds
    id: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if self.time < 0:
            raise ValueError(f"Note time must be >= 0, got {self.time}")
        if self.duration <= 0:
            raise ValueError(f"Note duration must be > 0, got {self.duration}")

    @property
    def end(self) -> float:
        """Time at which the note stops sounding."""
        return self.time + self.duration

    def signature(self) -> Tuple[int, float, float]:
        """(key_index, time, duration) triple used for multiset comparison."""
        return (self.key_index, self.time, self.duration)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "keyIndex": self.key_index,
            "time": self.time,
            "duration": self.duration,
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], default_duration: Optional[float] = None
    ) -> "NoteEvent":
        """
        Build a note from its JSON form.

        Args:
            data: Mapping with keyIndex, time and (optionally) duration
            default_duration: Used when the entry carries no duration

        Raises:
            ValueError: If required fields are missing or invalid
        """
        if "keyIndex" not in data or "time" not in data:
            raise ValueError(f"Invalid note entry: {data!r}")
        duration = data.get("duration") or default_duration
        if duration is None:
            raise ValueError(f"Note entry has no duration: {data!r}")
        return cls(
            key_index=int(data["keyIndex"]),
            time=float(data["time"]),
            duration=float(duration),
            id=data.get("id"),
        )


def freq_to_midi(freq: float) -> float:
    """Convert frequency (Hz) to a fractional MIDI pitch."""
    if freq <= 0:
        return 0.0
    return float(A4_MIDI + 12 * np.log2(freq / A4_FREQUENCY))


def midi_to_freq(midi: float) -> float:
    """Convert MIDI pitch to frequency (Hz)."""
    return float(A4_FREQUENCY * (2 ** ((midi - A4_MIDI) / 12.0)))


def midi_to_note_name(midi: int) -> str:
    """Get note name (e.g., 'C4', 'A#3')."""
    octave = (midi // 12) - 1
    return f"{PITCH_NAMES[midi % 12]}{octave}"


def parse_note_name(
    name: str, default_octave: Optional[int] = None
) -> Tuple[int, Optional[int]]:
    """
    Split a note name into pitch class and optional octave.

    Accidentals carry across the octave boundary: Cb4 is B3 and B#3 is C4.

    Args:
        name: Note name such as 'C', 'F#', 'Bb' or 'C4'
        default_octave: Octave for names that carry none

    Returns:
        Tuple of (pitch class 0-11, octave or None)

    Raises:
        ValueError: If the name is not a recognizable note
    """
    match = _NOTE_NAME_RE.match(name.strip())
    if not match:
        raise ValueError(f"Unknown note name: {name!r}")

    letter, accidental, octave = match.groups()
    semitone = PITCH_NAMES.index(letter.upper()) + _ACCIDENTAL_OFFSETS[accidental]
    octave = int(octave) if octave is not None else default_octave
    if octave is None:
        return semitone % 12, None

    midi = note_to_midi(semitone, octave)
    return midi % 12, midi // 12 - 1


def note_to_midi(pitch_class: int, octave: int) -> int:
    """MIDI number of a pitch class in a given octave (C4 = 60)."""
    return (octave + 1) * 12 + pitch_class


def note_frequency(name: str, octave: int) -> float:
    """12-TET frequency of a named note relative to A4 = 440 Hz."""
    pitch_class, octave = parse_note_name(name, default_octave=octave)
    return midi_to_freq(note_to_midi(pitch_class, octave))
