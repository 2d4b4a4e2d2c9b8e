"""Core types and constants for Kalimba Hero."""

from .note import (
    NoteEvent,
    freq_to_midi,
    midi_to_freq,
    midi_to_note_name,
    new_note_id,
    note_frequency,
    parse_note_name,
)
from .song import Difficulty, Song, TimeSignature
from .errors import LayoutConfigurationError, NoNotesDetectedError
from .constants import (
    PITCH_NAMES,
    A4_FREQUENCY,
    OCTAVE_MARKER,
    DEFAULT_BPM,
    DEFAULT_TIME_SIGNATURE,
    LEAD_IN_SECONDS,
)

__all__ = [
    "NoteEvent",
    "Song",
    "TimeSignature",
    "Difficulty",
    "LayoutConfigurationError",
    "NoNotesDetectedError",
    "freq_to_midi",
    "midi_to_freq",
    "midi_to_note_name",
    "new_note_id",
    "note_frequency",
    "parse_note_name",
    "PITCH_NAMES",
    "A4_FREQUENCY",
    "OCTAVE_MARKER",
    "DEFAULT_BPM",
    "DEFAULT_TIME_SIGNATURE",
    "LEAD_IN_SECONDS",
]
