"""Transcription layer - Note-level detection from audio.

This layer converts recordings into playable key events:
- Monophonic pitch/onset transcription (pYIN)
- MIDI import for notes transcribed elsewhere
- Key mapping with a capture window and grid quantization
- The one-retry automatic transcription policy
"""

from .base import Transcriber, TranscribedNote, TranscriptionSettings
from .monophonic import LibrosaTranscriber
from .midi import notes_from_pretty_midi
from .mapper import CAPTURE_SEMITONES, KeyMapper
from .auto import NO_NOTES_MESSAGE, AutoTranscriber

__all__ = [
    "Transcriber",
    "TranscribedNote",
    "TranscriptionSettings",
    "LibrosaTranscriber",
    "notes_from_pretty_midi",
    "CAPTURE_SEMITONES",
    "KeyMapper",
    "NO_NOTES_MESSAGE",
    "AutoTranscriber",
]
