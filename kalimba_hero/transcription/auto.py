"""Automatic transcription - turn a recording or MIDI file into a song."""

import warnings
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from ..core import NoNotesDetectedError, NoteEvent, Song, TimeSignature
from ..core.constants import DEFAULT_BPM
from ..input import AudioLoader
from ..layout import Layout, layout_for_preset
from ..notation import serialize
from .base import Transcriber, TranscriptionSettings
from .mapper import KeyMapper
from .midi import notes_from_pretty_midi
from .monophonic import LibrosaTranscriber

NO_NOTES_MESSAGE = "No notes detected. Try a clearer audio file."


class AutoTranscriber:
    """
    Transcribe audio onto a kalimba layout.

    If the first pass finds no playable notes, one more pass runs with
    relaxed thresholds before giving up.
    """

    def __init__(
        self,
        layout: Optional[Layout] = None,
        transcriber: Optional[Transcriber] = None,
        settings: Optional[TranscriptionSettings] = None,
        bpm: float = DEFAULT_BPM,
        time_signature: Union[str, Tuple[int, int], TimeSignature] = "4/4",
        loader: Optional[AudioLoader] = None,
    ):
        """
        Initialize AutoTranscriber.

        Args:
            layout: Target keys (default: 17-key preset)
            transcriber: Pitch/onset detector (default: LibrosaTranscriber)
            settings: Detection thresholds
            bpm: Tempo used for quantization
            time_signature: Meter used for quantization
            loader: Audio loader for transcribe_file
        """
        self.layout = layout if layout is not None else layout_for_preset()
        self.transcriber = transcriber or LibrosaTranscriber()
        self.settings = settings or TranscriptionSettings()
        self.bpm = bpm
        self.time_signature = TimeSignature.parse(time_signature)
        self.loader = loader or AudioLoader()

    def _mapper(self, settings: TranscriptionSettings) -> KeyMapper:
        return KeyMapper(self.layout, self.bpm, self.time_signature, transpose=settings.transpose)

    def transcribe(self, audio: np.ndarray, sr: int) -> List[NoteEvent]:
        """
        Transcribe audio into key events.

        Args:
            audio: Audio array, any sample rate, mono or (channels, samples)
            sr: Sample rate

        Returns:
            NoteEvents ordered by time

        Raises:
            NoNotesDetectedError: If both passes find nothing playable
        """
        audio, sr = self.loader.prepare(audio, sr)
        return self._run_passes(audio, sr)

    def _run_passes(self, audio: np.ndarray, sr: int) -> List[NoteEvent]:
        notes = self._mapper(self.settings).map(
            self.transcriber.transcribe(audio, sr, self.settings)
        )
        if notes:
            return notes

        warnings.warn("No notes detected, retrying with relaxed thresholds")
        relaxed = self.settings.relaxed()
        notes = self._mapper(relaxed).map(self.transcriber.transcribe(audio, sr, relaxed))
        if not notes:
            raise NoNotesDetectedError(NO_NOTES_MESSAGE)
        return notes

    def transcribe_file(self, path: Union[str, Path]) -> List[NoteEvent]:
        """Load an audio file and transcribe it."""
        audio, sr = self.loader.load(path)
        return self._run_passes(audio, sr)

    def transcribe_midi(self, path: Union[str, Path]) -> List[NoteEvent]:
        """
        Map an existing MIDI transcription onto the layout.

        Raises:
            NoNotesDetectedError: If no MIDI note fits the layout
        """
        notes = self._mapper(self.settings).map(notes_from_pretty_midi(path))
        if not notes:
            raise NoNotesDetectedError(NO_NOTES_MESSAGE)
        return notes

    def to_song(self, notes: List[NoteEvent], title: str, artist: str = "Unknown") -> Song:
        """Wrap transcribed notes in a Song, with tab text for editing."""
        return Song(
            title=title,
            artist=artist,
            notes=notes,
            bpm=self.bpm,
            time_signature=self.time_signature,
            notation=serialize(notes, self.bpm, self.time_signature, self.layout),
            author_tine_count=len(self.layout),
        )
