"""Monophonic transcription using pYIN and onset detection."""

from typing import List, Tuple

import numpy as np
import librosa

from .base import TranscribedNote, Transcriber, TranscriptionSettings


class LibrosaTranscriber(Transcriber):
    """Transcribes a single melody line with pYIN pitch tracking."""

    def __init__(
        self,
        hop_length: int = 512,
        fmin: str = "C2",
        fmax: str = "C7",
    ):
        """
        Initialize LibrosaTranscriber.

        Args:
            hop_length: Samples between analysis frames
            fmin: Lowest detectable note
            fmax: Highest detectable note
        """
        self.hop_length = hop_length
        self.fmin = librosa.note_to_hz(fmin)
        self.fmax = librosa.note_to_hz(fmax)

    def transcribe(
        self, audio: np.ndarray, sr: int, settings: TranscriptionSettings
    ) -> List[TranscribedNote]:
        """
        Transcribe monophonic audio to notes.

        Args:
            audio: Audio array (mono)
            sr: Sample rate
            settings: Detection thresholds

        Returns:
            List of detected notes
        """
        if len(audio) == 0 or not np.any(audio):
            return []

        times, frequencies, confidences = self._detect_pitch(audio, sr)
        onset_times = self._detect_onsets(audio, sr, settings.onset_threshold)

        return self._segment_notes(
            times, frequencies, confidences, onset_times, audio, sr, settings
        )

    def _detect_pitch(
        self, audio: np.ndarray, sr: int
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Detect pitch using pYIN.

        Returns:
            Tuple of (times, frequencies, confidences)
        """
        f0, _, voiced_probs = librosa.pyin(
            audio,
            fmin=self.fmin,
            fmax=self.fmax,
            sr=sr,
            hop_length=self.hop_length,
        )

        times = librosa.frames_to_time(
            np.arange(len(f0)), sr=sr, hop_length=self.hop_length
        )

        # Replace NaN with 0
        f0 = np.nan_to_num(f0, nan=0.0)
        voiced_probs = np.nan_to_num(voiced_probs, nan=0.0)

        return times, f0, voiced_probs

    def _detect_onsets(self, audio: np.ndarray, sr: int, threshold: float) -> np.ndarray:
        """
        Detect note onsets using spectral flux.

        Returns:
            Array of onset times in seconds
        """
        onset_env = librosa.onset.onset_strength(
            y=audio, sr=sr, hop_length=self.hop_length
        )

        onset_frames = librosa.onset.onset_detect(
            onset_envelope=onset_env,
            sr=sr,
            hop_length=self.hop_length,
            backtrack=True,
            delta=threshold,
        )

        return librosa.frames_to_time(onset_frames, sr=sr, hop_length=self.hop_length)

    def _segment_notes(
        self,
        times: np.ndarray,
        frequencies: np.ndarray,
        confidences: np.ndarray,
        onset_times: np.ndarray,
        audio: np.ndarray,
        sr: int,
        settings: TranscriptionSettings,
    ) -> List[TranscribedNote]:
        """Segment the pitch contour into notes at onset boundaries."""
        notes = []
        duration = len(audio) / sr
        min_duration = settings.min_note_frames * self.hop_length / sr

        # A note sounding from the very start has no detectable onset
        boundaries = np.unique(np.concatenate([[0.0], onset_times, [duration]]))

        for start_time, end_time in zip(boundaries[:-1], boundaries[1:]):
            if end_time - start_time < min_duration:
                continue

            rms = self._get_segment_rms(audio, sr, start_time, end_time)
            if rms < settings.min_rms:
                continue

            mask = (times >= start_time) & (times < end_time)
            segment_freqs = frequencies[mask]
            segment_confs = confidences[mask]

            confident = (segment_confs >= settings.frame_threshold) & (segment_freqs > 0)
            if np.count_nonzero(confident) < settings.min_note_frames:
                continue

            # Median is robust to octave blips at the edges
            median_freq = float(np.median(segment_freqs[confident]))

            notes.append(
                TranscribedNote.from_frequency(
                    median_freq,
                    onset=float(start_time),
                    offset=float(end_time),
                    velocity=self._rms_to_velocity(rms),
                )
            )

        return notes

    def _get_segment_rms(
        self,
        audio: np.ndarray,
        sr: int,
        start_time: float,
        end_time: float,
    ) -> float:
        """Calculate RMS energy for an audio segment."""
        segment = audio[int(start_time * sr):int(end_time * sr)]

        if len(segment) == 0:
            return 0.0

        return float(np.sqrt(np.mean(segment**2)))

    def _rms_to_velocity(self, rms: float) -> int:
        """Convert RMS energy to MIDI velocity (0-127)."""
        # Assuming normalized audio, RMS typically 0.01-0.5
        return int(np.clip(rms * 200, 20, 127))
