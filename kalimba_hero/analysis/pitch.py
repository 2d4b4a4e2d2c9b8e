"""Pitch detection - estimate the sounding pitch of an audio frame."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import librosa

from ..core.constants import MAX_PLAUSIBLE_HZ, MIN_PLAUSIBLE_HZ, SAMPLE_RATE


@dataclass
class DetectedPitch:
    """One pitch estimate from the audio input."""

    frequency: float  # Hz
    clarity: float  # 0-1, probability the frame is voiced
    volume: Optional[float] = None  # RMS amplitude, if the producer reports it
    timestamp: float = 0.0  # Seconds on the producer's clock


class PitchAnalyzer:
    """Low-level pitch detection on short audio frames."""

    def __init__(
        self,
        sr: int = SAMPLE_RATE,
        frame_length: int = 2048,
        hop_length: int = 512,
        fmin: float = MIN_PLAUSIBLE_HZ,
        fmax: float = MAX_PLAUSIBLE_HZ,
    ):
        self.sr = sr
        self.frame_length = frame_length
        self.hop_length = hop_length
        self.fmin = fmin
        self.fmax = fmax

    def detect_f0(
        self,
        audio: np.ndarray,
        method: str = "pyin",
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Detect fundamental frequency (f0) over time.

        Args:
            audio: Audio array
            method: Detection method ('pyin', 'yin')

        Returns:
            Tuple of (f0 in Hz, voiced_flag, voiced_prob)
        """
        if method == "pyin":
            f0, voiced_flag, voiced_prob = librosa.pyin(
                audio,
                fmin=self.fmin,
                fmax=self.fmax,
                sr=self.sr,
                frame_length=self.frame_length,
                hop_length=self.hop_length,
            )
        elif method == "yin":
            # YIN doesn't return voiced probability
            f0 = librosa.yin(
                audio,
                fmin=self.fmin,
                fmax=self.fmax,
                sr=self.sr,
                frame_length=self.frame_length,
                hop_length=self.hop_length,
            )
            voiced_flag = ~np.isnan(f0)
            voiced_prob = voiced_flag.astype(float)
        else:
            raise ValueError(f"Unknown pitch detection method: {method}")

        return f0, voiced_flag, voiced_prob

    def detect(self, frame: np.ndarray, timestamp: float = 0.0) -> Optional[DetectedPitch]:
        """
        Estimate the pitch of one input buffer.

        The buffer's median voiced f0 is reported, with the mean voiced
        probability as clarity and the RMS as volume.

        Returns:
            DetectedPitch, or None if no frame was voiced
        """
        frame = np.asarray(frame, dtype=np.float32)
        if len(frame) < self.frame_length:
            frame = np.pad(frame, (0, self.frame_length - len(frame)))

        f0, voiced, prob = self.detect_f0(frame)
        mask = voiced & np.isfinite(f0)
        if not np.any(mask):
            return None

        volume = float(np.sqrt(np.mean(frame ** 2)))
        return DetectedPitch(
            frequency=float(np.median(f0[mask])),
            clarity=float(np.mean(prob[mask])),
            volume=volume,
            timestamp=timestamp,
        )

    def stream(self, audio: np.ndarray, block_size: int = 4096) -> List[DetectedPitch]:
        """Run detect() over consecutive blocks of a recording."""
        pitches = []
        for start in range(0, len(audio) - block_size + 1, block_size):
            pitch = self.detect(audio[start:start + block_size], timestamp=start / self.sr)
            if pitch is not None:
                pitches.append(pitch)
        return pitches
