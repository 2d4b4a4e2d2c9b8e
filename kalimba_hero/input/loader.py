"""Audio loading - recordings and raw buffers at the analysis sample rate."""

from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
import librosa

from ..core.constants import SAMPLE_RATE


class AudioLoader:
    """
    Brings audio into the shape the analyzers expect.

    Everything leaves as mono float32 at ``target_sr``, optionally
    peak-normalized and trimmed. ``load`` reads a file; ``prepare`` does
    the same for a buffer already in memory, such as a microphone capture.
    """

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a"}

    def __init__(
        self,
        target_sr: int = SAMPLE_RATE,
        normalize: bool = True,
        trim_db: Optional[float] = None,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Sample rate handed to the analyzers
            normalize: Peak-normalize audio if True
            trim_db: Trim leading/trailing silence quieter than this (dB below
                peak); None keeps the recording untouched so note times stay
                aligned with the file
        """
        self.target_sr = target_sr
        self.normalize = normalize
        self.trim_db = trim_db

    def check_path(self, path: Union[str, Path]) -> Path:
        """
        Validate a recording path.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format not supported
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")
        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )
        return path

    def load(self, path: Union[str, Path]) -> Tuple[np.ndarray, int]:
        """
        Load a recording.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = self.check_path(path)
        # librosa handles decoding, resampling and downmixing
        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=True)
        return self._finish(audio), sr

    def prepare(self, audio: np.ndarray, sr: int) -> Tuple[np.ndarray, int]:
        """
        Condition an in-memory buffer like a loaded file.

        Args:
            audio: Samples, mono or (channels, samples)
            sr: Sample rate of the buffer

        Returns:
            Tuple of (audio array, target sample rate)
        """
        audio = np.asarray(audio, dtype=np.float32)
        if audio.ndim > 1:
            audio = librosa.to_mono(audio)
        if sr != self.target_sr and len(audio):
            audio = librosa.resample(audio, orig_sr=sr, target_sr=self.target_sr)
        return self._finish(audio), self.target_sr

    def _finish(self, audio: np.ndarray) -> np.ndarray:
        if self.trim_db is not None and len(audio):
            audio, _ = librosa.effects.trim(audio, top_db=self.trim_db)
        if self.normalize:
            peak = float(np.abs(audio).max()) if len(audio) else 0.0
            if peak > 0:
                audio = audio / peak
        return audio.astype(np.float32, copy=False)

    def duration(self, audio: np.ndarray) -> float:
        """Length in seconds of audio at the target rate."""
        return len(audio) / self.target_sr
