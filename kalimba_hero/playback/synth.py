"""Kalimba-like FM synthesis for previewing songs."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

import numpy as np
import soundfile as sf

from ..core import Song
from ..core.constants import SAMPLE_RATE
from ..layout import Layout, layout_for_preset


@dataclass(frozen=True)
class Envelope:
    """ADSR envelope; times in seconds, sustain as a level 0-1."""

    attack: float
    decay: float
    sustain: float
    release: float

    def render(self, hold: float, sr: int) -> np.ndarray:
        """Envelope for a note held ``hold`` seconds, release included."""
        n_hold = max(1, int(round(hold * sr)))
        t = np.arange(n_hold) / sr

        level = np.full(n_hold, self.sustain)
        in_attack = t < self.attack
        level[in_attack] = t[in_attack] / self.attack
        in_decay = (~in_attack) & (t < self.attack + self.decay)
        level[in_decay] = 1.0 - (1.0 - self.sustain) * (t[in_decay] - self.attack) / self.decay

        n_release = int(round(self.release * sr))
        tail = level[-1] * (1.0 - np.arange(n_release) / max(n_release, 1))
        return np.concatenate([level, tail])


AMPLITUDE_ENVELOPE = Envelope(attack=0.01, decay=0.2, sustain=0.3, release=0.8)
MODULATION_ENVELOPE = Envelope(attack=0.1, decay=0.3, sustain=0.2, release=0.4)
MODULATION_INDEX = 2.0
HARMONICITY = 3.0


class AudioEngine:
    """
    Renders key events to audio.

    The engine owns its resources explicitly: call ``init()`` before
    rendering and ``dispose()`` afterwards, or use it as a context manager.
    """

    def __init__(
        self,
        layout: Optional[Layout] = None,
        sr: int = SAMPLE_RATE,
        gain: float = 0.3,
    ):
        """
        Initialize AudioEngine.

        Args:
            layout: Keys to play (default: 17-key preset)
            sr: Output sample rate
            gain: Peak amplitude of a single note
        """
        self.layout = layout if layout is not None else layout_for_preset()
        self.sr = sr
        self.gain = gain
        self._cache: Optional[Dict[Tuple[int, float], np.ndarray]] = None

    @property
    def initialized(self) -> bool:
        return self._cache is not None

    def init(self) -> "AudioEngine":
        if self._cache is None:
            self._cache = {}
        return self

    def dispose(self) -> None:
        self._cache = None

    def __enter__(self) -> "AudioEngine":
        return self.init()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def _require_init(self) -> None:
        if self._cache is None:
            raise RuntimeError("AudioEngine is not initialized; call init() first")

    def tone(self, frequency: float, duration: float) -> np.ndarray:
        """FM tone with the kalimba envelope; length is duration plus release."""
        amp = AMPLITUDE_ENVELOPE.render(duration, self.sr)
        mod = MODULATION_ENVELOPE.render(duration, self.sr)
        n = max(len(amp), len(mod))
        amp = np.pad(amp, (0, n - len(amp)))
        mod = np.pad(mod, (0, n - len(mod)))

        t = np.arange(n) / self.sr
        modulator = MODULATION_INDEX * mod * np.sin(2 * np.pi * frequency * HARMONICITY * t)
        carrier = np.sin(2 * np.pi * frequency * t + modulator)
        return (self.gain * amp * carrier).astype(np.float32)

    def render_note(self, key_index: int, duration: float = 0.7) -> np.ndarray:
        """
        Render one key.

        Raises:
            RuntimeError: If the engine is not initialized
            ValueError: If the key does not exist on the layout
        """
        self._require_init()
        if not 0 <= key_index < len(self.layout):
            raise ValueError(f"No key {key_index} on {self.layout.name}")

        cache_key = (key_index, round(duration, 4))
        if cache_key not in self._cache:
            self._cache[cache_key] = self.tone(self.layout[key_index].frequency, duration)
        return self._cache[cache_key]

    def render_chord(self, key_indices: Iterable[int], duration: float = 0.7) -> np.ndarray:
        """Render several keys struck together."""
        voices = [self.render_note(i, duration) for i in key_indices]
        if not voices:
            return np.zeros(0, dtype=np.float32)
        out = np.zeros(max(len(v) for v in voices), dtype=np.float32)
        for voice in voices:
            out[:len(voice)] += voice
        return out

    def render_song(self, song: Song) -> np.ndarray:
        """
        Render a whole song.

        Notes on keys the layout lacks are left out. The mix is scaled down
        if overlapping notes would clip.
        """
        self._require_init()
        length = int(np.ceil((song.duration or 0.0) * self.sr))
        out = np.zeros(length, dtype=np.float32)

        for note in song.notes:
            if note.key_index >= len(self.layout):
                continue
            voice = self.render_note(note.key_index, note.duration)
            start = int(round(note.time * self.sr))
            end = start + len(voice)
            if end > len(out):
                out = np.pad(out, (0, end - len(out)))
            out[start:end] += voice

        peak = np.abs(out).max() if len(out) else 0.0
        if peak > 1.0:
            out /= peak
        return out

    def write(self, audio: np.ndarray, path: Union[str, Path]) -> None:
        """Write rendered audio to a WAV file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        sf.write(str(path), audio, self.sr)

    def render_to_file(self, song: Song, path: Union[str, Path]) -> None:
        self.write(self.render_song(song), path)
