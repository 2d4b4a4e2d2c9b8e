"""Map transcribed pitches onto kalimba keys and the rhythmic grid."""

from typing import Dict, List, Optional, Tuple, Union

from ..core import NoteEvent, TimeSignature
from ..core.constants import DEFAULT_BPM
from ..core.note import freq_to_midi
from ..layout import Layout
from ..processing import Quantizer
from .base import TranscribedNote

# Widest pitch error (semitones) still captured by a key
CAPTURE_SEMITONES = 0.7


class KeyMapper:
    """
    Assign each transcribed note to the nearest key and snap it to the grid.

    Notes further than the capture window from every key are dropped;
    a kalimba cannot play them and guessing would add wrong notes.
    """

    def __init__(
        self,
        layout: Layout,
        bpm: float = DEFAULT_BPM,
        time_signature: Union[str, Tuple[int, int], TimeSignature] = "4/4",
        transpose: int = 0,
        capture_semitones: float = CAPTURE_SEMITONES,
    ):
        """
        Initialize KeyMapper.

        Args:
            layout: Target keys
            bpm: Tempo of the grid
            time_signature: Meter of the grid
            transpose: Semitones added to every pitch before mapping
            capture_semitones: Largest accepted distance to a key
        """
        self.layout = layout
        self.transpose = transpose
        self.capture_semitones = capture_semitones
        # Tab text has one note length, so the grid is the notation step
        self.quantizer = Quantizer(bpm, time_signature)
        self._key_pitches = [(freq_to_midi(k.frequency), k.index) for k in layout.by_pitch()]

    def key_for_pitch(self, pitch: float) -> Optional[int]:
        """Key index for a MIDI pitch, or None if no key is close enough."""
        target = pitch + self.transpose
        best_index = None
        best_distance = None
        for key_pitch, index in self._key_pitches:
            distance = abs(key_pitch - target)
            if best_distance is None or distance < best_distance:
                best_index, best_distance = index, distance
        if best_distance is None or best_distance > self.capture_semitones:
            return None
        return best_index

    def map(self, notes: List[TranscribedNote]) -> List[NoteEvent]:
        """
        Map notes onto keys and quantize them.

        Returns:
            NoteEvents ordered by time, at most one per key and step, each
            lasting one step like a note written in tab text
        """
        events = []
        for note in notes:
            index = self.key_for_pitch(note.pitch)
            if index is None:
                continue
            events.append(NoteEvent(key_index=index, time=note.onset, duration=note.duration))

        step = self.quantizer.step_duration
        seen: Dict[Tuple[int, int], NoteEvent] = {}
        for event in self.quantizer.quantize(events):
            slot = (event.key_index, self.quantizer.step_index(event.time))
            if slot not in seen:
                seen[slot] = NoteEvent(key_index=event.key_index, time=event.time, duration=step)

        return sorted(seen.values(), key=lambda e: (e.time, e.key_index))
