"""Note quantization - Snap notes to the notation grid."""

from typing import List, Tuple, Union

from ..core import NoteEvent, TimeSignature
from ..core.constants import DEFAULT_BPM


class Quantizer:
    """Quantize note timings to a rhythmic grid.

    The notation grid step is the note value of the time signature's
    denominator, with tempo counted in quarter notes: a 4/4 step is one
    beat, a 6/8 step is half a beat. ``subdivisions`` splits each step
    further for sources that are not written on the notation grid.
    """

    def __init__(
        self,
        bpm: float = DEFAULT_BPM,
        time_signature: Union[str, Tuple[int, int], TimeSignature] = "4/4",
        subdivisions: int = 1,
    ):
        """
        Initialize Quantizer.

        Args:
            bpm: Tempo in quarter-note beats per minute
            time_signature: Time signature ('3/4', (3, 4) or TimeSignature)
            subdivisions: Grid cells per notation step
        """
        if bpm <= 0:
            raise ValueError(f"BPM must be positive, got {bpm}")
        if subdivisions < 1:
            raise ValueError(f"Subdivisions must be >= 1, got {subdivisions}")
        self.bpm = bpm
        self.time_signature = TimeSignature.parse(time_signature)
        self.subdivisions = subdivisions

    @property
    def beat_duration(self) -> float:
        """Duration of one quarter-note beat in seconds."""
        return 60.0 / self.bpm

    @property
    def step_duration(self) -> float:
        """Duration of one notation step in seconds."""
        return self.beat_duration * 4 / self.time_signature.denominator

    @property
    def grid_duration(self) -> float:
        """Duration of one grid unit in seconds."""
        return self.step_duration / self.subdivisions

    @property
    def measure_duration(self) -> float:
        """Duration of one measure in seconds."""
        return self.step_duration * self.time_signature.numerator

    def step_time(self, index: int) -> float:
        """Start time of the ``index``-th notation step."""
        return index * self.step_duration

    def step_index(self, time: float) -> int:
        """Nearest notation step for a time."""
        return int(round(time / self.step_duration))

    def snap(self, time: float) -> float:
        """Snap time to nearest grid position."""
        return round(time / self.grid_duration) * self.grid_duration

    def is_on_grid(self, time: float, tolerance: float = 1e-9) -> bool:
        return abs(self.snap(time) - time) <= tolerance

    def quantize(self, notes: List[NoteEvent]) -> List[NoteEvent]:
        """
        Quantize note onsets and durations to the grid.

        Args:
            notes: List of notes to quantize

        Returns:
            List of quantized notes (ids preserved)
        """
        quantized = []

        for note in notes:
            q_time = max(0.0, self.snap(note.time))
            q_duration = self.snap(note.duration)

            # Ensure minimum duration
            if q_duration < self.grid_duration:
                q_duration = self.grid_duration

            quantized.append(
                NoteEvent(
                    key_index=note.key_index,
                    time=q_time,
                    duration=q_duration,
                    id=note.id,
                )
            )

        return quantized
