"""MIDI export functionality."""

import warnings
from pathlib import Path
from typing import Optional, Union

import pretty_midi

from ..core import Song
from ..core.note import freq_to_midi
from ..layout import Layout, layout_for_preset

KALIMBA_PROGRAM = 108  # General MIDI "Kalimba"


class MIDIExporter:
    """Export songs to MIDI format."""

    def __init__(
        self,
        layout: Optional[Layout] = None,
        instrument_name: str = "Kalimba",
        instrument_program: int = KALIMBA_PROGRAM,
        velocity: int = 90,
    ):
        """
        Initialize MIDIExporter.

        Args:
            layout: Keys the song's key indices refer to (default: 17-key preset)
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
            velocity: Velocity of every note
        """
        self.layout = layout if layout is not None else layout_for_preset()
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program
        self.velocity = velocity

    def song_to_pretty_midi(self, song: Song) -> pretty_midi.PrettyMIDI:
        """Convert a song to a PrettyMIDI object without saving."""
        midi = pretty_midi.PrettyMIDI(initial_tempo=song.bpm)
        midi.time_signature_changes.append(
            pretty_midi.TimeSignature(
                song.time_signature.numerator, song.time_signature.denominator, 0.0
            )
        )

        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        dropped = 0
        for note in song.notes:
            if note.key_index >= len(self.layout):
                dropped += 1
                continue
            pitch = int(round(freq_to_midi(self.layout[note.key_index].frequency)))
            instrument.notes.append(
                pretty_midi.Note(
                    velocity=self.velocity,
                    pitch=pitch,
                    start=note.time,
                    end=note.end,
                )
            )

        if dropped:
            warnings.warn(f"{dropped} note(s) use keys missing from {self.layout.name}")

        midi.instruments.append(instrument)
        return midi

    def export(self, song: Song, output_path: Union[str, Path]) -> None:
        """
        Export a song to a MIDI file.

        Args:
            song: Song to export
            output_path: Path to output MIDI file
        """
        midi = self.song_to_pretty_midi(song)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))
