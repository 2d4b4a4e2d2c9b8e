"""Import notes from MIDI, e.g. the output of an external transcription model."""

from pathlib import Path
from typing import List, Union

import pretty_midi

from .base import TranscribedNote


def notes_from_pretty_midi(
    midi: Union[str, Path, pretty_midi.PrettyMIDI],
    include_drums: bool = False,
) -> List[TranscribedNote]:
    """
    Collect every note of a MIDI file, across instruments, ordered by onset.

    Args:
        midi: Path to a MIDI file or a loaded PrettyMIDI object
        include_drums: Keep percussion tracks (unpitched, usually unwanted)

    Returns:
        List of TranscribedNote

    Raises:
        FileNotFoundError: If a path is given and does not exist
    """
    if not isinstance(midi, pretty_midi.PrettyMIDI):
        path = Path(midi)
        if not path.exists():
            raise FileNotFoundError(f"MIDI file not found: {path}")
        midi = pretty_midi.PrettyMIDI(str(path))

    notes = []
    for instrument in midi.instruments:
        if instrument.is_drum and not include_drums:
            continue
        for note in instrument.notes:
            if note.end <= note.start:
                continue
            notes.append(
                TranscribedNote(
                    pitch=float(note.pitch),
                    onset=float(note.start),
                    offset=float(note.end),
                    velocity=int(note.velocity),
                )
            )

    notes.sort(key=lambda n: (n.onset, n.pitch))
    return notes
