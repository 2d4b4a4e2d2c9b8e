"""Output layer - Export songs to files.

This layer handles writing songs as:
- Song JSON (the library format)
- MIDI files
"""

from .json_io import export_song, import_song, load_song, load_songs, save_song, save_songs
from .midi import KALIMBA_PROGRAM, MIDIExporter

__all__ = [
    "export_song",
    "import_song",
    "load_song",
    "load_songs",
    "save_song",
    "save_songs",
    "KALIMBA_PROGRAM",
    "MIDIExporter",
]
