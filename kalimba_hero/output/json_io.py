"""Song JSON files."""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from ..core import Song


def export_song(song: Song) -> str:
    """Serialize a song to JSON text."""
    return json.dumps(song.to_dict(), indent=2, ensure_ascii=False)


def import_song(text: str) -> Song:
    """
    Parse a song from JSON text.

    Raises:
        ValueError: If the text is not valid JSON or not a song
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid song JSON: {e}")
    return Song.from_dict(data)


def save_song(song: Song, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_song(song), encoding="utf-8")


def load_song(path: Union[str, Path]) -> Song:
    """
    Load a song file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a valid song
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Song file not found: {path}")
    return import_song(path.read_text(encoding="utf-8"))


def load_songs(path: Union[str, Path]) -> List[Song]:
    """Load a JSON array of songs, as written by save_songs."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Song file not found: {path}")
    data: Any = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("Invalid song library: expected a list")
    return [Song.from_dict(entry) for entry in data]


def save_songs(songs: List[Song], path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data: List[Dict[str, Any]] = [s.to_dict() for s in songs]
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
