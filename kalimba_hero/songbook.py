"""Built-in example songs."""

from typing import Dict, List, Optional

from .core import Song
from .layout import Layout
from .notation import create_song_from_notation

# id -> (title, artist, bpm, difficulty, notation)
EXAMPLE_SONGS: Dict[str, tuple] = {
    "twinkle-twinkle": (
        "Twinkle Twinkle",
        "Traditional",
        90,
        "easy",
        """1 1 5 5 6 6 5
4 4 3 3 2 2 1
5 5 4 4 3 3 2
5 5 4 4 3 3 2
1 1 5 5 6 6 5
4 4 3 3 2 2 1""",
    ),
    "frere-jacques": (
        "Frère Jacques",
        "Traditional",
        100,
        "easy",
        """1 2 3 1
1 2 3 1
3 4 5
3 4 5
5 6 5 4 3 1
5 6 5 4 3 1
1 5 1
1 5 1""",
    ),
    "mary-had-a-little-lamb": (
        "Mary Had a Little Lamb",
        "Traditional",
        100,
        "easy",
        """3 2 1 2 3 3 3
2 2 2
3 5 5
3 2 1 2 3 3 3
3 2 2 3 2 1""",
    ),
    "fly-me-to-the-moon": (
        "Fly Me to the Moon",
        "Frank Sinatra",
        85,
        "medium",
        """1° 7 6 5 4
5 6 1°
7 6 5 4 3
6 5 4 3 2
3 4 6
5 4 3 2 1
2 6 6
1° 7 5 1""",
    ),
    "scale-practice": (
        "Scale Practice",
        "Kalimba Hero",
        100,
        "easy",
        """1 2 3 4 5 6 7
1° 2° 3° 4° 5° 6° 7°
7° 6° 5° 4° 3° 2° 1°
7 6 5 4 3 2 1""",
    ),
}


def example_song(song_id: str, layout: Optional[Layout] = None) -> Song:
    """
    Compile one built-in song.

    Raises:
        KeyError: If the id is unknown
    """
    title, artist, bpm, difficulty, notation = EXAMPLE_SONGS[song_id]
    return create_song_from_notation(
        notation,
        title=title,
        bpm=bpm,
        layout=layout,
        artist=artist,
        difficulty=difficulty,
        song_id=song_id,
    )


def example_songs(layout: Optional[Layout] = None) -> List[Song]:
    """All built-in songs compiled for a layout."""
    return [example_song(song_id, layout) for song_id in EXAMPLE_SONGS]
