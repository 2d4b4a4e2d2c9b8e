"""Song container, time signatures and difficulty levels."""

import time as _time
import warnings
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .constants import CHORD_EPSILON, DEFAULT_BPM, DEFAULT_TIME_SIGNATURE, SONG_TAIL_SECONDS
from .note import NoteEvent, new_note_id

_VALID_DENOMINATORS = (1, 2, 4, 8, 16, 32)


@dataclass(frozen=True)
class TimeSignature:
    """Musical meter, e.g. 4/4 or 6/8."""

    numerator: int = DEFAULT_TIME_SIGNATURE[0]
    denominator: int = DEFAULT_TIME_SIGNATURE[1]

    def __post_init__(self):
        if self.numerator < 1:
            raise ValueError(f"Invalid time signature numerator: {self.numerator}")
        if self.denominator not in _VALID_DENOMINATORS:
            raise ValueError(f"Invalid time signature denominator: {self.denominator}")

    @classmethod
    def parse(cls, value: Union[str, Tuple[int, int], "TimeSignature", None]) -> "TimeSignature":
        """Accept '3/4', (3, 4), an existing TimeSignature or None (4/4)."""
        if value is None:
            return cls()
        if isinstance(value, TimeSignature):
            return value
        if isinstance(value, tuple):
            return cls(int(value[0]), int(value[1]))
        parts = str(value).strip().split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid time signature: {value!r}")
        try:
            return cls(int(parts[0]), int(parts[1]))
        except ValueError:
            raise ValueError(f"Invalid time signature: {value!r}")

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"


class Difficulty(Enum):
    """Song difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @classmethod
    def normalize(cls, value: Union[str, int, float, "Difficulty", None]) -> "Difficulty":
        """
        Normalize the loosely typed difficulty found in song files.

        Strings match case-insensitively; numbers 1-5 map onto the levels
        (1 easy, 2 medium, 3 hard, 4-5 expert). None means medium.

        Raises:
            ValueError: If the value cannot be mapped
        """
        if value is None:
            return cls.MEDIUM
        if isinstance(value, Difficulty):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid difficulty: {value!r}")
        if isinstance(value, (int, float)):
            level = int(value)
            if level != value or not 1 <= level <= 5:
                raise ValueError(f"Invalid difficulty level: {value!r}")
            return [cls.EASY, cls.MEDIUM, cls.HARD, cls.EXPERT, cls.EXPERT][level - 1]

        text = str(value).strip().lower()
        if text.isdigit():
            return cls.normalize(int(text))
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Invalid difficulty: {value!r}")


@dataclass
class Song:
    """A playable song: metadata plus compiled, time-ordered notes."""

    title: str
    notes: List[NoteEvent] = field(default_factory=list)
    bpm: float = DEFAULT_BPM
    time_signature: TimeSignature = field(default_factory=TimeSignature)
    artist: str = "Unknown"
    difficulty: Difficulty = Difficulty.MEDIUM
    duration: Optional[float] = None
    notation: Optional[str] = None
    id: str = field(default_factory=new_note_id)
    author_tuning: Optional[str] = None
    author_tine_count: Optional[int] = None
    created_at: Optional[int] = None

    def __post_init__(self):
        if self.bpm <= 0:
            raise ValueError(f"BPM must be positive, got {self.bpm}")
        self.time_signature = TimeSignature.parse(self.time_signature)
        self.difficulty = Difficulty.normalize(self.difficulty)
        self.notes = self._own_notes(self.notes)
        if self.duration is None:
            self.duration = self.compute_duration(self.notes)
        if self.created_at is None:
            self.created_at = int(_time.time() * 1000)

    @staticmethod
    def _own_notes(notes: List[NoteEvent]) -> List[NoteEvent]:
        """Time-ordered copies of notes, each with a unique id."""
        owned = []
        seen = set()
        duplicates = []
        for note in sorted(notes, key=lambda n: n.time):
            note_id = note.id
            if note_id is not None and note_id in seen:
                duplicates.append(note_id)
                note_id = None
            if note_id is None:
                note_id = new_note_id()
            seen.add(note_id)
            owned.append(replace(note, id=note_id))
        if duplicates:
            warnings.warn(
                f"Re-issued ids for {len(duplicates)} note(s) with duplicate ids: "
                f"{sorted(set(duplicates))}"
            )
        return owned

    @staticmethod
    def compute_duration(notes: List[NoteEvent]) -> float:
        """Song length: end of the last note plus a short tail."""
        if not notes:
            return 0.0
        return max(n.end for n in notes) + SONG_TAIL_SECONDS

    @property
    def beat_duration(self) -> float:
        """Duration of one quarter-note beat in seconds."""
        return 60.0 / self.bpm

    def chord_groups(self) -> List[List[NoteEvent]]:
        """Group notes that share a scheduled time."""
        groups: List[List[NoteEvent]] = []
        for note in self.notes:
            if groups and abs(groups[-1][0].time - note.time) <= CHORD_EPSILON:
                groups[-1].append(note)
            else:
                groups.append([note])
        return groups

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the Song JSON shape (camelCase keys)."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "bpm": self.bpm,
            "timeSignature": str(self.time_signature),
            "difficulty": self.difficulty.value,
            "duration": self.duration,
            "notes": [n.to_dict() for n in self.notes],
            "notation": self.notation,
            "createdAt": self.created_at,
        }
        if self.author_tuning is not None:
            data["authorTuning"] = self.author_tuning
        if self.author_tine_count is not None:
            data["authorTineCount"] = self.author_tine_count
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Song":
        """
        Build a Song from its JSON form.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError("Invalid song format: expected an object")
        for required in ("id", "title", "bpm", "notes"):
            if not data.get(required) and data.get(required) != []:
                raise ValueError(f"Invalid song format: missing '{required}'")
        if not isinstance(data["notes"], list):
            raise ValueError("Invalid song format: 'notes' must be a list")

        bpm = float(data["bpm"])
        if bpm <= 0:
            raise ValueError(f"BPM must be positive, got {bpm}")
        time_signature = TimeSignature.parse(data.get("timeSignature"))
        step = (60.0 / bpm) * 4 / time_signature.denominator
        notes = [NoteEvent.from_dict(n, default_duration=step) for n in data["notes"]]

        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            artist=data.get("artist") or "Unknown",
            bpm=bpm,
            time_signature=time_signature,
            difficulty=Difficulty.normalize(data.get("difficulty")),
            duration=data.get("duration"),
            notes=notes,
            notation=data.get("notation"),
            author_tuning=data.get("authorTuning"),
            author_tine_count=data.get("authorTineCount"),
            created_at=data.get("createdAt"),
        )
