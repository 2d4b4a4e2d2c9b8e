"""Notation parser - compile tablature text into timed key events."""

import warnings
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from ..core import Difficulty, NoteEvent, Song, TimeSignature
from ..core.constants import DEFAULT_BPM, DEFAULT_PRESET
from ..layout import Layout, layout_for_preset
from ..processing import Quantizer
from .tokenizer import Token, TokenKind, tokenize


@dataclass
class SkippedToken:
    """A token that produced no note."""

    text: str
    line: int
    column: int
    reason: str

    def __str__(self) -> str:
        return f"{self.text!r} at {self.line}:{self.column} ({self.reason})"


@dataclass
class ParseResult:
    """Compiled notes plus everything that was dropped on the way."""

    notes: List[NoteEvent] = field(default_factory=list)
    skipped: List[SkippedToken] = field(default_factory=list)
    steps: int = 0  # Grid steps consumed

    @property
    def ok(self) -> bool:
        return not self.skipped


class NotationParser:
    """
    Compile kalimba tablature into NoteEvents.

    Every token occupies one grid step: a single note, a chord (all
    members at the same time) or a rest. A compact run such as ``467``
    occupies one step per note. Line breaks add no time.
    """

    def __init__(
        self,
        layout: Optional[Layout] = None,
        bpm: float = DEFAULT_BPM,
        time_signature: Union[str, Tuple[int, int], TimeSignature] = "4/4",
    ):
        """
        Initialize NotationParser.

        Args:
            layout: Key layout used to resolve labels (default: 17-key preset)
            bpm: Tempo in quarter-note beats per minute
            time_signature: Time signature of the tab
        """
        self.layout = layout if layout is not None else layout_for_preset(DEFAULT_PRESET)
        self.quantizer = Quantizer(bpm, time_signature)

    @property
    def step_duration(self) -> float:
        return self.quantizer.step_duration

    def parse(self, text: str) -> ParseResult:
        """
        Parse tablature text.

        Args:
            text: Tab text

        Returns:
            ParseResult with notes ordered by time
        """
        result = ParseResult()
        step = 0

        for token in tokenize(text):
            if token.kind == TokenKind.REST:
                step += 1
            elif token.kind == TokenKind.NOTE:
                self._emit(token, token.labels[0], step, result)
                step += 1
            elif token.kind == TokenKind.RUN:
                for label in token.labels:
                    self._emit(token, label, step, result)
                    step += 1
            elif token.kind == TokenKind.CHORD:
                for label in token.labels:
                    self._emit(token, label, step, result)
                for member in token.invalid:
                    result.skipped.append(
                        SkippedToken(member, token.line, token.column, "invalid chord member")
                    )
                step += 1
            else:
                result.skipped.append(
                    SkippedToken(token.text, token.line, token.column, "unrecognized token")
                )

        result.steps = step

        if result.skipped:
            preview = ", ".join(str(s) for s in result.skipped[:5])
            more = f" (+{len(result.skipped) - 5} more)" if len(result.skipped) > 5 else ""
            warnings.warn(f"Skipped {len(result.skipped)} notation token(s): {preview}{more}")

        return result

    def _emit(self, token: Token, label: str, step: int, result: ParseResult) -> None:
        index = self.layout.resolve(label)
        if index is None:
            result.skipped.append(
                SkippedToken(label, token.line, token.column, f"no key for '{label}'")
            )
            return
        result.notes.append(
            NoteEvent(
                key_index=index,
                time=self.quantizer.step_time(step),
                duration=self.step_duration,
            )
        )


def parse(
    text: str,
    bpm: float = DEFAULT_BPM,
    time_signature: Union[str, Tuple[int, int], TimeSignature] = "4/4",
    layout: Optional[Layout] = None,
) -> List[NoteEvent]:
    """Parse tablature text into notes; see NotationParser."""
    return NotationParser(layout, bpm, time_signature).parse(text).notes


def create_song_from_notation(
    notation: str,
    title: str,
    bpm: float = DEFAULT_BPM,
    time_signature: Union[str, Tuple[int, int], TimeSignature] = "4/4",
    layout: Optional[Layout] = None,
    artist: str = "Unknown",
    difficulty: Union[str, int, Difficulty, None] = Difficulty.MEDIUM,
    author_tuning: Optional[str] = None,
    song_id: Optional[str] = None,
) -> Song:
    """
    Compile tablature into a playable Song.

    The song lasts until the last note ends plus a short tail.
    """
    parser = NotationParser(layout, bpm, time_signature)
    result = parser.parse(notation)
    extra = {"id": song_id} if song_id else {}
    return Song(
        **extra,
        title=title,
        notes=result.notes,
        bpm=bpm,
        time_signature=parser.quantizer.time_signature,
        artist=artist,
        difficulty=difficulty,
        notation=notation,
        author_tuning=author_tuning,
        author_tine_count=len(parser.layout),
    )
