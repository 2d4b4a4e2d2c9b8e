"""Game session - the clock, the hit zone and the judgment loop.

A pitch producer (audio thread) writes the latest estimate into a
PitchSlot. The game loop calls ``GameSession.tick()`` once per frame;
each tick advances the song clock, judges at most one note against a
new pitch estimate, marks notes that left the hit zone as missed and
finishes the song at its end.
"""

import bisect
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..analysis import DetectedPitch, PitchMatcher, cents_between
from ..core import NoteEvent, Song
from ..core.constants import (
    DEFAULT_CLARITY_THRESHOLD,
    DEFAULT_HIT_WINDOW_MS,
    DEFAULT_PRESET,
    DEFAULT_ROOT_NOTE,
    DEFAULT_VOLUME_THRESHOLD,
    LEAD_IN_SECONDS,
)
from ..layout import Layout, layout_for_preset
from .judgment import HitAccuracy, NoteHit, TimingWindows
from .score import ScoreKeeper, ScoreState, ScoringConfig

# Notes stay visible this long after passing the hit line
_VISIBLE_TAIL_SECONDS = 0.5


class GameState(Enum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass
class GameSettings:
    """Player-adjustable settings."""

    note_speed: int = 5  # 1-10
    hit_window_ms: float = DEFAULT_HIT_WINDOW_MS
    pitch_tolerance_cents: float = 15.0
    audio_latency_ms: float = 0.0
    hardware_preset_id: str = DEFAULT_PRESET
    user_tuning: str = DEFAULT_ROOT_NOTE
    clarity_threshold: float = DEFAULT_CLARITY_THRESHOLD
    volume_threshold: float = DEFAULT_VOLUME_THRESHOLD

    def __post_init__(self):
        if not 1 <= self.note_speed <= 10:
            raise ValueError(f"Note speed must be between 1 and 10, got {self.note_speed}")
        if self.hit_window_ms <= 0:
            raise ValueError(f"Hit window must be positive, got {self.hit_window_ms}")
        if self.pitch_tolerance_cents <= 0:
            raise ValueError(
                f"Pitch tolerance must be positive, got {self.pitch_tolerance_cents}"
            )

    @property
    def lookahead(self) -> float:
        """Seconds of upcoming notes shown: 4 s at speed 1 down to 1 s at 10."""
        return 4 - (self.note_speed - 1) * (3 / 9)

    @property
    def hit_window(self) -> float:
        return self.hit_window_ms / 1000.0

    def layout(self) -> Layout:
        return layout_for_preset(self.hardware_preset_id, root_note=self.user_tuning)


class PitchSlot:
    """
    Latest pitch estimate, shared between producer and game loop.

    Last write wins. Every write bumps a version so the reader can tell a
    fresh estimate from one it has already consumed.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pitch: Optional[DetectedPitch] = None
        self._version = 0

    def write(self, pitch: Optional[DetectedPitch]) -> None:
        with self._lock:
            self._pitch = pitch
            self._version += 1

    def read(self) -> Tuple[Optional[DetectedPitch], int]:
        with self._lock:
            return self._pitch, self._version

    @property
    def version(self) -> int:
        with self._lock:
            return self._version


class GameSession:
    """
    One play-through of a song.

    States: idle -> countdown -> playing <-> paused -> finished. The clock
    starts at ``-lead_in`` so notes at time 0 can be reached; countdown
    turns into playing when the clock passes zero. Judgment runs during
    countdown and playing and is frozen while paused.
    """

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        layout: Optional[Layout] = None,
        scoring: Optional[ScoringConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        lead_in: float = LEAD_IN_SECONDS,
    ):
        """
        Initialize GameSession.

        Args:
            settings: Game settings (defaults apply if None)
            layout: Keys to judge against (default: from settings)
            scoring: Scoring parameters
            clock: Monotonic time source in seconds
            lead_in: Seconds between start and song time 0
        """
        self.settings = settings or GameSettings()
        self.layout = layout if layout is not None else self.settings.layout()
        self.scoring = scoring or ScoringConfig()
        self.lead_in = lead_in
        self.pitch_slot = PitchSlot()
        self.matcher = PitchMatcher(
            self.layout,
            tolerance_cents=self.settings.pitch_tolerance_cents,
            clarity_threshold=self.settings.clarity_threshold,
            volume_threshold=self.settings.volume_threshold,
        )
        self.windows = TimingWindows(self.settings.hit_window_ms)

        self._time_fn = clock
        self.state = GameState.IDLE
        self.song: Optional[Song] = None
        self.progress = 0.0
        self.keeper = ScoreKeeper(self.scoring)
        self.hits: List[NoteHit] = []

        self._anchor = 0.0
        self._paused_at: Optional[float] = None
        self._resume_state = GameState.PLAYING
        self._note_times: List[float] = []
        self._miss_index = 0
        self._seen_version = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, song: Song) -> None:
        """Begin a song from the countdown with a fresh score."""
        self.song = song
        self.state = GameState.COUNTDOWN
        self.progress = -self.lead_in
        self.keeper = ScoreKeeper(self.scoring)
        self.hits = []
        self._anchor = self._time_fn()
        self._paused_at = None
        self._note_times = [n.time for n in song.notes]
        self._miss_index = 0
        # Estimates written before the start are stale
        self._seen_version = self.pitch_slot.version

    def pause(self) -> None:
        if self.state in (GameState.COUNTDOWN, GameState.PLAYING):
            self._resume_state = self.state
            self.state = GameState.PAUSED
            self._paused_at = self._time_fn()

    def resume(self) -> None:
        if self.state is GameState.PAUSED:
            self._anchor += self._time_fn() - self._paused_at
            self._paused_at = None
            self.state = self._resume_state
            self._seen_version = self.pitch_slot.version

    def end(self) -> None:
        """Finish the song; the score is frozen."""
        if self.state is not GameState.IDLE:
            self.state = GameState.FINISHED
            self.keeper.freeze()

    def reset(self) -> None:
        """Back to idle with no song and an empty score."""
        self.state = GameState.IDLE
        self.song = None
        self.progress = 0.0
        self.keeper = ScoreKeeper(self.scoring)
        self.hits = []
        self._paused_at = None
        self._note_times = []
        self._miss_index = 0

    @property
    def score(self) -> ScoreState:
        return self.keeper.state

    @property
    def is_active(self) -> bool:
        return self.state in (GameState.COUNTDOWN, GameState.PLAYING)

    # ------------------------------------------------------------------
    # Game loop
    # ------------------------------------------------------------------
    def tick(self) -> List[NoteHit]:
        """
        Advance one frame.

        Returns:
            Judgments made during this frame (hits and misses)
        """
        if not self.is_active or self.song is None:
            return []

        self.progress = self._time_fn() - self._anchor - self.lead_in
        if self.state is GameState.COUNTDOWN and self.progress >= 0:
            self.state = GameState.PLAYING

        judged = []

        pitch, version = self.pitch_slot.read()
        if version != self._seen_version:
            self._seen_version = version
            if pitch is not None:
                hit = self.judge_pitch(pitch)
                if hit is not None:
                    judged.append(hit)

        judged.extend(self.sweep_misses())

        if self.progress >= self.song.duration:
            self.end()

        return judged

    @property
    def input_time(self) -> float:
        """Song time at which the sound now being heard was played."""
        return self.progress - self.settings.audio_latency_ms / 1000.0

    def hit_zone_notes(self) -> List[NoteEvent]:
        """Unjudged notes within the hit window of the current input time."""
        if self.song is None:
            return []
        now = self.input_time
        window = self.settings.hit_window
        lo = bisect.bisect_left(self._note_times, now - window)
        hi = bisect.bisect_right(self._note_times, now + window)
        return [n for n in self.song.notes[lo:hi] if not self.keeper.is_judged(n.id)]

    def visible_notes(self) -> List[NoteEvent]:
        """Unjudged notes on screen for the current note speed."""
        if self.song is None:
            return []
        lo = bisect.bisect_left(self._note_times, self.progress - _VISIBLE_TAIL_SECONDS)
        hi = bisect.bisect_right(self._note_times, self.progress + self.settings.lookahead)
        return [n for n in self.song.notes[lo:hi] if not self.keeper.is_judged(n.id)]

    def judge_pitch(self, pitch: DetectedPitch) -> Optional[NoteHit]:
        """
        Judge one pitch estimate against the hit zone.

        At most one note is judged per estimate: the earliest hit-zone note
        whose key is within the pitch tolerance.
        """
        if not self.is_active or not self.matcher.accepts(pitch):
            return None

        now = self.input_time
        for note in self.hit_zone_notes():
            if note.key_index >= len(self.layout):
                continue
            cents = cents_between(pitch.frequency, self.layout[note.key_index].frequency)
            if abs(cents) > self.settings.pitch_tolerance_cents:
                continue

            delta_ms = (now - note.time) * 1000.0
            hit = NoteHit(
                note_id=note.id,
                accuracy=self.windows.classify(delta_ms),
                time_delta=delta_ms,
                key_index=note.key_index,
                cents_delta=cents,
            )
            self._record(hit)
            return hit

        return None

    def sweep_misses(self) -> List[NoteHit]:
        """Mark unjudged notes that have left the hit zone as missed."""
        if self.song is None:
            return []

        now = self.input_time
        window = self.settings.hit_window
        missed = []
        notes = self.song.notes
        while self._miss_index < len(notes) and now - notes[self._miss_index].time > window:
            note = notes[self._miss_index]
            self._miss_index += 1
            if self.keeper.is_judged(note.id):
                continue
            hit = NoteHit(
                note_id=note.id,
                accuracy=HitAccuracy.MISS,
                time_delta=(now - note.time) * 1000.0,
                key_index=note.key_index,
            )
            self._record(hit)
            missed.append(hit)
        return missed

    def _record(self, hit: NoteHit) -> None:
        if self.keeper.register_hit(hit.note_id, hit.accuracy):
            self.hits.append(hit)
