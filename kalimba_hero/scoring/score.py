"""Score keeping - combo multipliers, running score and accuracy."""

import math
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Set, Tuple

from .judgment import HitAccuracy


@dataclass
class ScoringConfig:
    """Game-balance parameters for scoring."""

    tier_values: Dict[HitAccuracy, int] = field(default_factory=lambda: {
        HitAccuracy.PERFECT: 100,
        HitAccuracy.GOOD: 75,
        HitAccuracy.OKAY: 50,
        HitAccuracy.MISS: 0,
    })
    # (minimum combo, multiplier), ascending
    combo_thresholds: Tuple[Tuple[int, float], ...] = (
        (10, 1.5),
        (25, 2.0),
        (50, 3.0),
        (100, 4.0),
    )

    def __post_init__(self):
        combos = [c for c, _ in self.combo_thresholds]
        if combos != sorted(combos):
            raise ValueError("Combo thresholds must be in ascending order")
        missing = set(HitAccuracy) - set(self.tier_values)
        if missing:
            raise ValueError(f"Missing tier values for: {sorted(m.value for m in missing)}")


def combo_multiplier(combo: int, config: Optional[ScoringConfig] = None) -> float:
    """Score multiplier for a combo length; 1 below the first threshold."""
    config = config or ScoringConfig()
    multiplier = 1.0
    for threshold, value in config.combo_thresholds:
        if combo >= threshold:
            multiplier = value
    return multiplier


@dataclass
class ScoreState:
    """Snapshot of a player's score."""

    score: int = 0
    combo: int = 0
    max_combo: int = 0
    perfect: int = 0
    good: int = 0
    okay: int = 0
    miss: int = 0
    accuracy: float = 100.0

    @property
    def judged(self) -> int:
        return self.perfect + self.good + self.okay + self.miss

    def count(self, accuracy: HitAccuracy) -> int:
        return getattr(self, accuracy.value)

    def to_dict(self) -> Dict[str, float]:
        return {
            "score": self.score,
            "combo": self.combo,
            "maxCombo": self.max_combo,
            "perfect": self.perfect,
            "good": self.good,
            "okay": self.okay,
            "miss": self.miss,
            "accuracy": self.accuracy,
        }


class ScoreKeeper:
    """
    Apply judged hits to a ScoreState.

    Each note id is judged at most once; repeats are ignored. Once frozen
    (song over), nothing changes. Safe to call from several threads.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()
        self.lock = threading.Lock()
        self._state = ScoreState()
        self._judged: Set[str] = set()
        self._frozen = False

    @property
    def state(self) -> ScoreState:
        """Copy of the current score."""
        with self.lock:
            return replace(self._state)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_judged(self, note_id: str) -> bool:
        with self.lock:
            return note_id in self._judged

    def freeze(self) -> None:
        with self.lock:
            self._frozen = True

    def register_hit(self, note_id: str, accuracy: HitAccuracy) -> bool:
        """
        Record the judgment for one note.

        Args:
            note_id: Id of the judged note
            accuracy: Tier the hit was classified into

        Returns:
            True if the hit was applied, False if ignored
        """
        with self.lock:
            if self._frozen or note_id in self._judged:
                return False
            self._judged.add(note_id)

            state = self._state
            if accuracy is HitAccuracy.MISS:
                state.combo = 0
            else:
                state.combo += 1
                state.max_combo = max(state.max_combo, state.combo)

            base = self.config.tier_values[accuracy]
            gain = base * combo_multiplier(state.combo, self.config)
            state.score += int(math.floor(gain + 0.5))

            setattr(state, accuracy.value, state.count(accuracy) + 1)
            state.accuracy = self._accuracy(state)
            return True

    def _accuracy(self, state: ScoreState) -> float:
        total = state.judged
        if not total:
            return 100.0
        weighted = sum(state.count(a) * self.config.tier_values[a] for a in HitAccuracy)
        # Percent of the best possible, whatever the top tier is worth
        best = max(self.config.tier_values.values())
        if best <= 0:
            return 0.0
        return 100.0 * weighted / (total * best)


@dataclass(frozen=True)
class Rank:
    grade: str
    label: str
    min_accuracy: float


RANKS = (
    Rank("S+", "LEGENDARY!", 98.0),
    Rank("S", "PERFECT!", 95.0),
    Rank("A", "EXCELLENT!", 90.0),
    Rank("B", "GREAT!", 80.0),
    Rank("C", "GOOD", 70.0),
    Rank("D", "OKAY", 60.0),
    Rank("F", "TRY AGAIN", 0.0),
)

PASSING_ACCURACY = 60.0


def get_rank(accuracy: float) -> Rank:
    """Results-screen rank for an accuracy percentage."""
    for rank in RANKS:
        if accuracy >= rank.min_accuracy:
            return rank
    return RANKS[-1]
