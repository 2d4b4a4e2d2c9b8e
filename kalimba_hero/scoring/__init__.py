"""Scoring layer - judgment and score keeping.

This layer judges player input against the song timeline:
- Timing classification (perfect / good / okay / miss)
- Combo multipliers, running score and accuracy
- The game session state machine and its clock
"""

from .judgment import HitAccuracy, NoteHit, TimingWindows, classify_timing
from .score import (
    PASSING_ACCURACY,
    RANKS,
    Rank,
    ScoreKeeper,
    ScoreState,
    ScoringConfig,
    combo_multiplier,
    get_rank,
)
from .session import GameSession, GameSettings, GameState, PitchSlot

__all__ = [
    "HitAccuracy",
    "NoteHit",
    "TimingWindows",
    "classify_timing",
    "PASSING_ACCURACY",
    "RANKS",
    "Rank",
    "ScoreKeeper",
    "ScoreState",
    "ScoringConfig",
    "combo_multiplier",
    "get_rank",
    "GameSession",
    "GameSettings",
    "GameState",
    "PitchSlot",
]
