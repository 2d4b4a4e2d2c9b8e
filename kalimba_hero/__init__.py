"""Kalimba Hero - Kalimba tablature compiler and rhythm-game core.

Architecture Layers:
    1. core/          - Note events, songs, time signatures, constants
    2. layout/        - Key layouts (generated or calibrated) and presets
    3. notation/      - Tablature parser and serializer
    4. processing/    - Grid quantization
    5. analysis/      - Pitch detection and pitch-to-key matching
    6. scoring/       - Timing judgment, score keeping, game session
    7. input/         - Audio loading
    8. transcription/ - Audio or MIDI to key events
    9. playback/      - Kalimba synth
   10. output/        - Export (song JSON, MIDI)
"""

__version__ = "0.1.0"

# Core types
from .core import (
    Difficulty,
    LayoutConfigurationError,
    NoNotesDetectedError,
    NoteEvent,
    Song,
    TimeSignature,
)

# Layout layer
from .layout import Key, Layout, LayoutGenerator, generate_layout, layout_for_preset

# Notation layer
from .notation import (
    NotationParser,
    NotationSerializer,
    ParseResult,
    create_song_from_notation,
    parse,
    serialize,
)

# Processing layer
from .processing import Quantizer

# Analysis layer
from .analysis import DetectedPitch, PitchAnalyzer, PitchMatch, PitchMatcher, find_closest_key

# Scoring layer
from .scoring import (
    GameSession,
    GameSettings,
    GameState,
    HitAccuracy,
    NoteHit,
    ScoreKeeper,
    ScoreState,
    classify_timing,
    get_rank,
)

# Input layer
from .input import AudioLoader

# Transcription layer
from .transcription import AutoTranscriber, LibrosaTranscriber, TranscriptionSettings

# Playback layer
from .playback import AudioEngine

# Output layer
from .output import MIDIExporter, load_song, save_song

__all__ = [
    # Core
    "Difficulty",
    "LayoutConfigurationError",
    "NoNotesDetectedError",
    "NoteEvent",
    "Song",
    "TimeSignature",
    # Layout
    "Key",
    "Layout",
    "LayoutGenerator",
    "generate_layout",
    "layout_for_preset",
    # Notation
    "NotationParser",
    "NotationSerializer",
    "ParseResult",
    "create_song_from_notation",
    "parse",
    "serialize",
    # Processing
    "Quantizer",
    # Analysis
    "DetectedPitch",
    "PitchAnalyzer",
    "PitchMatch",
    "PitchMatcher",
    "find_closest_key",
    # Scoring
    "GameSession",
    "GameSettings",
    "GameState",
    "HitAccuracy",
    "NoteHit",
    "ScoreKeeper",
    "ScoreState",
    "classify_timing",
    "get_rank",
    # Input
    "AudioLoader",
    # Transcription
    "AutoTranscriber",
    "LibrosaTranscriber",
    "TranscriptionSettings",
    # Playback
    "AudioEngine",
    # Output
    "MIDIExporter",
    "load_song",
    "save_song",
]
