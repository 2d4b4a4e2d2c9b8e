"""Global constants for Kalimba Hero."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Tuning reference
A4_FREQUENCY = 440.0
A4_MIDI = 69

# Notation glyphs
OCTAVE_MARKER = "°"
MARKER_SYNONYMS = ("*", "'")
REST_TOKENS = frozenset({"-", "_", "r", "R"})

# Musical defaults
DEFAULT_BPM = 100.0
DEFAULT_TIME_SIGNATURE = (4, 4)
DEFAULT_PRESET = "17"
DEFAULT_ROOT_NOTE = "C"
DEFAULT_ROOT_OCTAVE = 4
SONG_TAIL_SECONDS = 2.0  # silence appended after the last note
CHORD_EPSILON = 1e-6  # seconds

# Pitch matching
DEFAULT_PITCH_TOLERANCE_CENTS = 50.0
RANGE_MARGIN_HZ = 100.0
MIN_PLAUSIBLE_HZ = 50.0
MAX_PLAUSIBLE_HZ = 3200.0

# Gameplay
LEAD_IN_SECONDS = 3.0
DEFAULT_HIT_WINDOW_MS = 150.0
DEFAULT_CLARITY_THRESHOLD = 0.85
DEFAULT_VOLUME_THRESHOLD = 0.003  # RMS

# Audio
SAMPLE_RATE = 22050
