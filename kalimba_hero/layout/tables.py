"""Hand-calibrated key tables for specific instruments.

These instruments do not follow the center-outward formula, so their keys
are listed verbatim, left to right. Rows are
(physical position, scale degree, note name, octave, display degree,
display note). Frequencies are the 12-TET targets for the named notes.

The 21-key table was measured on a real instrument. Some B tines read
between Bb and B (and one 7-labelled tine read close to C), but the tines
are engraved as B, so the table keeps B as the target and the tuner
reports the deviation.
"""

from typing import Dict, List, Tuple

from ..core.note import note_frequency
from .key import Key, Layout, split_label

KeyRow = Tuple[int, int, str, int, str, str]

KALIMBA_21_ROWS: List[KeyRow] = [
    # Left side, outer to inner
    (0, 6, "D", 6, "2°°", "D°°"),
    (1, 7, "B", 5, "7°", "B°"),
    (2, 5, "G", 5, "5°", "G°"),
    (3, 3, "E", 5, "3°", "E°"),
    (4, 1, "C", 5, "1°", "C°"),
    (5, 6, "A", 4, "6", "A"),
    (6, 4, "F", 4, "4", "F"),
    (7, 2, "D", 4, "2", "D"),
    (8, 7, "B", 3, "7", "B"),
    (9, 5, "G", 3, "5", "G"),
    # Center
    (10, 4, "F", 3, "1", "F"),
    # Right side, inner to outer
    (11, 6, "A", 3, "6", "A"),
    (12, 1, "C", 4, "1", "C"),
    (13, 3, "E", 4, "3", "E"),
    (14, 5, "G", 4, "5", "G"),
    (15, 7, "B", 4, "7", "B"),
    (16, 2, "D", 5, "2°", "D°"),
    (17, 4, "F", 5, "4°", "F°"),
    (18, 6, "A", 5, "6°", "A°"),
    (19, 1, "C", 6, "1°°", "C°°"),
    (20, 3, "E", 6, "3°°", "E°°"),
]

# Upper chromatic row of the 34-key dual-layer instrument, lowest in the
# middle. Accidentals carry scale degree 0 and are not reachable from tabs.
KALIMBA_34_UPPER_ROWS: List[KeyRow] = [
    (21, 0, "G#", 5, "#5°", "G#°"),
    (22, 0, "D#", 5, "#2°", "D#°"),
    (23, 0, "A#", 4, "#6", "A#"),
    (24, 0, "F#", 4, "#4", "F#"),
    (25, 0, "C#", 4, "#1", "C#"),
    (26, 0, "G#", 3, "#5", "G#"),
    (27, 0, "F#", 3, "#4", "F#"),
    (28, 0, "A#", 3, "#6", "A#"),
    (29, 0, "D#", 4, "#2", "D#"),
    (30, 0, "G#", 4, "#5", "G#"),
    (31, 0, "C#", 5, "#1°", "C#°"),
    (32, 0, "F#", 5, "#4°", "F#°"),
    (33, 0, "A#", 5, "#6°", "A#°"),
]

FIXED_TABLES: Dict[int, List[KeyRow]] = {
    21: KALIMBA_21_ROWS,
    34: KALIMBA_21_ROWS + KALIMBA_34_UPPER_ROWS,
}


def _marker_count(display_degree: str) -> int:
    parts = split_label(display_degree)
    if parts is not None:
        return parts[1]
    return display_degree.count("°")


def build_fixed_layout(tine_count: int) -> Layout:
    """
    Build the calibrated layout for a tine count.

    Raises:
        KeyError: If no calibrated table exists for this count
    """
    rows = FIXED_TABLES[tine_count]
    keys = [
        Key(
            index=position,
            frequency=note_frequency(name, octave),
            scale_degree=degree,
            octave_marker=_marker_count(display_degree),
            display_degree=display_degree,
            display_note=display_note,
            note_name=f"{name}{octave}",
            octave=octave,
        )
        for position, degree, name, octave, display_degree, display_note in rows
    ]
    return Layout(keys, name=f"{tine_count}-key calibrated", calibrated=True)
