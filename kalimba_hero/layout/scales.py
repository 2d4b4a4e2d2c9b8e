"""Scale definitions and root-note parsing for layout generation."""

import warnings
from enum import Enum
from typing import Dict, Tuple, Union

from ..core.constants import DEFAULT_ROOT_OCTAVE
from ..core.errors import LayoutConfigurationError
from ..core.note import parse_note_name


class ScaleKind(Enum):
    """Scales a generated layout can be tuned to."""

    MAJOR = "major"
    MINOR = "minor"
    PENTATONIC_MAJOR = "pentatonic_major"
    PENTATONIC_MINOR = "pentatonic_minor"
    CHROMATIC = "chromatic"

    @classmethod
    def parse(cls, value: Union[str, "ScaleKind"]) -> "ScaleKind":
        """
        Resolve a scale name ('major', 'Pentatonic-Minor', ...).

        Raises:
            LayoutConfigurationError: If the scale is unknown
        """
        if isinstance(value, ScaleKind):
            return value
        name = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise LayoutConfigurationError(f"Unknown scale '{value}'. Valid: {valid}")


# (semitones above root, scale degree shown on the tine); degree 0 = accidental
SCALE_STEPS: Dict[ScaleKind, Tuple[Tuple[int, int], ...]] = {
    ScaleKind.MAJOR: ((0, 1), (2, 2), (4, 3), (5, 4), (7, 5), (9, 6), (11, 7)),
    ScaleKind.MINOR: ((0, 1), (2, 2), (3, 3), (5, 4), (7, 5), (8, 6), (10, 7)),
    ScaleKind.PENTATONIC_MAJOR: ((0, 1), (2, 2), (4, 3), (7, 5), (9, 6)),
    ScaleKind.PENTATONIC_MINOR: ((0, 1), (3, 3), (5, 4), (7, 5), (10, 7)),
    ScaleKind.CHROMATIC: (
        (0, 1), (1, 0), (2, 2), (3, 0), (4, 3), (5, 4),
        (6, 0), (7, 5), (8, 0), (9, 6), (10, 0), (11, 7),
    ),
}


def parse_root(root_note: str, root_octave: int = DEFAULT_ROOT_OCTAVE) -> Tuple[int, int]:
    """
    Resolve a root note to (pitch class, octave).

    An octave embedded in the name ('C4') takes precedence over
    ``root_octave``. Unknown names fall back to C with a warning.
    """
    try:
        pitch_class, octave = parse_note_name(root_note, default_octave=root_octave)
    except ValueError:
        warnings.warn(f"Unknown root note '{root_note}', falling back to C")
        return 0, root_octave
    return pitch_class, octave
