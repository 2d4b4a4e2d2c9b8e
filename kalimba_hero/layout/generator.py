"""Layout generation - derive a full key table from tuning parameters."""

from typing import List, Union

from ..core.constants import DEFAULT_ROOT_NOTE, DEFAULT_ROOT_OCTAVE, OCTAVE_MARKER, PITCH_NAMES
from ..core.errors import LayoutConfigurationError
from ..core.note import midi_to_freq, midi_to_note_name, note_to_midi
from .key import Key, Layout, make_label
from .scales import SCALE_STEPS, ScaleKind, parse_root
from .tables import FIXED_TABLES, build_fixed_layout


def center_out_positions(count: int) -> List[int]:
    """
    Physical position of each ascending scale step.

    Step 0 sits in the center; odd steps extend the block to the left and
    even steps to the right, so pitch rises from the middle outwards.
    """
    center = count // 2
    positions = []
    for step in range(count):
        if step == 0:
            positions.append(center)
        elif step % 2:
            positions.append(center - (step + 1) // 2)
        else:
            positions.append(center + step // 2)
    return positions


class LayoutGenerator:
    """Generate kalimba layouts for a tuning."""

    def __init__(
        self,
        root_note: str = DEFAULT_ROOT_NOTE,
        scale_kind: Union[str, ScaleKind] = ScaleKind.MAJOR,
        root_octave: int = DEFAULT_ROOT_OCTAVE,
        calibrated: bool = True,
    ):
        """
        Initialize LayoutGenerator.

        Args:
            root_note: Root note name ('C', 'F#', 'Bb' or with octave, 'C4')
            scale_kind: Scale name or ScaleKind
            root_octave: Octave of the root when the name carries none
            calibrated: Use hand-calibrated tables where one exists
        """
        self.scale_kind = ScaleKind.parse(scale_kind)
        self.root_pitch_class, self.root_octave = parse_root(root_note, root_octave)
        self.calibrated = calibrated

    @property
    def root_midi(self) -> int:
        return note_to_midi(self.root_pitch_class, self.root_octave)

    def generate(self, tine_count: int) -> Layout:
        """
        Build the layout for an instrument with ``tine_count`` tines.

        Raises:
            LayoutConfigurationError: If tine_count is not positive
        """
        if tine_count < 1:
            raise LayoutConfigurationError(f"Tine count must be positive, got {tine_count}")

        if self.calibrated and tine_count in FIXED_TABLES:
            return build_fixed_layout(tine_count)

        steps = SCALE_STEPS[self.scale_kind]
        positions = center_out_positions(tine_count)
        keys = []

        for i in range(tine_count):
            octave_shift, step_in_scale = divmod(i, len(steps))
            semitones, degree = steps[step_in_scale]
            midi = self.root_midi + semitones + 12 * octave_shift
            keys.append(self._make_key(positions[i], midi, degree, octave_shift, step_in_scale))

        name = f"{tine_count}-key {PITCH_NAMES[self.root_pitch_class]} {self.scale_kind.value}"
        return Layout(keys, name=name)

    def _make_key(
        self, position: int, midi: int, degree: int, markers: int, step_in_scale: int
    ) -> Key:
        pitch_name = PITCH_NAMES[midi % 12]
        if degree:
            display_degree = make_label(degree, markers)
        else:
            # Accidental between two scale tones: label as the raised lower degree
            lower = SCALE_STEPS[self.scale_kind][step_in_scale - 1][1]
            display_degree = f"#{lower}{OCTAVE_MARKER * markers}"

        return Key(
            index=position,
            frequency=midi_to_freq(midi),
            scale_degree=degree,
            octave_marker=markers,
            display_degree=display_degree,
            display_note=f"{pitch_name}{OCTAVE_MARKER * markers}",
            note_name=midi_to_note_name(midi),
            octave=midi // 12 - 1,
        )


def generate_layout(
    tine_count: int,
    root_note: str = DEFAULT_ROOT_NOTE,
    scale_kind: Union[str, ScaleKind] = ScaleKind.MAJOR,
    root_octave: int = DEFAULT_ROOT_OCTAVE,
    calibrated: bool = True,
) -> Layout:
    """Generate a layout; see LayoutGenerator."""
    generator = LayoutGenerator(
        root_note=root_note,
        scale_kind=scale_kind,
        root_octave=root_octave,
        calibrated=calibrated,
    )
    return generator.generate(tine_count)
