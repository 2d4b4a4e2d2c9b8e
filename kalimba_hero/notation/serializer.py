"""Notation serializer - render timed key events back into tablature."""

import warnings
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..core import NoteEvent, TimeSignature
from ..core.constants import DEFAULT_BPM, DEFAULT_PRESET
from ..layout import Layout, layout_for_preset
from ..processing import Quantizer

REST = "-"


class NotationSerializer:
    """
    Render NoteEvents as kalimba tablature.

    Notes are bucketed by nearest grid step. Each step becomes one token:
    a bare label, a parenthesized chord, or ``-`` when nothing sounds.
    A new line starts at each measure boundary.
    """

    def __init__(
        self,
        layout: Optional[Layout] = None,
        bpm: float = DEFAULT_BPM,
        time_signature: Union[str, Tuple[int, int], TimeSignature] = "4/4",
    ):
        self.layout = layout if layout is not None else layout_for_preset(DEFAULT_PRESET)
        self.quantizer = Quantizer(bpm, time_signature)

    def serialize(self, notes: Iterable[NoteEvent]) -> str:
        """
        Serialize notes to tab text.

        Args:
            notes: Notes in any order

        Returns:
            Tab text, one measure per line
        """
        buckets: Dict[int, List[str]] = {}
        unlabeled = []

        for note in sorted(notes, key=lambda n: (n.time, n.key_index)):
            label = self.layout.label_for(note.key_index)
            if label is None:
                unlabeled.append(note.key_index)
                continue
            step = self.quantizer.step_index(note.time)
            buckets.setdefault(step, []).append(label)

        if unlabeled:
            warnings.warn(
                f"Skipped {len(unlabeled)} note(s) on keys without a notation label: "
                f"{sorted(set(unlabeled))}"
            )

        if not buckets:
            return ""

        per_line = self.quantizer.time_signature.numerator
        lines = []
        line: List[str] = []
        for step in range(max(buckets) + 1):
            if step and step % per_line == 0:
                lines.append(" ".join(line))
                line = []
            line.append(self._format_step(buckets.get(step)))
        lines.append(" ".join(line))

        return "\n".join(lines)

    @staticmethod
    def _format_step(labels: Optional[List[str]]) -> str:
        if not labels:
            return REST
        if len(labels) == 1:
            return labels[0]
        return "(" + " ".join(labels) + ")"


def serialize(
    notes: Iterable[NoteEvent],
    bpm: float = DEFAULT_BPM,
    time_signature: Union[str, Tuple[int, int], TimeSignature] = "4/4",
    layout: Optional[Layout] = None,
) -> str:
    """Serialize notes to tablature; see NotationSerializer."""
    return NotationSerializer(layout, bpm, time_signature).serialize(notes)
