"""Key and Layout types - the physical tines of a kalimba."""

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..core.constants import OCTAVE_MARKER
from ..core.errors import LayoutConfigurationError

_LABEL_RE = re.compile(r"^([1-7])(" + OCTAVE_MARKER + r"*)$")


def split_label(label: str) -> Optional[Tuple[int, int]]:
    """Split a canonical label like '5°' into (5, 1). None if not addressable."""
    match = _LABEL_RE.match(label)
    if not match:
        return None
    return int(match.group(1)), len(match.group(2))


def make_label(degree: int, markers: int) -> str:
    """Canonical label for a scale degree and octave-marker count."""
    return f"{degree}{OCTAVE_MARKER * markers}"


@dataclass(frozen=True)
class Key:
    """One physical tine."""

    index: int  # Physical position, left to right
    frequency: float  # Hz
    scale_degree: int  # 1-7, 0 if chromatic
    octave_marker: int  # Number of octave glyphs
    display_degree: str  # e.g. "1°"
    display_note: str  # e.g. "C°"
    note_name: str  # e.g. "C5"
    octave: int

    @property
    def is_sharp(self) -> bool:
        return "#" in self.note_name

    @property
    def marker(self) -> str:
        """Octave glyphs as a string ('', '°', '°°')."""
        return OCTAVE_MARKER * self.octave_marker


class Layout:
    """
    Ordered, immutable collection of keys.

    Physical indices are contiguous 0..N-1. The layout also owns the label
    tables used by the notation compiler: (scale degree, marker count) to key
    index, and the inverse. Both are derived from the keys, never authored
    separately.
    """

    def __init__(
        self,
        keys: Sequence[Key],
        name: str = "custom",
        calibrated: bool = False,
    ):
        if not keys:
            raise LayoutConfigurationError("Layout has no keys")

        ordered = tuple(sorted(keys, key=lambda k: k.index))
        indices = [k.index for k in ordered]
        if indices != list(range(len(ordered))):
            raise LayoutConfigurationError(
                f"Layout indices must be contiguous from 0, got {indices}"
            )

        self._keys = ordered
        self.name = name
        self.calibrated = calibrated
        self._label_to_index = self._build_label_lookup(ordered)
        self._index_to_label = {i: make_label(*lbl) for lbl, i in self._label_to_index.items()}

    @staticmethod
    def _build_label_lookup(keys: Sequence[Key]) -> Dict[Tuple[int, int], int]:
        # Collisions (possible in calibrated tables): a key whose scale degree
        # matches the label digit wins; otherwise the later key wins.
        lookup: Dict[Tuple[int, int], int] = {}
        matches: Dict[Tuple[int, int], bool] = {}
        for key in keys:
            label = split_label(key.display_degree)
            if label is None:
                continue
            is_match = key.scale_degree == label[0]
            if label in lookup and matches[label] and not is_match:
                continue
            lookup[label] = key.index
            matches[label] = is_match
        return lookup

    @property
    def keys(self) -> Tuple[Key, ...]:
        return self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Key]:
        return iter(self._keys)

    def __getitem__(self, index: int) -> Key:
        return self._keys[index]

    def __repr__(self) -> str:
        return f"Layout(name={self.name!r}, keys={len(self)})"

    def lookup(self, degree: int, markers: int = 0) -> Optional[int]:
        """Key index for a scale degree and octave-marker count, or None."""
        return self._label_to_index.get((degree, markers))

    def resolve(self, label: str) -> Optional[int]:
        """Key index for a canonical label such as '3°', or None."""
        parts = split_label(label)
        if parts is None:
            return None
        return self.lookup(*parts)

    def label_for(self, index: int) -> Optional[str]:
        """Notation label that resolves back to this key, or None."""
        return self._index_to_label.get(index)

    @property
    def labels(self) -> Dict[str, int]:
        """All addressable labels mapped to key indices."""
        return {make_label(*lbl): i for lbl, i in self._label_to_index.items()}

    def by_pitch(self) -> List[Key]:
        """Keys ordered by ascending frequency."""
        return sorted(self._keys, key=lambda k: k.frequency)

    @property
    def frequency_range(self) -> Tuple[float, float]:
        freqs = [k.frequency for k in self._keys]
        return min(freqs), max(freqs)
