"""Layout layer - the instrument's keys.

Derives the ordered set of playable keys (pitch, physical position,
display label) from tuning parameters or from a calibrated table.
"""

from .key import Key, Layout, make_label, split_label
from .scales import ScaleKind, SCALE_STEPS
from .generator import LayoutGenerator, generate_layout, center_out_positions
from .tables import FIXED_TABLES, build_fixed_layout
from .presets import HardwarePreset, HARDWARE_PRESETS, get_preset, layout_for_preset

__all__ = [
    "Key",
    "Layout",
    "make_label",
    "split_label",
    "ScaleKind",
    "SCALE_STEPS",
    "LayoutGenerator",
    "generate_layout",
    "center_out_positions",
    "FIXED_TABLES",
    "build_fixed_layout",
    "HardwarePreset",
    "HARDWARE_PRESETS",
    "get_preset",
    "layout_for_preset",
]
