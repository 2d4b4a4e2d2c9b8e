"""Known kalimba hardware configurations."""

from dataclasses import dataclass
from typing import Dict, Optional

from ..core.constants import DEFAULT_PRESET
from .generator import generate_layout
from .key import Layout


@dataclass(frozen=True)
class HardwarePreset:
    """A commercially common kalimba model."""

    id: str
    name: str
    tine_count: int
    default_root: str = "C4"
    calibrated: bool = False
    description: str = ""


HARDWARE_PRESETS: Dict[str, HardwarePreset] = {
    "8": HardwarePreset("8", "Beginner 8 Tines", 8, description="1 octave"),
    "9": HardwarePreset("9", "9 Tines", 9),
    "10": HardwarePreset("10", "10 Tines", 10),
    "13": HardwarePreset("13", "13 Tines", 13),
    "17": HardwarePreset("17", "Standard 17 Tines", 17, description="2 octaves + 2 notes"),
    "21": HardwarePreset(
        "21", "Professional 21 Tines", 21, default_root="F3", calibrated=True,
        description="Includes 4 extra low notes",
    ),
    "34": HardwarePreset(
        "34", "Chromatic 34 Tines", 34, default_root="F3", calibrated=True,
        description="Diatonic lower row plus chromatic upper row",
    ),
}


def get_preset(preset_id: str) -> HardwarePreset:
    """
    Look up a hardware preset by id.

    Raises:
        ValueError: If the preset is unknown
    """
    try:
        return HARDWARE_PRESETS[str(preset_id)]
    except KeyError:
        valid = ", ".join(HARDWARE_PRESETS)
        raise ValueError(f"Unknown hardware preset '{preset_id}'. Valid: {valid}")


def layout_for_preset(
    preset_id: str = DEFAULT_PRESET,
    root_note: Optional[str] = None,
    scale_kind: str = "major",
) -> Layout:
    """Build the layout for a hardware preset, optionally retuned."""
    preset = get_preset(preset_id)
    return generate_layout(
        preset.tine_count,
        root_note=root_note or preset.default_root,
        scale_kind=scale_kind,
        calibrated=preset.calibrated,
    )
