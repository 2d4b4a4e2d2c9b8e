"""Exception types raised by Kalimba Hero."""


class LayoutConfigurationError(ValueError):
    """A layout cannot be built from the given tuning parameters."""


class NoNotesDetectedError(RuntimeError):
    """Automatic transcription produced no playable notes."""
