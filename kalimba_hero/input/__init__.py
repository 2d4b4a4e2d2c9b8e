"""Input layer - loading recordings from disk."""

from .loader import AudioLoader

__all__ = [
    "AudioLoader",
]
