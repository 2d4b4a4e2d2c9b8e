"""Processing layer - Note-level post-processing.

This layer refines note timing:
- Quantization (snap to the notation grid)
"""

from .quantize import Quantizer

__all__ = [
    "Quantizer",
]
