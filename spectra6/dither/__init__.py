"""
Dither subsystem - RGB images to palette index grids.

Modules:
    modes: DitherMode tags and filename convention
    matrices: Threshold matrices and tuning defaults
    engine: quantize() and the five strategies
"""
from .modes import DitherMode
from .engine import quantize, as_rgb_array

__all__ = ["DitherMode", "quantize", "as_rgb_array"]
