"""
Dither Matrices & Defaults
==========================
Threshold matrices and tuning constants for the dither engine.
"""
import numpy as np

from ..errors import InputError

# =============================================================================
# Floyd-Steinberg Weights (numerators over 16)
# =============================================================================

FS_AHEAD = 7 / 16         # next pixel in scan direction
FS_BELOW_BEHIND = 3 / 16  # row below, one step back
FS_BELOW = 5 / 16         # directly below
FS_BELOW_AHEAD = 1 / 16   # row below, one step ahead

# =============================================================================
# Defaults
# =============================================================================

ORDERED_SIZE = 8          # Bayer matrix size (power of two)
ORDERED_SPREAD = 128.0    # peak-to-peak channel offset applied by the matrix

HALFTONE_CELL = 4         # halftone cell edge in pixels

POP_ART_TILE = 16         # pop-art tile edge in pixels

CHANNEL_MIN = 0
CHANNEL_MAX = 255

# =============================================================================
# Matrix Builders
# =============================================================================

_BAYER_2 = np.array([[0, 2], [3, 1]], dtype=np.int64)


def bayer(size: int) -> np.ndarray:
    """
    Build a Bayer index matrix of the given size.

    Entries are 0..size²-1; each doubling interleaves four copies of
    the previous level.
    """
    if size < 1 or size & (size - 1):
        raise InputError(f"Bayer size must be a power of two, got {size}")
    m = np.zeros((1, 1), dtype=np.int64)
    while m.shape[0] < size:
        m = np.block([
            [4 * m + _BAYER_2[0, 0], 4 * m + _BAYER_2[0, 1]],
            [4 * m + _BAYER_2[1, 0], 4 * m + _BAYER_2[1, 1]],
        ])
    return m


def ordered_offsets(size: int = ORDERED_SIZE, spread: float = ORDERED_SPREAD) -> np.ndarray:
    """Bayer matrix mapped to zero-centred channel offsets in [-spread/2, spread/2)."""
    m = bayer(size)
    return ((m + 0.5) / m.size - 0.5) * spread


def clustered_dot(size: int = HALFTONE_CELL) -> np.ndarray:
    """
    Build a clustered-dot threshold matrix, normalised to (0, 1).

    Positions are ranked by distance from the cell centre (stable on
    row-major order), so the ink dot grows outwards as coverage rises.
    """
    if size < 1:
        raise InputError(f"Halftone cell must be at least 1 pixel, got {size}")
    centre = (size - 1) / 2.0
    ys, xs = np.mgrid[0:size, 0:size]
    dist = (ys - centre) ** 2 + (xs - centre) ** 2
    order = np.argsort(dist.ravel(), kind="stable")
    rank = np.empty(size * size, dtype=np.int64)
    rank[order] = np.arange(size * size)
    return ((rank + 0.5) / (size * size)).reshape(size, size)
