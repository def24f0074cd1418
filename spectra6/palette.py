"""
Palette - Spectra 6 Colour Set and Nearest-Colour Matching
==========================================================
The 7IN3E controller knows exactly six inks. Each has a 3-bit device code;
Blue and Green sit at 0x5/0x6 because 0x4 is reserved by the hardware.

Matching uses squared Euclidean distance in RGB. Ties go to the entry
declared first, so results never depend on floating point order.
"""
from typing import NamedTuple

import numpy as np

from .errors import InputError

# =============================================================================
# Device Codes
# =============================================================================

BLACK = 0x0
WHITE = 0x1
YELLOW = 0x2
RED = 0x3
BLUE = 0x5
GREEN = 0x6

_RESERVED_CODES = (0x4, 0x7)


class PaletteEntry(NamedTuple):
    name: str
    rgb: tuple
    code: int


# Declaration order is the tie-break order.
PALETTE = (
    PaletteEntry("black", (0, 0, 0), BLACK),
    PaletteEntry("white", (255, 255, 255), WHITE),
    PaletteEntry("yellow", (255, 255, 0), YELLOW),
    PaletteEntry("red", (255, 0, 0), RED),
    PaletteEntry("blue", (0, 0, 255), BLUE),
    PaletteEntry("green", (0, 255, 0), GREEN),
)

VALID_CODES = tuple(entry.code for entry in PALETTE)

# =============================================================================
# Internal Lookup Tables
# =============================================================================

_BY_CODE = {entry.code: entry for entry in PALETTE}
_BY_NAME = {entry.name: entry for entry in PALETTE}

# code -> RGB, reserved slots left black (never produced by matching)
_CODE_RGB = np.zeros((8, 3), dtype=np.uint8)
for _entry in PALETTE:
    _CODE_RGB[_entry.code] = _entry.rgb
del _entry

_VALID_MASK = np.zeros(256, dtype=bool)
_VALID_MASK[list(VALID_CODES)] = True


def is_valid_code(code: int) -> bool:
    return code in _BY_CODE


def entry_for_code(code: int) -> PaletteEntry:
    """Look up the palette entry for a device code."""
    try:
        return _BY_CODE[code]
    except KeyError:
        raise InputError(f"Invalid palette code 0x{code:X}") from None


def entry_for_name(name: str) -> PaletteEntry:
    """Look up a palette entry by colour name (case-insensitive)."""
    try:
        return _BY_NAME[name.strip().lower()]
    except KeyError:
        names = ", ".join(_BY_NAME)
        raise InputError(f"Unknown colour {name!r} (expected one of: {names})") from None


def valid_mask(codes: np.ndarray) -> np.ndarray:
    """Boolean array, True where `codes` holds a usable device code."""
    codes = np.asarray(codes)
    if codes.dtype.kind not in "iu":
        return np.zeros(codes.shape, dtype=bool)
    in_range = (codes >= 0) & (codes <= 255)
    return in_range & _VALID_MASK[np.where(in_range, codes, 0).astype(np.intp)]


# =============================================================================
# Matching
# =============================================================================

_PALETTE_RGB = tuple(entry.rgb for entry in PALETTE)


def nearest_index(r, g, b) -> int:
    """Index into PALETTE of the closest colour (scalar fast path)."""
    best = 0
    best_dist = None
    for i, (pr, pg, pb) in enumerate(_PALETTE_RGB):
        dist = (r - pr) * (r - pr) + (g - pg) * (g - pg) + (b - pb) * (b - pb)
        if best_dist is None or dist < best_dist:
            best, best_dist = i, dist
    return best


def match(rgb) -> PaletteEntry:
    """
    Return the palette entry closest to an RGB triple.

    Args:
        rgb: (r, g, b) with 0-255 channels

    Returns:
        PaletteEntry with the smallest squared distance; the first
        declared entry wins a tie.
    """
    r, g, b = (float(c) for c in rgb)
    return PALETTE[nearest_index(r, g, b)]


def nearest_codes(pixels, candidates=PALETTE) -> np.ndarray:
    """
    Vectorised nearest-colour match.

    Args:
        pixels: Array of shape (..., 3), any numeric dtype
        candidates: Palette entries to choose from, in tie-break order

    Returns:
        uint8 array of shape (...) holding device codes
    """
    pixels = np.asarray(pixels, dtype=np.float64)
    colours = np.array([e.rgb for e in candidates], dtype=np.float64)
    codes = np.array([e.code for e in candidates], dtype=np.uint8)

    diff = pixels[..., np.newaxis, :] - colours
    dist = np.einsum("...k,...k->...", diff, diff)
    # argmin returns the first minimum: declaration order breaks ties
    return codes[np.argmin(dist, axis=-1)]


def code_to_rgb(codes) -> np.ndarray:
    """Map an array of device codes to uint8 RGB, shape (..., 3)."""
    codes = np.asarray(codes)
    bad = ~valid_mask(codes)
    if bad.any():
        raise InputError(f"Invalid palette code {codes[bad].flat[0]!r}")
    return _CODE_RGB[codes.astype(np.intp)]


def luminance(rgb) -> np.ndarray:
    """Rec.601 luma of RGB values, normalised to 0..1."""
    rgb = np.asarray(rgb, dtype=np.float64)
    return (rgb[..., 0] * 0.299 + rgb[..., 1] * 0.587 + rgb[..., 2] * 0.114) / 255.0
