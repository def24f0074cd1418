"""
DitherEngine - RGB Image to Palette Index Grid
==============================================
Maps an 8-bit RGB image onto the six Spectra 6 inks.

Modes (see DitherMode):
  - NONE:            nearest palette colour per pixel
  - FLOYD_STEINBERG: error diffusion, 7/16 3/16 5/16 1/16
  - ORDERED:         tiled Bayer offsets before matching
  - HALFTONE:        clustered dots sized by cell luminance
  - POP_ART:         one voted colour per tile

All modes are pure: no state survives a call, so independent images
can be quantised on separate threads.
"""
import logging
import numbers

import numpy as np

from ..errors import InputError
from ..palette import (
    PALETTE,
    WHITE,
    luminance,
    nearest_codes,
    nearest_index,
)
from . import matrices as MTX
from .modes import DitherMode

logger = logging.getLogger(__name__)

_INKS = tuple(entry for entry in PALETTE if entry.code != WHITE)
_INK_CODES = np.array([entry.code for entry in _INKS], dtype=np.uint8)
_INK_LUMA = luminance([entry.rgb for entry in _INKS])
# ink colours relative to the white paper
_INK_DIRS = np.array([entry.rgb for entry in _INKS], dtype=np.float64) - 255.0
_PALETTE_RGB = tuple(entry.rgb for entry in PALETTE)
_PALETTE_CODES = tuple(entry.code for entry in PALETTE)


# =============================================================================
# Input Validation
# =============================================================================

def as_rgb_array(image) -> np.ndarray:
    """
    Coerce an image to an H x W x 3 uint8 array.

    Accepts numpy arrays and anything numpy.asarray understands
    (including Pillow RGB images).

    Raises:
        InputError: Wrong shape, zero size, or samples outside 0..255
    """
    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise InputError(f"Image must be H x W x 3 RGB, got shape {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise InputError(f"Image has zero size ({arr.shape[1]}x{arr.shape[0]})")

    if arr.dtype == np.uint8:
        return arr
    if arr.dtype.kind not in "iu":
        raise InputError(f"Image samples must be 8-bit integers, got {arr.dtype}")
    if arr.min() < MTX.CHANNEL_MIN or arr.max() > MTX.CHANNEL_MAX:
        raise InputError("Image samples must be within 0..255")
    return arr.astype(np.uint8)


def _check_size(name: str, value) -> int:
    if not isinstance(value, numbers.Integral) or isinstance(value, bool) or value < 1:
        raise InputError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


# =============================================================================
# Modes
# =============================================================================

def _nearest(rgb: np.ndarray) -> np.ndarray:
    return nearest_codes(rgb)


def _floyd_steinberg(rgb: np.ndarray, serpentine: bool = False) -> np.ndarray:
    """
    Floyd-Steinberg error diffusion.

    Error is kept in two rows of width + 2 accumulators: the current row
    and the one below. The extra column on each side absorbs spill past
    the image edge. Values are clamped to the channel range before
    matching, which bounds each pixel's error to +/-255 per channel.
    """
    h, w, _ = rgb.shape
    out = np.empty((h, w), dtype=np.uint8)
    colours = _PALETTE_RGB
    codes = _PALETTE_CODES
    lo = float(MTX.CHANNEL_MIN)
    hi = float(MTX.CHANNEL_MAX)

    cur = [[0.0, 0.0, 0.0] for _ in range(w + 2)]
    for y in range(h):
        nxt = [[0.0, 0.0, 0.0] for _ in range(w + 2)]
        row = rgb[y].tolist()
        out_row = [0] * w

        reverse = serpentine and y % 2 == 1
        step = -1 if reverse else 1
        xs = range(w - 1, -1, -1) if reverse else range(w)

        for x in xs:
            i = x + 1
            carried = cur[i]
            r, g, b = row[x]
            r = min(max(r + carried[0], lo), hi)
            g = min(max(g + carried[1], lo), hi)
            b = min(max(b + carried[2], lo), hi)

            idx = nearest_index(r, g, b)
            pr, pg, pb = colours[idx]
            out_row[x] = codes[idx]

            er, eg, eb = r - pr, g - pg, b - pb
            if er or eg or eb:
                _diffuse(cur[i + step], er, eg, eb, MTX.FS_AHEAD)
                _diffuse(nxt[i - step], er, eg, eb, MTX.FS_BELOW_BEHIND)
                _diffuse(nxt[i], er, eg, eb, MTX.FS_BELOW)
                _diffuse(nxt[i + step], er, eg, eb, MTX.FS_BELOW_AHEAD)

        out[y] = out_row
        cur = nxt
    return out


def _diffuse(cell: list, er: float, eg: float, eb: float, weight: float):
    cell[0] += er * weight
    cell[1] += eg * weight
    cell[2] += eb * weight


def _ordered(
    rgb: np.ndarray,
    size: int = MTX.ORDERED_SIZE,
    spread: float = MTX.ORDERED_SPREAD,
) -> np.ndarray:
    """Ordered dithering with a tiled Bayer matrix."""
    size = _check_size("size", size)
    h, w, _ = rgb.shape
    offsets = MTX.ordered_offsets(size, float(spread))
    reps = (h // size + 1, w // size + 1)
    tile = np.tile(offsets, reps)[:h, :w]

    perturbed = rgb.astype(np.float64) + tile[..., np.newaxis]
    np.clip(perturbed, MTX.CHANNEL_MIN, MTX.CHANNEL_MAX, out=perturbed)
    return nearest_codes(perturbed)


def _halftone(rgb: np.ndarray, cell_size: int = MTX.HALFTONE_CELL) -> np.ndarray:
    """
    Clustered-dot halftone.

    Each cell picks one ink: the non-white palette colour whose blend
    with white best reproduces the cell mean. Coverage is the cell's
    darkness relative to that ink's, from luminance. Pixels whose
    threshold falls under the coverage get the ink, the rest stay white.
    """
    c = _check_size("cell_size", cell_size)
    h, w, _ = rgb.shape
    ph = -h % c
    pw = -w % c
    padded = np.pad(rgb, ((0, ph), (0, pw), (0, 0)), mode="edge").astype(np.float64)
    rows, cols = padded.shape[0] // c, padded.shape[1] // c

    cells = padded.reshape(rows, c, cols, c, 3)
    means = cells.mean(axis=(1, 3))                     # rows x cols x 3
    cell_luma = luminance(means)

    # least-squares blend amount of each ink over white, and its residual
    rel = means - 255.0
    amount = np.einsum("rck,nk->rcn", rel, _INK_DIRS) / np.einsum("nk,nk->n", _INK_DIRS, _INK_DIRS)
    np.clip(amount, 0.0, 1.0, out=amount)
    resid = rel[..., np.newaxis, :] - amount[..., np.newaxis] * _INK_DIRS
    best = np.argmin(np.einsum("rcnk,rcnk->rcn", resid, resid), axis=-1)
    ink = _INK_CODES[best]

    coverage = np.clip((1.0 - cell_luma) / (1.0 - _INK_LUMA[best]), 0.0, 1.0)

    thresholds = MTX.clustered_dot(c)
    mask = thresholds[np.newaxis, :, np.newaxis, :] < coverage[:, np.newaxis, :, np.newaxis]

    out = np.where(mask, ink[:, np.newaxis, :, np.newaxis], np.uint8(WHITE))
    return out.reshape(rows * c, cols * c)[:h, :w].astype(np.uint8)


def _pop_art(rgb: np.ndarray, tile_size: int = MTX.POP_ART_TILE) -> np.ndarray:
    """
    Poster effect: every tile takes its most frequent palette colour.

    Votes are counted per palette entry in declaration order, so a tie
    goes to the entry declared first.
    """
    tile_size = _check_size("tile_size", tile_size)
    h, w, _ = rgb.shape
    codes = nearest_codes(rgb)
    out = np.empty((h, w), dtype=np.uint8)

    # code -> palette position, for declaration-order voting
    position = np.zeros(8, dtype=np.intp)
    for i, code in enumerate(_PALETTE_CODES):
        position[code] = i

    for y in range(0, h, tile_size):
        for x in range(0, w, tile_size):
            tile = codes[y:y + tile_size, x:x + tile_size]
            votes = np.bincount(position[tile].ravel(), minlength=len(_PALETTE_CODES))
            out[y:y + tile_size, x:x + tile_size] = _PALETTE_CODES[int(np.argmax(votes))]
    return out


_DISPATCH = {
    DitherMode.NONE: (_nearest, ()),
    DitherMode.FLOYD_STEINBERG: (_floyd_steinberg, ("serpentine",)),
    DitherMode.HALFTONE: (_halftone, ("cell_size",)),
    DitherMode.ORDERED: (_ordered, ("size", "spread")),
    DitherMode.POP_ART: (_pop_art, ("tile_size",)),
}


# =============================================================================
# Public API
# =============================================================================

def quantize(image, mode: int, **options) -> np.ndarray:
    """
    Quantise an RGB image to a grid of palette device codes.

    Args:
        image: H x W x 3 uint8 array (or anything numpy.asarray accepts)
        mode: DitherMode value
        **options: Mode tuning
            FLOYD_STEINBERG: serpentine (bool)
            ORDERED: size (power of two), spread (float)
            HALFTONE: cell_size (int)
            POP_ART: tile_size (int)

    Returns:
        H x W uint8 array of device codes

    Raises:
        InputError: Bad image, unknown mode, or unknown/invalid option
    """
    if not DitherMode.is_valid(mode):
        raise InputError(f"Unknown dither mode {mode!r}")
    mode = int(mode)
    func, allowed = _DISPATCH[mode]

    unknown = set(options) - set(allowed)
    if unknown:
        raise InputError(
            f"Option(s) {', '.join(sorted(unknown))} not valid for {DitherMode.name(mode)}"
        )

    rgb = as_rgb_array(image)
    logger.debug(
        "Quantising %dx%d image with %s", rgb.shape[1], rgb.shape[0], DitherMode.name(mode)
    )
    grid = func(rgb, **options)
    return grid
