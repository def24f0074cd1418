"""
Image I/O - Pillow Loading and Preview Rendering
================================================
Turns image files into the RGB arrays the dither engine consumes, and
index grids back into viewable images.
"""
import logging

import numpy as np
from PIL import Image, ImageOps

from .errors import InputError
from .palette import code_to_rgb

logger = logging.getLogger(__name__)

FIT_MODES = ("cover", "contain", "stretch")

_BACKGROUND = (255, 255, 255)


def _flatten(img: Image.Image) -> Image.Image:
    """Composite transparency onto white and convert to RGB."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
        bg = Image.new("RGB", img.size, _BACKGROUND)
        bg.paste(img, mask=img.split()[3])
        return bg
    return img.convert("RGB")


def fit_image(
    img: Image.Image,
    size: tuple = (800, 480),
    fit: str = "cover",
    rotate: bool = True,
) -> Image.Image:
    """
    Resize an image onto a target canvas.

    Args:
        img: Source image
        size: (width, height) of the result
        fit: "cover" scales and centre-crops, "contain" scales and pads
            with white, "stretch" ignores aspect ratio
        rotate: Turn portrait images to landscape (or the reverse) when
            the target orientation differs

    Returns:
        RGB image of exactly `size`
    """
    if fit not in FIT_MODES:
        raise InputError(f"Unknown fit {fit!r} (expected one of: {', '.join(FIT_MODES)})")
    target_w, target_h = size
    if target_w <= 0 or target_h <= 0:
        raise InputError(f"Target size must be positive, got {target_w}x{target_h}")

    img = _flatten(img)
    w, h = img.size
    if rotate and w != h and target_w != target_h and (w > h) != (target_w > target_h):
        img = img.transpose(Image.Transpose.ROTATE_90)

    resample = Image.Resampling.LANCZOS
    if fit == "stretch":
        return img.resize((target_w, target_h), resample)
    if fit == "contain":
        return ImageOps.pad(img, (target_w, target_h), method=resample, color=_BACKGROUND)
    return ImageOps.fit(img, (target_w, target_h), method=resample)


def load_image(
    path: str,
    size: tuple = (800, 480),
    fit: str = "cover",
    rotate: bool = True,
) -> np.ndarray:
    """
    Open an image file and fit it to the panel.

    Returns:
        H x W x 3 uint8 array

    Raises:
        OSError: If the file cannot be read or decoded
        InputError: On a bad fit mode or size
    """
    with Image.open(path) as img:
        img = ImageOps.exif_transpose(img)
        logger.debug("Loaded %s (%dx%d, %s)", path, img.size[0], img.size[1], img.mode)
        fitted = fit_image(img, size=size, fit=fit, rotate=rotate)
    return np.asarray(fitted, dtype=np.uint8)


def render_preview(grid) -> Image.Image:
    """Render an index grid as an RGB image of the palette colours."""
    return Image.fromarray(code_to_rgb(grid))


def save_preview(grid, path: str) -> None:
    render_preview(grid).save(path)


def save_raw(data: bytes, path: str) -> None:
    """Write a packed frame buffer to disk."""
    with open(path, "wb") as f:
        f.write(data)
