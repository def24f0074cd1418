"""Tests for Pillow loading, fitting and preview rendering."""
import numpy as np
import pytest
from PIL import Image

from spectra6.errors import InputError
from spectra6.imageio import fit_image, load_image, render_preview, save_preview, save_raw
from spectra6.palette import BLUE, RED, WHITE, code_to_rgb


def test_cover_fills_exact_size():
    img = Image.new("RGB", (300, 100), (255, 0, 0))
    out = fit_image(img, size=(80, 48), fit="cover")
    assert out.size == (80, 48)
    assert out.mode == "RGB"


def test_contain_pads_with_white():
    img = Image.new("RGB", (100, 100), (0, 0, 0))
    out = np.asarray(fit_image(img, size=(80, 40), fit="contain"))
    assert out.shape == (40, 80, 3)
    assert tuple(out[20, 0]) == (255, 255, 255)
    assert out[20, 40].max() <= 1


def test_stretch_ignores_aspect():
    img = Image.new("RGB", (10, 100), (0, 0, 255))
    out = fit_image(img, size=(40, 20), fit="stretch", rotate=False)
    assert out.size == (40, 20)


def test_portrait_rotated_for_landscape_panel():
    img = Image.new("RGB", (20, 40), (255, 255, 255))
    img.putpixel((0, 0), (255, 0, 0))
    out = fit_image(img, size=(40, 20), fit="stretch")
    # ROTATE_90 is counter-clockwise: top-left moves to bottom-left
    assert out.getpixel((0, 19)) == (255, 0, 0)


def test_no_rotation_when_disabled():
    img = Image.new("RGB", (20, 40), (255, 255, 255))
    img.putpixel((0, 0), (255, 0, 0))
    out = fit_image(img, size=(20, 40), fit="stretch", rotate=False)
    assert out.getpixel((0, 0)) == (255, 0, 0)


def test_transparency_flattened_onto_white():
    img = Image.new("RGBA", (4, 4), (255, 0, 0, 0))
    out = np.asarray(fit_image(img, size=(4, 4), fit="stretch"))
    assert (out == 255).all()


@pytest.mark.parametrize("fit,size", [("tile", (8, 8)), ("cover", (0, 8))])
def test_bad_fit_arguments(fit, size):
    with pytest.raises(InputError):
        fit_image(Image.new("RGB", (4, 4)), size=size, fit=fit)


def test_load_image(tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (64, 32), (0, 0, 255)).save(path)
    rgb = load_image(str(path), size=(16, 8))
    assert rgb.shape == (8, 16, 3)
    assert rgb.dtype == np.uint8
    assert np.abs(rgb[4, 8].astype(int) - (0, 0, 255)).max() <= 1


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_image(str(tmp_path / "missing.png"))


def test_preview_uses_palette_colours(tmp_path):
    grid = np.array([[RED, BLUE], [WHITE, RED]], dtype=np.uint8)
    img = render_preview(grid)
    assert img.size == (2, 2)
    assert np.array_equal(np.asarray(img), code_to_rgb(grid))

    path = tmp_path / "preview.png"
    save_preview(grid, str(path))
    with Image.open(path) as reopened:
        assert reopened.convert("RGB").getpixel((1, 0)) == (0, 0, 255)


def test_save_raw(tmp_path):
    path = tmp_path / "frame.bin"
    save_raw(b"\x11\x35", str(path))
    assert path.read_bytes() == b"\x11\x35"
