"""Tests for dither mode tags and filename parsing."""
import numpy as np
import pytest

from spectra6.dither import DitherMode
from spectra6.errors import InputError


def test_mode_values_are_stable():
    assert DitherMode.all() == (0, 1, 2, 3, 4)
    assert DitherMode.name(DitherMode.POP_ART) == "POP_ART"
    assert DitherMode.name(9) == "UNKNOWN(9)"


@pytest.mark.parametrize("text,mode", [
    ("F", DitherMode.FLOYD_STEINBERG),
    ("h", DitherMode.HALFTONE),
    ("O", DitherMode.ORDERED),
    ("p", DitherMode.POP_ART),
    ("N", DitherMode.NONE),
    ("none", DitherMode.NONE),
    ("floyd_steinberg", DitherMode.FLOYD_STEINBERG),
    ("Floyd-Steinberg", DitherMode.FLOYD_STEINBERG),
    ("Pop-Art", DitherMode.POP_ART),
    (" halftone ", DitherMode.HALFTONE),
    ("bayer", DitherMode.ORDERED),
])
def test_parse(text, mode):
    assert DitherMode.parse(text) == mode


@pytest.mark.parametrize("text", ["", "X", "sepia", "floyd steinberg"])
def test_parse_rejects_unknown(text):
    with pytest.raises(InputError):
        DitherMode.parse(text)


def test_tag_round_trip():
    for mode in DitherMode.all():
        assert DitherMode.parse(DitherMode.tag(mode)) == mode
    with pytest.raises(InputError):
        DitherMode.tag(42)


def test_is_valid():
    assert DitherMode.is_valid(DitherMode.ORDERED)
    assert not DitherMode.is_valid(5)
    assert not DitherMode.is_valid(True)
    assert not DitherMode.is_valid("F")


def test_is_valid_numpy_integers():
    assert DitherMode.is_valid(np.int64(DitherMode.ORDERED))
    assert DitherMode.is_valid(np.uint8(0))
    assert not DitherMode.is_valid(np.int64(7))
    assert not DitherMode.is_valid(np.bool_(True))
    assert not DitherMode.is_valid(np.float64(1.0))


@pytest.mark.parametrize("path,mode", [
    ("14_02_F_valentine.png", DitherMode.FLOYD_STEINBERG),
    ("photos/01_12_H_tree.jpg", DitherMode.HALFTONE),
    ("/srv/frames/31_10_o_pumpkin_night.png", DitherMode.ORDERED),
    ("05_05_P_flowers.bmp", DitherMode.POP_ART),
    ("05_05_N_plain.png", DitherMode.NONE),
])
def test_from_filename(path, mode):
    assert DitherMode.from_filename(path) == mode


@pytest.mark.parametrize("path", [
    "holiday.png",
    "1_02_H_short_day.png",
    "ab_02_H_letters.png",
    "14_02_valentine.png",
    "14_02_FS_two_letter_tag.png",
])
def test_from_filename_non_conforming_uses_default(path):
    assert DitherMode.from_filename(path) == DitherMode.FLOYD_STEINBERG
    assert DitherMode.from_filename(path, default=DitherMode.NONE) == DitherMode.NONE


def test_from_filename_unknown_tag():
    with pytest.raises(InputError):
        DitherMode.from_filename("14_02_Z_valentine.png")
