"""Tests for the Canvas pipeline against the recording bus."""
import logging

import numpy as np
import pytest
from PIL import Image

from spectra6 import Canvas, DitherMode
from spectra6.buffer import pack
from spectra6.drivers import commands as CMD
from spectra6.errors import InputError, ProtocolError
from spectra6.palette import BLUE, GREEN, RED


@pytest.fixture
def canvas(ready_driver):
    return Canvas(driver=ready_driver)


def solid(h, w, rgb):
    img = np.empty((h, w, 3), dtype=np.uint8)
    img[:, :] = rgb
    return img


def test_dimensions_follow_driver(canvas):
    assert (canvas.width, canvas.height) == (16, 8)


def test_convert_without_hardware(canvas, random_image, bus):
    data = canvas.convert(random_image[:8, :16])
    assert len(data) == 64
    assert bus.spi.writes == []


def test_show_image(canvas, bus):
    canvas.show_image(solid(8, 16, (255, 0, 0)))
    assert bus.spi.data_for(CMD.CMD_DATA_START) == [b"\x33" * 64]
    assert canvas.driver.refresh_count == 1


def test_show_image_wrong_size_rejected(canvas, bus):
    with pytest.raises(InputError):
        canvas.show_image(solid(4, 4, (255, 0, 0)))
    assert bus.spi.writes == []


def test_show_region(canvas, bus):
    canvas.show_region(solid(2, 4, (0, 255, 0)), x=4, y=3)
    (frame,) = bus.spi.data_for(CMD.CMD_DATA_START)
    row = 3 * 8
    assert frame[row + 2:row + 4] == bytes([GREEN * 0x11] * 2)
    assert frame[:row] == b"\x11" * row


def test_show_region_odd_origin(canvas, bus):
    with pytest.raises(ProtocolError):
        canvas.show_region(solid(2, 4, (0, 255, 0)), x=3, y=0)
    assert bus.spi.writes == []


def test_default_mode_options(ready_driver, random_image):
    canvas = Canvas(driver=ready_driver, mode=DitherMode.ORDERED, spread=0)
    assert np.array_equal(
        canvas.quantize(random_image),
        canvas.quantize(random_image, DitherMode.NONE),
    )


def test_show_file_mode_from_name(canvas, bus, tmp_path, caplog):
    path = tmp_path / "24_12_P_blue.png"
    Image.new("RGB", (64, 32), (0, 0, 255)).save(path)

    with caplog.at_level(logging.INFO, logger="spectra6"):
        canvas.show_file(str(path))

    assert "POP_ART" in caplog.text
    assert bus.spi.data_for(CMD.CMD_DATA_START) == [bytes([BLUE * 0x11]) * 64]


def test_show_file_explicit_mode(canvas, bus, tmp_path, caplog):
    path = tmp_path / "24_12_P_red.png"
    Image.new("RGB", (16, 8), (255, 0, 0)).save(path)

    with caplog.at_level(logging.INFO, logger="spectra6"):
        canvas.show_file(str(path), mode=DitherMode.NONE)

    assert "NONE" in caplog.text
    assert bus.spi.data_for(CMD.CMD_DATA_START) == [pack(np.full((8, 16), RED, dtype=np.uint8))]


def test_clear_and_sleep(canvas, bus):
    canvas.clear(RED)
    canvas.sleep()
    assert bus.spi.commands()[-1] == CMD.CMD_DEEP_SLEEP
    assert canvas.driver.is_sleeping


def test_close_leaves_injected_driver(canvas, bus):
    with canvas:
        pass
    assert not bus.spi.deinited


def test_init_wakes_driver(driver, bus):
    canvas = Canvas(driver=driver)
    canvas.init()
    assert driver.state.is_ready
