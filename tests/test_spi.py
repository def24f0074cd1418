"""Tests for SPI framing, the reset pulse and busy waits."""
import threading

import pytest

from spectra6.errors import BusyWaitCancelled, HardwareTimeoutError
from spectra6.hardware import SPIDevice

from conftest import FakePin


def test_command_sent_with_dc_low(spi_device, bus):
    spi_device.send_command(0x12)
    assert bus.spi.writes == [(False, b"\x12")]
    # CS asserted for the transfer and released afterwards
    assert bus.cs.history == [False, True]
    assert not bus.spi.locked


def test_data_sent_with_dc_high(spi_device, bus):
    spi_device.send_data(0xA5)
    spi_device.send_data((0x01, 0x02))
    spi_device.send_data(b"\x03\x04")
    assert bus.spi.writes == [(True, b"\xa5"), (True, b"\x01\x02"), (True, b"\x03\x04")]


def test_empty_data_writes_nothing(spi_device, bus):
    spi_device.send_data(b"")
    assert bus.spi.writes == []


def test_write_command_frames(spi_device, bus):
    spi_device.write_command(0x61, (0x03, 0x20, 0x01, 0xE0))
    spi_device.write_command(0x04)
    assert bus.spi.frames() == [(0x61, b"\x03\x20\x01\xe0"), (0x04, b"")]


def test_large_payload_is_chunked(spi_device, bus):
    payload = bytes(range(256)) * 20  # 5120 bytes
    spi_device.send_data(payload)
    sizes = [len(chunk) for _, chunk in bus.spi.writes]
    assert sizes == [SPIDevice.CHUNK_SIZE, len(payload) - SPIDevice.CHUNK_SIZE]
    assert b"".join(chunk for _, chunk in bus.spi.writes) == payload
    # one CS frame around all chunks
    assert bus.cs.history == [False, True]


def test_reset_pulse_sequence(spi_device, bus):
    spi_device.hardware_reset(high_ms=0, low_ms=0, recovery_ms=0)
    assert bus.rst.history == [True, False, True]


def test_busy_polarity(bus):
    bus.busy.arm(1)
    low = SPIDevice(bus.spi, bus.cs, bus.dc, bus.rst, bus.busy, busy_active_low=True)
    assert low.read_busy_line() is False
    assert low.is_busy is False  # the arm() poll was consumed above

    high_pin = FakePin(True)
    high = SPIDevice(bus.spi, bus.cs, bus.dc, bus.rst, high_pin, busy_active_low=False)
    assert high.is_busy
    high_pin.value = False
    assert not high.is_busy


def test_wait_ready_not_busy_returns_immediately(spi_device, bus):
    assert spi_device.wait_ready(timeout=0.1) == 0.0
    assert bus.busy.reads == 1


def test_wait_ready_polls_until_released(spi_device, bus):
    bus.busy.arm(3)
    elapsed = spi_device.wait_ready(timeout=1.0, poll_interval_ms=1)
    assert elapsed >= 0.0
    assert bus.busy.busy_polls == 0
    assert bus.busy.reads == 4


def test_wait_ready_times_out(spi_device, bus):
    bus.busy.stuck = True
    with pytest.raises(HardwareTimeoutError, match="refresh"):
        spi_device.wait_ready(timeout=0.05, poll_interval_ms=1, operation="refresh")


def test_timeout_is_a_timeout_error(spi_device, bus):
    bus.busy.stuck = True
    with pytest.raises(TimeoutError):
        spi_device.wait_ready(timeout=0.01, poll_interval_ms=1)


def test_wait_ready_cancelled(spi_device, bus):
    bus.busy.stuck = True
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(BusyWaitCancelled):
        spi_device.wait_ready(timeout=5.0, cancel=cancel)


def test_wait_ready_cancelled_from_other_thread(spi_device, bus):
    bus.busy.stuck = True
    cancel = threading.Event()
    timer = threading.Timer(0.05, cancel.set)
    timer.start()
    try:
        with pytest.raises(BusyWaitCancelled):
            spi_device.wait_ready(timeout=5.0, poll_interval_ms=10, cancel=cancel)
    finally:
        timer.cancel()


def test_deinit_releases_everything(spi_device, bus):
    with spi_device:
        pass
    assert bus.spi.deinited
    assert bus.cs.deinited and bus.dc.deinited and bus.rst.deinited and bus.busy.deinited
