"""Shared fixtures: fake GPIO pins and a recording SPI bus."""
import numpy as np
import pytest

from spectra6.drivers import EPD7in3E
from spectra6.hardware import PanelHandle, SPIDevice


class FakePin:
    """Stand-in for digitalio.DigitalInOut."""

    def __init__(self, value=True):
        self.value = value
        self.history = []
        self.deinited = False

    def __setattr__(self, name, value):
        if name == "value" and "history" in self.__dict__:
            self.history.append(value)
        super().__setattr__(name, value)

    def deinit(self):
        self.deinited = True


class FakeBusyPin:
    """
    BUSY input for an active-low controller.

    Reads low (busy) for `busy_polls` reads after each arm(), then high.
    With stuck=True it never releases.
    """

    def __init__(self):
        self.busy_polls = 0
        self.stuck = False
        self.reads = 0
        self.deinited = False

    def arm(self, polls: int):
        self.busy_polls = polls

    @property
    def value(self):
        self.reads += 1
        if self.stuck:
            return False
        if self.busy_polls > 0:
            self.busy_polls -= 1
            return False
        return True

    def deinit(self):
        self.deinited = True


class FakeSPI:
    """Records every write together with the D/C level at the time."""

    def __init__(self, dc: FakePin):
        self._dc = dc
        self.writes = []
        self.locked = False
        self.deinited = False

    def try_lock(self):
        if self.locked:
            return False
        self.locked = True
        return True

    def unlock(self):
        self.locked = False

    def configure(self, **kwargs):
        pass

    def write(self, buf):
        self.writes.append((bool(self._dc.value), bytes(buf)))

    def deinit(self):
        self.deinited = True

    # --- helpers for assertions ---

    def frames(self):
        """Merge consecutive data writes: [(cmd, data_bytes), ...]."""
        out = []
        for is_data, payload in self.writes:
            if not is_data:
                for b in payload:
                    out.append([b, bytearray()])
            elif out:
                out[-1][1].extend(payload)
        return [(cmd, bytes(data)) for cmd, data in out]

    def commands(self):
        return [cmd for cmd, _ in self.frames()]

    def data_for(self, cmd):
        return [data for c, data in self.frames() if c == cmd]

    def clear(self):
        self.writes.clear()


class FakeBus:
    def __init__(self):
        self.cs = FakePin(True)
        self.dc = FakePin(True)
        self.rst = FakePin(True)
        self.busy = FakeBusyPin()
        self.spi = FakeSPI(self.dc)


@pytest.fixture
def bus():
    return FakeBus()


@pytest.fixture
def spi_device(bus):
    return SPIDevice(bus.spi, bus.cs, bus.dc, bus.rst, bus.busy, busy_active_low=True)


@pytest.fixture
def small_handle():
    return PanelHandle(width=16, height=8)


@pytest.fixture
def driver(spi_device, small_handle):
    return EPD7in3E(spi_device, small_handle)


@pytest.fixture
def ready_driver(driver, bus):
    driver.reset()
    driver.initialize()
    bus.spi.clear()
    return driver


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_image(rng):
    return rng.integers(0, 256, size=(24, 32, 3), dtype=np.uint8)
