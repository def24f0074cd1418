"""
SPIDevice - Low-Level SPI Communication for the 7IN3E Controller
================================================================
Handles all direct hardware interaction: SPI bus, GPIO pins, timing.

This class encapsulates:
- SPI bus transactions with D/C framing
- GPIO pin management (CS, DC, RST, BUSY)
- Hardware reset pulse
- Busy-wait polling with timeout and cancellation

Separating this from the display driver allows:
- Easier testing (fake pins and bus)
- Cleaner driver code (focus on the command sequence)
"""
import logging
import threading
import time

try:
    from typing import TYPE_CHECKING
    if TYPE_CHECKING:
        from digitalio import DigitalInOut
        from busio import SPI
except ImportError:
    pass

from ..errors import BusyWaitCancelled, HardwareTimeoutError
from .handle import PanelHandle

logger = logging.getLogger(__name__)


class SPIDevice:
    """
    Low-level SPI communication handler for EPD controllers.

    Manages the SPI bus and control pins (CS, DC, RST, BUSY) and
    provides the four primitives the driver is built on: send_command,
    send_data, set_reset_line and read_busy_line.

    Attributes:
        DEFAULT_TIMEOUT: Default busy-wait timeout in seconds
        DEFAULT_POLL_MS: Default delay between BUSY polls
        CHUNK_SIZE: Largest single SPI write (spidev limit on Linux)
    """
    DEFAULT_TIMEOUT = 10.0
    DEFAULT_POLL_MS = 5
    CHUNK_SIZE = 4096

    def __init__(
        self,
        spi: "SPI",
        cs: "DigitalInOut",
        dc: "DigitalInOut",
        rst: "DigitalInOut",
        busy: "DigitalInOut",
        busy_active_low: bool = True,
    ):
        """
        Initialize the SPI device.

        Args:
            spi: Configured SPI bus instance
            cs: Chip Select pin (active low)
            dc: Data/Command pin (low=command, high=data)
            rst: Reset pin (active low)
            busy: Busy status pin
            busy_active_low: True if BUSY reads low while the panel works
        """
        self.spi = spi
        self.cs = cs
        self.dc = dc
        self.rst = rst
        self.busy = busy
        self.busy_active_low = busy_active_low

        self._cmd_buf = bytearray(1)

    @classmethod
    def from_handle(cls, handle: PanelHandle | None = None) -> "SPIDevice":
        """
        Create SPIDevice from the pin names in a PanelHandle.

        Resolves pins through the `board` module and configures the bus
        and GPIO lines.

        Returns:
            Configured SPIDevice instance
        """
        import board
        import busio
        import digitalio

        handle = handle or PanelHandle()

        spi = busio.SPI(getattr(board, handle.sck_pin), MOSI=getattr(board, handle.mosi_pin))
        start = time.monotonic()
        while not spi.try_lock():
            if time.monotonic() - start > 1.0:
                raise RuntimeError("SPI lock timeout during initialization")
        spi.configure(baudrate=handle.baudrate, phase=0, polarity=0)
        spi.unlock()

        cs = digitalio.DigitalInOut(getattr(board, handle.cs_pin))
        cs.direction = digitalio.Direction.OUTPUT
        cs.value = True  # Deselected (active low)

        dc = digitalio.DigitalInOut(getattr(board, handle.dc_pin))
        dc.direction = digitalio.Direction.OUTPUT
        dc.value = True  # Default to data mode

        rst = digitalio.DigitalInOut(getattr(board, handle.rst_pin))
        rst.direction = digitalio.Direction.OUTPUT
        rst.value = True  # Not in reset

        busy = digitalio.DigitalInOut(getattr(board, handle.busy_pin))
        busy.direction = digitalio.Direction.INPUT

        return cls(spi, cs, dc, rst, busy, busy_active_low=handle.busy_active_low)

    def deinit(self):
        """Release all hardware resources."""
        self.spi.deinit()
        self.cs.deinit()
        self.dc.deinit()
        self.rst.deinit()
        self.busy.deinit()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.deinit()
        return False

    # =========================================================================
    # Line Primitives
    # =========================================================================

    def set_reset_line(self, level: bool):
        self.rst.value = bool(level)

    def read_busy_line(self) -> bool:
        """Raw BUSY level."""
        return bool(self.busy.value)

    @property
    def is_busy(self) -> bool:
        """Check if display is currently busy (polarity applied)."""
        level = self.read_busy_line()
        return not level if self.busy_active_low else level

    # =========================================================================
    # Bus Framing
    # =========================================================================

    def _write(self, dc_level: bool, payload):
        while not self.spi.try_lock():
            pass
        try:
            self.dc.value = dc_level
            self.cs.value = False
            view = memoryview(payload)
            for start in range(0, len(view), self.CHUNK_SIZE):
                self.spi.write(view[start:start + self.CHUNK_SIZE])
            self.cs.value = True
        finally:
            self.spi.unlock()

    def send_command(self, cmd: int):
        """Send one command byte (D/C low)."""
        self._cmd_buf[0] = cmd
        self._write(False, self._cmd_buf)

    def send_data(self, data):
        """
        Send data bytes (D/C high).

        Args:
            data: int, tuple/list of ints, or bytes/bytearray/memoryview
        """
        if isinstance(data, int):
            data = bytes((data,))
        elif not isinstance(data, (bytes, bytearray, memoryview)):
            data = bytes(data)
        if len(data):
            self._write(True, data)

    def write_command(self, cmd: int, data=None):
        """
        Send a command and optional data to the display.

        Args:
            cmd: Command byte (0x00-0xFF)
            data: None, int, tuple of ints, or bytes/bytearray
        """
        self.send_command(cmd)
        if data is not None:
            self.send_data(data)

    # =========================================================================
    # Timing
    # =========================================================================

    def hardware_reset(self, high_ms: float = 20.0, low_ms: float = 2.0, recovery_ms: float = 20.0):
        """
        Perform hardware reset via RST pin: high, low, high.

        This is the only way to wake from deep sleep.

        Args:
            high_ms: Settle time with RST released before the pulse
            low_ms: Reset pulse duration
            recovery_ms: Recovery time after releasing RST
        """
        self.set_reset_line(True)
        time.sleep(high_ms / 1000)
        self.set_reset_line(False)
        time.sleep(low_ms / 1000)
        self.set_reset_line(True)
        time.sleep(recovery_ms / 1000)

    def wait_ready(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval_ms: int = DEFAULT_POLL_MS,
        operation: str | None = None,
        cancel: threading.Event | None = None,
    ) -> float:
        """
        Wait for the display to finish processing.

        Polls between checks by waiting on `cancel`, so setting the event
        wakes the wait immediately.

        Args:
            timeout: Maximum wait time in seconds
            poll_interval_ms: Milliseconds between polls
            operation: Optional operation name for messages
            cancel: Optional event that aborts the wait

        Returns:
            Time spent waiting in seconds

        Raises:
            HardwareTimeoutError: If timeout exceeded
            BusyWaitCancelled: If `cancel` was set
        """
        op_str = f" during {operation}" if operation else ""
        start = time.monotonic()
        if not self.is_busy:
            return 0.0

        logger.debug("e-Paper busy%s", op_str)
        interval = poll_interval_ms / 1000
        while self.is_busy:
            if cancel is not None and cancel.is_set():
                raise BusyWaitCancelled(f"EPD busy wait cancelled{op_str}")
            elapsed = time.monotonic() - start
            if elapsed > timeout:
                raise HardwareTimeoutError(f"EPD timeout{op_str} (>{timeout}s)")
            if cancel is not None:
                cancel.wait(interval)
            elif interval > 0:
                time.sleep(interval)

        elapsed = time.monotonic() - start
        logger.debug("e-Paper busy release%s after %.3fs", op_str, elapsed)
        return elapsed
