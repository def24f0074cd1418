"""
EPD7in3E - Spectra 6 E-Paper Display Driver
===========================================
Driver for the 7.3" 800x480 six-colour (7IN3E) e-paper controller.

Architecture
------------
This driver uses a layered architecture:
  - SPIDevice: Low-level SPI communication
  - DriverState: Power/command state machine
  - EPD7in3E: Display-specific sequencing

Frame data is 4 bits per pixel, two pixels per byte, written after the
DTM command. The controller has no windowed RAM: a region update
streams a whole frame with the window's bytes in place and a background
colour everywhere else.

Every public operation holds the driver lock for its full duration, so
at most one command/data sequence is ever on the bus. State checks run
before any bus traffic.
"""
import logging
import threading
import time

try:
    from typing import TYPE_CHECKING
    if TYPE_CHECKING:
        from ..hardware.spi import SPIDevice
except ImportError:
    pass

from ..buffer.framebuffer import blank, check_codes, fill_byte
from ..errors import InputError, ProtocolError
from ..hardware.handle import PanelHandle
from ..palette import WHITE
from .base import DisplayDriver
from .state import DriverState, PanelState, RESTING_STATES
from . import commands as CMD
from . import sequences as SEQ

logger = logging.getLogger(__name__)


class EPD7in3E(DisplayDriver):
    """
    Spectra 6 7.3" E-Paper Display Driver.

    Example:
        from spectra6.hardware import SPIDevice
        from spectra6.drivers import EPD7in3E

        with EPD7in3E.create() as epd:
            epd.reset()
            epd.initialize()
            epd.display(buffer)
            epd.sleep()
    """
    WIDTH = 800
    HEIGHT = 480

    def __init__(self, spi: "SPIDevice", handle: PanelHandle | None = None):
        """
        Initialize the driver.

        Args:
            spi: Configured SPIDevice instance
            handle: Panel description (defaults to the 800x480 HAT wiring)
        """
        self._spi = spi
        self._handle = handle or PanelHandle(width=self.WIDTH, height=self.HEIGHT)
        self._state = DriverState()
        self._lock = threading.RLock()
        self.cancel_event = threading.Event()

    @classmethod
    def create(cls, handle: PanelHandle | None = None) -> "EPD7in3E":
        """
        Factory method that creates the driver with board-configured SPI.

        Args:
            handle: Panel description; pins are resolved through `board`

        Returns:
            Configured EPD7in3E instance
        """
        from ..hardware.spi import SPIDevice
        handle = handle or PanelHandle(width=cls.WIDTH, height=cls.HEIGHT)
        spi = SPIDevice.from_handle(handle)
        return cls(spi, handle)

    def deinit(self):
        """
        Put the panel to sleep if it is awake, then release the bus.

        A panel waiting on reset() after a failure is left alone, since
        it may still be busy.
        """
        with self._lock:
            if self._state.needs_reset:
                logger.warning("Releasing bus without sleep: panel needs reset")
            elif self._state.state in (PanelState.RESETTING, PanelState.INITIALIZED):
                self.sleep()
            self._spi.deinit()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.deinit()
        return False

    # =========================================================================
    # Busy Handling
    # =========================================================================

    def _wait(self, timeout: float, operation: str) -> float:
        return self._spi.wait_ready(
            timeout=timeout,
            poll_interval_ms=SEQ.POLL_INTERVAL_MS,
            operation=operation,
            cancel=self.cancel_event,
        )

    # =========================================================================
    # Reset & Initialization
    # =========================================================================

    def reset(self):
        """
        Drive RST high/low/high. Leaves the panel waiting for initialize().

        Also the recovery path after a timeout or a cancelled wait: it
        clears `cancel_event` and the pending-reset flag.
        """
        with self._lock:
            self._state.require(*RESTING_STATES, operation="reset", ignore_fault=True)
            logger.debug("Reset from %r", self._state)
            self.cancel_event.clear()
            self._state.on_reset()
            self._spi.hardware_reset(
                high_ms=SEQ.RESET_HIGH_MS,
                low_ms=SEQ.RESET_LOW_MS,
                recovery_ms=SEQ.RESET_RECOVERY_MS,
            )

    def initialize(self):
        """
        Write the register sequence and power on the charge pumps.

        Raises:
            ProtocolError: If reset() has not just been called
            HardwareTimeoutError: If the controller stays busy; the panel
                remains in RESETTING and needs reset() before a retry
        """
        with self._lock:
            self._state.require(PanelState.RESETTING, operation="initialize")
            try:
                self._wait(SEQ.TIMEOUT_INIT, "reset")
                time.sleep(SEQ.POST_RESET_DELAY)

                for cmd, data in SEQ.INIT_SEQUENCE:
                    if data is None:
                        data = SEQ.resolution_data(self.width, self.height)
                    self._spi.write_command(cmd, data)

                self._spi.write_command(CMD.CMD_POWER_ON)
                self._wait(SEQ.TIMEOUT_POWER, "power on")
            except Exception:
                self._state.on_fault(PanelState.RESETTING)
                raise

            self._state.on_init_complete()
            logger.info("Panel initialized (%dx%d)", self.width, self.height)

    # =========================================================================
    # Frame Transfer
    # =========================================================================

    def _refresh(self) -> float:
        """Power on, refresh, power off. Returns elapsed seconds."""
        start = time.monotonic()
        self._spi.write_command(CMD.CMD_POWER_ON)
        self._wait(SEQ.TIMEOUT_POWER, "power on")

        self._spi.write_command(CMD.CMD_DISPLAY_REFRESH, SEQ.REFRESH_DATA)
        self._wait(SEQ.TIMEOUT_REFRESH, "refresh")

        self._spi.write_command(CMD.CMD_POWER_OFF, SEQ.POWER_OFF_DATA)
        self._wait(SEQ.TIMEOUT_POWER, "power off")
        return time.monotonic() - start

    def _transmit(self, frame) -> float:
        """
        Send a complete frame and refresh, keeping the state machine honest.

        BUSY must be idle before DTM. Any failure leaves the driver
        waiting on reset().
        """
        self._state.on_transmit()
        try:
            self._wait(SEQ.TIMEOUT_POWER, "transmit")
            self._spi.send_command(CMD.CMD_DATA_START)
            self._spi.send_data(frame)

            self._state.on_refresh_start()
            t = self._refresh()
        except Exception:
            self._state.on_fault()
            raise

        self._state.on_refresh_complete()
        logger.info("Refresh complete in %.2fs", t)
        return t

    def display(self, data: bytes) -> float:
        """
        Display a full frame.

        Args:
            data: Packed frame, buffer_size bytes

        Returns:
            Refresh time in seconds

        Raises:
            ProtocolError: If the panel is not initialized
            InputError: If the buffer size is incorrect or a nibble holds
                a reserved code
        """
        with self._lock:
            self._state.require(PanelState.INITIALIZED, operation="display")
            if len(data) != self.buffer_size:
                raise InputError(
                    f"Buffer must be {self.buffer_size} bytes, got {len(data)}"
                )
            check_codes(data)
            return self._transmit(data)

    def display_region(
        self,
        data: bytes,
        x: int,
        y: int,
        w: int,
        h: int,
        background: int = WHITE,
    ) -> float:
        """
        Update a rectangular window.

        The rest of the frame is filled with `background`.

        Raises:
            ProtocolError: Wrong state, window outside the panel, or x/w odd
            InputError: Buffer length not w/2 * h, a reserved code in the
                buffer, or invalid background
        """
        with self._lock:
            self._state.require(PanelState.INITIALIZED, operation="display region")
            if not self._handle.contains(x, y, w, h):
                raise ProtocolError(
                    f"Window {w}x{h}+{x}+{y} exceeds {self.width}x{self.height} panel"
                )
            if x & 1 or w & 1:
                raise ProtocolError("Window x and w must be multiples of 2")

            w_bytes = w // 2
            if len(data) != w_bytes * h:
                raise InputError(f"Region buffer must be {w_bytes * h} bytes, got {len(data)}")
            check_codes(data)

            stride = self.width // 2
            frame = bytearray((fill_byte(background),)) * self.buffer_size
            x_byte = x // 2
            for row in range(h):
                dst = (y + row) * stride + x_byte
                src = row * w_bytes
                frame[dst:dst + w_bytes] = data[src:src + w_bytes]

            logger.debug("Region update %dx%d+%d+%d", w, h, x, y)
            return self._transmit(frame)

    def draw_blank(self, rows: int, cols: int, color: int, x: int = 0, y: int = 0) -> bytes:
        """
        Fill a rows x cols window at (x, y) with one colour.

        Returns:
            The blank buffer that was transmitted
        """
        with self._lock:
            self._state.require(PanelState.INITIALIZED, operation="draw blank")
            data = blank(rows, cols, color)
            self.display_region(data, x, y, cols, rows)
            return data

    def clear(self, color: int = WHITE) -> float:
        """Clear the whole panel to one colour."""
        with self._lock:
            self._state.require(PanelState.INITIALIZED, operation="clear")
            return self._transmit(blank(self.height, self.width, color))

    # =========================================================================
    # Power Management
    # =========================================================================

    def sleep(self):
        """
        Enter deep sleep mode.

        No-op if already sleeping. Only reset() is valid afterwards.
        """
        with self._lock:
            if self._state.is_sleeping:
                return
            self._state.require(
                PanelState.RESETTING, PanelState.INITIALIZED, operation="sleep"
            )
            self._spi.write_command(CMD.CMD_DEEP_SLEEP, SEQ.DEEP_SLEEP_CHECK)
            self._state.on_sleep()
            logger.debug("Panel asleep")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def panel_state(self) -> int:
        return self._state.state

    @property
    def handle(self) -> PanelHandle:
        return self._handle

    @property
    def width(self) -> int:
        return self._handle.width

    @property
    def height(self) -> int:
        return self._handle.height

    @property
    def buffer_size(self) -> int:
        return self._handle.buffer_size

    @property
    def is_sleeping(self) -> bool:
        return self._state.is_sleeping

    @property
    def refresh_count(self) -> int:
        return self._state.refresh_count
