"""
PanelHandle - Pin Assignment and Resolution
===========================================
Immutable description of one physical panel: which board pins it is
wired to, its resolution and BUSY polarity. Passed into the bus and the
driver; nothing about the device lives in module globals.

Defaults match the Waveshare 7.3" (E) HAT on a Raspberry Pi header.
"""
from dataclasses import dataclass

from ..errors import InputError


@dataclass(frozen=True)
class PanelHandle:
    """
    Attributes:
        width: Panel width in pixels
        height: Panel height in pixels
        cs_pin: Chip select pin name on `board` (active low)
        dc_pin: Data/command pin name (low=command, high=data)
        rst_pin: Reset pin name (active low)
        busy_pin: Busy pin name
        sck_pin: SPI clock pin name
        mosi_pin: SPI data pin name
        busy_active_low: True if the controller pulls BUSY low while busy
        baudrate: SPI clock in Hz
    """
    width: int = 800
    height: int = 480
    cs_pin: str = "CE0"
    dc_pin: str = "D25"
    rst_pin: str = "D17"
    busy_pin: str = "D24"
    sck_pin: str = "SCK"
    mosi_pin: str = "MOSI"
    busy_active_low: bool = True
    baudrate: int = 4_000_000

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InputError(f"Panel resolution must be positive, got {self.width}x{self.height}")
        if self.width % 2:
            raise InputError(f"Panel width must be even, got {self.width}")

    @property
    def buffer_size(self) -> int:
        """Bytes in one full frame (two pixels per byte)."""
        return self.width // 2 * self.height

    def contains(self, x: int, y: int, w: int, h: int) -> bool:
        """True if the w x h window at (x, y) lies fully on the panel."""
        return (
            w > 0 and h > 0 and
            x >= 0 and y >= 0 and
            x + w <= self.width and
            y + h <= self.height
        )
