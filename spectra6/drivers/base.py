"""
DisplayDriver - Abstract Base for EPD Drivers
==============================================
Defines the interface that panel drivers implement.

This allows Canvas and other high-level code to work with any
display without knowing the specific controller details.

Note: Using duck typing instead of ABC, matching the rest of the driver
layer.
"""

try:
    from typing import TYPE_CHECKING
    if TYPE_CHECKING:
        from .state import DriverState
        from ..hardware.handle import PanelHandle
except ImportError:
    pass


class DisplayDriver:
    """
    Abstract base class for e-paper display drivers.

    Subclasses must implement all methods marked as "abstract".

    Properties:
        WIDTH: Default panel width in pixels
        HEIGHT: Default panel height in pixels
        state: Current DriverState
    """

    # Subclasses must define these
    WIDTH: int = 0
    HEIGHT: int = 0

    def reset(self):
        """
        Pulse the reset line.

        Valid whenever no sequence is in flight. Required after power-on,
        after sleep(), and to recover from a hardware timeout.
        """
        raise NotImplementedError

    def initialize(self):
        """Write the controller's register sequence. Exactly once per reset."""
        raise NotImplementedError

    def display(self, data: bytes) -> float:
        """
        Transmit a full frame and refresh.

        Args:
            data: Packed frame (width * height / 2 bytes)

        Returns:
            Refresh time in seconds
        """
        raise NotImplementedError

    def display_region(
        self,
        data: bytes,
        x: int,
        y: int,
        w: int,
        h: int,
    ) -> float:
        """
        Update a rectangular window of the display.

        Args:
            data: Packed window (w/2 * h bytes)
            x: X position (must be even)
            y: Y position
            w: Width (must be even)
            h: Height

        Returns:
            Refresh time in seconds
        """
        raise NotImplementedError

    def draw_blank(self, rows: int, cols: int, color: int, x: int = 0, y: int = 0) -> bytes:
        """
        Fill a rows x cols window with one colour.

        Returns:
            The blank buffer that was transmitted
        """
        raise NotImplementedError

    def clear(self, color: int):
        """Clear display to a solid color."""
        raise NotImplementedError

    def sleep(self):
        """Enter deep sleep mode. Only reset() is valid afterwards."""
        raise NotImplementedError

    def deinit(self):
        """Release hardware resources."""
        raise NotImplementedError

    # Properties

    @property
    def state(self) -> "DriverState":
        """Current driver state."""
        raise NotImplementedError

    @property
    def handle(self) -> "PanelHandle":
        """Pin assignment and resolution of the driven panel."""
        raise NotImplementedError

    @property
    def is_sleeping(self) -> bool:
        """Check if display is in deep sleep."""
        raise NotImplementedError
