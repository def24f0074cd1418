"""
Canvas - High-Level Image-to-Panel Interface
============================================
Unified interface combining the dither engine, the packer and the
display driver.

This is the primary entry point for most users. It provides:
- Image conversion (quantise + pack) without touching hardware
- Full and region updates from RGB images or files
- Power management (sleep, close)
- Dependency injection for testing and customization

Usage:
    # Simple (auto-creates the driver from board pins)
    from spectra6 import Canvas

    with Canvas() as canvas:
        canvas.init()
        canvas.show_file("24_12_F_tree.jpg")
        canvas.sleep()

    # With dependency injection
    from spectra6.hardware import SPIDevice, PanelHandle
    from spectra6.drivers import EPD7in3E

    spi = SPIDevice.from_handle(PanelHandle())
    canvas = Canvas(driver=EPD7in3E(spi))
"""
import logging

try:
    from typing import TYPE_CHECKING
    if TYPE_CHECKING:
        from .drivers.base import DisplayDriver
except ImportError:
    pass

from .buffer import pack
from .dither import DitherMode, quantize
from .imageio import load_image
from .palette import WHITE

__all__ = ["Canvas"]

logger = logging.getLogger(__name__)


class Canvas:
    """
    High-level image pipeline and panel interface.

    Conversion (convert, quantize) is pure and may run on any thread;
    panel operations go through the driver, which serialises bus access.
    """

    def __init__(
        self,
        driver: "DisplayDriver | None" = None,
        mode: int = DitherMode.FLOYD_STEINBERG,
        fit: str = "cover",
        **dither_options,
    ):
        """
        Initialize Canvas.

        Args:
            driver: Display driver instance. If None, creates EPD7in3E.
            mode: Default DitherMode for conversions.
            fit: Default fit when loading files ("cover", "contain", "stretch").
            **dither_options: Default options passed to quantize().
        """
        if driver is None:
            from .drivers.epd7in3e import EPD7in3E
            self._driver = EPD7in3E.create()
            self._owns_driver = True
        else:
            self._driver = driver
            self._owns_driver = False

        self.mode = mode
        self.fit = fit
        self.dither_options = dither_options
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
        return False

    def close(self):
        """Release hardware resources if this canvas created the driver."""
        if not self._closed:
            if self._owns_driver:
                self._driver.deinit()
            self._closed = True

    def init(self):
        """Reset and initialize the panel."""
        self._driver.reset()
        self._driver.initialize()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def width(self) -> int:
        return self._driver.handle.width

    @property
    def height(self) -> int:
        return self._driver.handle.height

    @property
    def driver(self) -> "DisplayDriver":
        """Access underlying display driver."""
        return self._driver

    # =========================================================================
    # Conversion (no hardware)
    # =========================================================================

    def quantize(self, image, mode: int | None = None):
        """Quantise an RGB image with the canvas defaults."""
        mode = self.mode if mode is None else mode
        options = self.dither_options if mode == self.mode else {}
        return quantize(image, mode, **options)

    def convert(self, image, mode: int | None = None) -> bytes:
        """Quantise and pack an RGB image into controller bytes."""
        return pack(self.quantize(image, mode))

    def load(self, path: str):
        """Load a file fitted to the panel resolution."""
        return load_image(path, size=(self.width, self.height), fit=self.fit)

    # =========================================================================
    # Display Updates
    # =========================================================================

    def show_image(self, image, mode: int | None = None) -> float:
        """
        Convert a full-panel image and display it.

        The frame is fully packed before any bus traffic, so a bad image
        never reaches the panel.

        Returns:
            Refresh time in seconds
        """
        data = self.convert(image, mode)
        return self._driver.display(data)

    def show_file(self, path: str, mode: int | None = None) -> float:
        """
        Load, convert and display an image file.

        Without an explicit mode, the filename convention
        (DD_MM_X_name.ext) picks one, falling back to the canvas default.
        """
        if mode is None:
            mode = DitherMode.from_filename(path, default=self.mode)
        logger.info("Showing %s with %s", path, DitherMode.name(mode))
        return self.show_image(self.load(path), mode)

    def show_region(self, image, x: int, y: int, mode: int | None = None) -> float:
        """Convert an image and display it as a window at (x, y)."""
        grid = self.quantize(image, mode)
        h, w = grid.shape
        return self._driver.display_region(pack(grid), x, y, w, h)

    def clear(self, color: int = WHITE) -> float:
        return self._driver.clear(color)

    def sleep(self):
        """Enter deep sleep mode."""
        self._driver.sleep()
