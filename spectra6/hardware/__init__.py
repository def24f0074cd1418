"""
Hardware abstraction layer.

Modules:
    handle: PanelHandle pin and resolution description
    spi: Low-level SPI communication for EPD controllers
"""
from .handle import PanelHandle
from .spi import SPIDevice

__all__ = ["PanelHandle", "SPIDevice"]
