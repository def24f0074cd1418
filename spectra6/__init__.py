"""
spectra6
========
Image dithering and a panel driver for the 7.3" Spectra 6 (7IN3E)
six-colour e-paper display.

Architecture
------------
The library is organized into layers:

    Canvas          Image pipeline + display management
       │
       ├── quantize()       Dither engine (five modes)
       │      │
       │      └── palette        Six-ink palette and nearest-colour match
       │
       ├── pack()           Two 4-bit codes per byte
       │
       └── EPD7in3E     Display driver (command/power state machine)
              │
              └── SPIDevice   Low-level SPI communication

Quick Start
-----------
    from spectra6 import Canvas

    with Canvas() as canvas:
        canvas.init()
        canvas.show_file("photo.jpg")
        canvas.sleep()

Conversion Only
---------------
    from spectra6 import DitherMode, quantize, pack

    grid = quantize(rgb_array, DitherMode.FLOYD_STEINBERG)
    frame = pack(grid)

Module Structure
----------------
    spectra6/
    ├── canvas.py            High-level interface
    ├── palette.py           Palette and matching
    ├── imageio.py           Pillow loading and previews
    ├── errors.py            Exception taxonomy
    ├── cli.py               Command line front-end
    ├── dither/
    │   ├── modes.py         DitherMode and filename convention
    │   ├── matrices.py      Threshold matrices and defaults
    │   └── engine.py        quantize()
    ├── buffer/
    │   └── framebuffer.py   pack/unpack and FrameBuffer
    ├── drivers/
    │   ├── base.py          DisplayDriver protocol
    │   ├── epd7in3e.py      7IN3E controller driver
    │   ├── commands.py      Command constants
    │   ├── sequences.py     Init sequence, timings
    │   └── state.py         Panel state machine
    └── hardware/
        ├── handle.py        PanelHandle
        └── spi.py           SPI communication layer
"""

# Palette
from .palette import (
    PALETTE,
    PaletteEntry,
    BLACK,
    WHITE,
    YELLOW,
    RED,
    BLUE,
    GREEN,
    match,
)

# Errors
from .errors import (
    Spectra6Error,
    InputError,
    ProtocolError,
    HardwareTimeoutError,
    BusyWaitCancelled,
)

# Dithering and packing
from .dither import DitherMode, quantize
from .buffer import FrameBuffer, pack, unpack, blank

# Hardware layer
from .hardware import PanelHandle, SPIDevice

# Driver layer
from .drivers import EPD7in3E, DisplayDriver, PanelState, DriverState

# High-level interface
from .canvas import Canvas

__all__ = [
    # High-level
    "Canvas",
    # Palette
    "PALETTE",
    "PaletteEntry",
    "match",
    # Dithering
    "DitherMode",
    "quantize",
    # Buffer
    "FrameBuffer",
    "pack",
    "unpack",
    "blank",
    # Drivers
    "EPD7in3E",
    "DisplayDriver",
    "PanelState",
    "DriverState",
    # Hardware
    "PanelHandle",
    "SPIDevice",
    # Errors
    "Spectra6Error",
    "InputError",
    "ProtocolError",
    "HardwareTimeoutError",
    "BusyWaitCancelled",
    # Colors
    "BLACK",
    "WHITE",
    "YELLOW",
    "RED",
    "BLUE",
    "GREEN",
]

__version__ = "1.0.0"
