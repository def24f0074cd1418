"""
Buffer subsystem - packed controller buffers.

Modules:
    framebuffer: pack/unpack of index grids and the FrameBuffer class
"""
from .framebuffer import (
    FrameBuffer,
    blank,
    buffer_size,
    check_codes,
    fill_byte,
    pack,
    row_stride,
    unpack,
)

__all__ = [
    "FrameBuffer",
    "blank",
    "buffer_size",
    "check_codes",
    "fill_byte",
    "pack",
    "row_stride",
    "unpack",
]
