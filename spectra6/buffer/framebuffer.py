"""
FrameBuffer - Packed 4-bit Buffer for the 7IN3E Controller
==========================================================
Serialises palette index grids into the controller's native layout
and back.

Layout:
- Two pixels per byte, row-major, left-to-right, top-to-bottom
- First pixel in bits 4-7, second in bits 0-3
- Row stride fixed at ceil(width / 2) bytes
- Odd widths: the row's last byte repeats its last pixel in the
  low nibble

Only the six palette codes may be packed; 0x4 and 0x7 are rejected.
"""
import numpy as np

from ..errors import InputError
from ..palette import WHITE, is_valid_code, valid_mask

# =============================================================================
# Bit Manipulation Constants
# =============================================================================

_PIXELS_PER_BYTE = 2
_HIGH_SHIFT = 4
_NIBBLE_MASK = 0x0F
_HIGH_MASK = 0xF0
_NIBBLE_FILL = 0x11  # code repeated in both nibbles


def row_stride(width: int) -> int:
    """Bytes per row for a given pixel width."""
    return (width + 1) // _PIXELS_PER_BYTE


def buffer_size(width: int, height: int) -> int:
    """Packed size in bytes of a width x height image."""
    return row_stride(width) * height


def fill_byte(code: int) -> int:
    """Byte holding `code` in both nibbles."""
    if not is_valid_code(code):
        raise InputError(f"Invalid palette code {code!r}")
    return code * _NIBBLE_FILL


def _check_dims(width: int, height: int):
    if width <= 0 or height <= 0:
        raise InputError(f"Dimensions must be positive, got {width}x{height}")


def _validate_grid(grid) -> np.ndarray:
    arr = np.asarray(grid)
    if arr.ndim != 2:
        raise InputError(f"Index grid must be 2-D, got shape {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise InputError("Index grid is empty")
    bad = ~valid_mask(arr)
    if bad.any():
        y, x = np.argwhere(bad)[0]
        raise InputError(f"Invalid palette code {arr[y, x]!r} at ({x}, {y})")
    return arr.astype(np.uint8, copy=False)


def check_codes(data) -> np.ndarray:
    """
    Verify every nibble of a packed buffer, padding included.

    Returns:
        The buffer as a flat uint8 array

    Raises:
        InputError: If any nibble holds a reserved code
    """
    raw = np.frombuffer(bytes(data), dtype=np.uint8)
    bad = ~(valid_mask(raw >> _HIGH_SHIFT) & valid_mask(raw & _NIBBLE_MASK))
    if bad.any():
        i = int(np.argmax(bad))
        raise InputError(f"Reserved palette code in byte {i} (0x{int(raw[i]):02X})")
    return raw


# =============================================================================
# Pack / Unpack
# =============================================================================

def pack(grid) -> bytes:
    """
    Pack an index grid into controller bytes.

    Args:
        grid: H x W array of palette device codes

    Returns:
        bytes of length H * ceil(W / 2)

    Raises:
        InputError: If the grid is empty, not 2-D, or holds an invalid code
    """
    arr = _validate_grid(grid)
    if arr.shape[1] % 2:
        arr = np.concatenate([arr, arr[:, -1:]], axis=1)
    packed = (arr[:, 0::2] << _HIGH_SHIFT) | arr[:, 1::2]
    return packed.astype(np.uint8).tobytes()


def unpack(data, width: int, height: int) -> np.ndarray:
    """
    Unpack controller bytes into an index grid.

    Inverse of pack(); the padding nibble of odd-width rows is checked
    like any other, then dropped.

    Raises:
        InputError: On length mismatch or any reserved code
    """
    _check_dims(width, height)
    stride = row_stride(width)
    expected = stride * height
    if len(data) != expected:
        raise InputError(
            f"Buffer must be {expected} bytes for {width}x{height}, got {len(data)}"
        )

    raw = check_codes(data).reshape(height, stride)
    grid = np.empty((height, stride * _PIXELS_PER_BYTE), dtype=np.uint8)
    grid[:, 0::2] = raw >> _HIGH_SHIFT
    grid[:, 1::2] = raw & _NIBBLE_MASK
    return grid[:, :width].copy()


def blank(rows: int, cols: int, code: int = WHITE) -> bytes:
    """
    Buffer of rows x cols pixels, all `code`.

    blank(10, 10, WHITE) is 50 bytes of 0x11.
    """
    _check_dims(cols, rows)
    return bytes((fill_byte(code),)) * buffer_size(cols, rows)


class FrameBuffer:
    """
    Mutable packed buffer with pixel access.

    Coordinates outside the buffer are ignored on write and read as
    WHITE, so callers can draw partially off-screen.
    """

    def __init__(self, width: int, height: int, color: int = WHITE):
        _check_dims(width, height)
        self._w = width
        self._h = height
        self._row_bytes = row_stride(width)
        self._buffer_size = self._row_bytes * height
        self._buffer = bytearray((fill_byte(color),)) * self._buffer_size

    @classmethod
    def from_grid(cls, grid) -> "FrameBuffer":
        """Build a buffer from an H x W index grid."""
        data = pack(grid)
        h, w = np.asarray(grid).shape
        fb = cls(w, h)
        fb._buffer[:] = data
        return fb

    @classmethod
    def from_bytes(cls, data, width: int, height: int) -> "FrameBuffer":
        """Wrap packed bytes after validating them."""
        unpack(data, width, height)
        fb = cls(width, height)
        fb._buffer[:] = data
        return fb

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def width(self) -> int: return self._w

    @property
    def height(self) -> int: return self._h

    @property
    def row_bytes(self) -> int: return self._row_bytes

    @property
    def buffer(self) -> bytearray: return self._buffer

    def __bytes__(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self) -> int:
        return self._buffer_size

    # =========================================================================
    # Pixel Ops
    # =========================================================================

    def _set_nibble(self, px: int, py: int, code: int) -> None:
        idx = py * self._row_bytes + (px >> 1)
        if px & 1:
            self._buffer[idx] = (self._buffer[idx] & _HIGH_MASK) | code
        else:
            self._buffer[idx] = (self._buffer[idx] & _NIBBLE_MASK) | (code << _HIGH_SHIFT)
            # odd width: mirror the last pixel into the padding nibble
            if px == self._w - 1:
                self._buffer[idx] = (self._buffer[idx] & _HIGH_MASK) | code

    def pixel(self, x: int, y: int, code: int) -> None:
        if not is_valid_code(code):
            raise InputError(f"Invalid palette code {code!r}")
        if not (0 <= x < self._w and 0 <= y < self._h): return
        self._set_nibble(x, y, code)

    def get_pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self._w and 0 <= y < self._h): return WHITE
        byte = self._buffer[y * self._row_bytes + (x >> 1)]
        return byte & _NIBBLE_MASK if x & 1 else byte >> _HIGH_SHIFT

    # =========================================================================
    # Buffer Ops
    # =========================================================================

    def clear(self, code: int = WHITE) -> None:
        """Fill the whole buffer with one code."""
        self._buffer[:] = bytes((fill_byte(code),)) * self._buffer_size

    def fill_rect(self, x: int, y: int, w: int, h: int, code: int) -> None:
        """Fill a rectangle, clipped to the buffer."""
        fill = fill_byte(code)
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + w, self._w), min(y + h, self._h)
        if x0 >= x1 or y0 >= y1: return

        for py in range(y0, y1):
            self._hline_phys(x0, py, x1 - x0, code, fill)

    def _hline_phys(self, px: int, py: int, length: int, code: int, fill: int) -> None:
        end = px + length
        # leading odd pixel
        if px & 1:
            self._set_nibble(px, py, code)
            px += 1
        # trailing pixel that starts a byte
        if end > px and end & 1:
            self._set_nibble(end - 1, py, code)
            end -= 1
        if end > px:
            row = py * self._row_bytes
            self._buffer[row + (px >> 1):row + (end >> 1)] = bytes((fill,)) * ((end - px) >> 1)

    def blit_grid(self, grid, x: int = 0, y: int = 0) -> None:
        """Paste an index grid with its top-left corner at (x, y), clipped."""
        arr = _validate_grid(grid)
        gh, gw = arr.shape
        for row in range(gh):
            py = y + row
            if not 0 <= py < self._h: continue
            for col in range(gw):
                px = x + col
                if 0 <= px < self._w:
                    self._set_nibble(px, py, int(arr[row, col]))

    def get_region(self, x: int, y: int, w: int, h: int) -> bytearray:
        """
        Copy out a byte-aligned rectangle.

        Raises:
            InputError: If x or w is odd, or the rectangle leaves the buffer
        """
        if x % _PIXELS_PER_BYTE or w % _PIXELS_PER_BYTE:
            raise InputError("x/w must be multiples of 2")
        if w <= 0 or h <= 0 or x < 0 or y < 0 or x + w > self._w or y + h > self._h:
            raise InputError(f"Region {w}x{h}+{x}+{y} outside {self._w}x{self._h} buffer")

        dst_stride = w // _PIXELS_PER_BYTE
        region = bytearray(dst_stride * h)
        x_byte = x // _PIXELS_PER_BYTE
        for row in range(h):
            src = (y + row) * self._row_bytes + x_byte
            dst = row * dst_stride
            region[dst:dst + dst_stride] = self._buffer[src:src + dst_stride]
        return region

    # =========================================================================
    # Format Conversion
    # =========================================================================

    def to_grid(self) -> np.ndarray:
        return unpack(self._buffer, self._w, self._h)
