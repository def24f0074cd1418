"""
Errors - Exception Taxonomy
===========================
Every failure the library raises on purpose derives from Spectra6Error.

    InputError            Bad image, mode, option, code or buffer length.
                          Raised before any hardware I/O.
    ProtocolError         Operation invalid in the current PanelState, or a
                          window outside the panel. Raised before any bus
                          traffic.
    HardwareTimeoutError  BUSY never cleared within the allowed time.
                          Recover with reset() + initialize().
    BusyWaitCancelled     A busy wait was cancelled through its event.
"""


class Spectra6Error(Exception):
    """Base class for all library errors."""


class InputError(Spectra6Error, ValueError):
    """Invalid caller-supplied data."""


class ProtocolError(Spectra6Error, RuntimeError):
    """Panel operation invoked in the wrong state or with a bad window."""


class HardwareTimeoutError(Spectra6Error, TimeoutError):
    """Panel BUSY line did not clear in time."""


class BusyWaitCancelled(HardwareTimeoutError):
    """Busy wait aborted by its cancel event."""
