"""
PanelState - State Management for the 7IN3E Driver
==================================================
Lifecycle of the controller as seen by the driver.

State Diagram:
    UNINITIALIZED --> RESETTING      (reset)
    SLEEPING      --> RESETTING      (reset)
    INITIALIZED   --> RESETTING      (reset, e.g. after a timeout)
    RESETTING     --> INITIALIZED    (initialize)
    INITIALIZED   --> TRANSMITTING   (frame data on the bus)
    TRANSMITTING  --> REFRESHING     (refresh triggered, BUSY active)
    REFRESHING    --> INITIALIZED    (BUSY released)
    INITIALIZED   --> SLEEPING       (sleep)

A failed busy wait or bus error mid-sequence drops back to INITIALIZED
(or RESETTING during initialize) with needs_reset set; only reset() is
accepted until then.

Only a power cycle puts the controller back in UNINITIALIZED.
"""

from ..errors import ProtocolError


class PanelState:
    """
    Panel state enumeration.

    RESETTING is also the resting state between reset() and
    initialize(): the reset pulse is done and the controller waits for
    its register sequence.
    """
    UNINITIALIZED = 0  # Power-on state, needs reset
    RESETTING = 1      # Reset issued, needs initialize
    INITIALIZED = 2    # Registers written, idle, can accept frames
    TRANSMITTING = 3   # Frame data being written
    REFRESHING = 4     # Refresh in progress, BUSY active
    SLEEPING = 5       # Deep sleep, only reset() is valid

    _names = {
        0: "UNINITIALIZED",
        1: "RESETTING",
        2: "INITIALIZED",
        3: "TRANSMITTING",
        4: "REFRESHING",
        5: "SLEEPING",
    }

    @classmethod
    def name(cls, state: int) -> str:
        """Get human-readable state name."""
        return cls._names.get(state, f"UNKNOWN({state})")


# States from which reset() may be issued (no sequence in flight)
RESTING_STATES = (
    PanelState.UNINITIALIZED,
    PanelState.RESETTING,
    PanelState.INITIALIZED,
    PanelState.SLEEPING,
)


class DriverState:
    """
    Complete driver state container.

    Attributes:
        state: Current PanelState
        refresh_count: Refreshes completed since the last reset
        needs_reset: Set when a sequence failed part-way (busy timeout,
            cancelled wait, bus error). The controller may still be busy,
            so only reset() is accepted until it is cleared.
    """

    def __init__(self, state: int = PanelState.UNINITIALIZED):
        self.state = state
        self.refresh_count = 0
        self.needs_reset = False

    def require(self, *allowed: int, operation: str = "operation", ignore_fault: bool = False):
        """
        Raise ProtocolError unless the current state is in `allowed`.

        Also raises while a failed sequence is pending a reset, unless
        `ignore_fault` is set (reset itself).

        Called before any bus traffic so a rejected call writes nothing.
        """
        if self.needs_reset and not ignore_fault:
            raise ProtocolError(
                f"Cannot {operation}: a previous sequence failed, reset() required"
            )
        if self.state not in allowed:
            expected = ", ".join(PanelState.name(s) for s in allowed)
            raise ProtocolError(
                f"Cannot {operation} in state {PanelState.name(self.state)} "
                f"(requires {expected})"
            )

    def on_reset(self):
        """Transition after the hardware reset pulse."""
        self.state = PanelState.RESETTING
        self.refresh_count = 0
        self.needs_reset = False

    def on_init_complete(self):
        """Transition after the register sequence."""
        self.state = PanelState.INITIALIZED

    def on_transmit(self):
        self.state = PanelState.TRANSMITTING

    def on_refresh_start(self):
        self.state = PanelState.REFRESHING

    def on_refresh_complete(self):
        """Transition after BUSY released at the end of a refresh."""
        self.state = PanelState.INITIALIZED
        self.refresh_count += 1

    def on_fault(self, resting: int = PanelState.INITIALIZED):
        """
        Record a sequence that failed part-way.

        The state drops back to `resting` (INITIALIZED for transfers,
        RESETTING for initialize) and stays locked until reset().
        """
        self.state = resting
        self.needs_reset = True

    def on_sleep(self):
        self.state = PanelState.SLEEPING

    @property
    def is_sleeping(self) -> bool:
        return self.state == PanelState.SLEEPING

    @property
    def is_ready(self) -> bool:
        return self.state == PanelState.INITIALIZED and not self.needs_reset

    @property
    def is_busy(self) -> bool:
        return self.state in (PanelState.TRANSMITTING, PanelState.REFRESHING)

    def __repr__(self) -> str:
        return (
            f"DriverState("
            f"state={PanelState.name(self.state)}, "
            f"refreshes={self.refresh_count}, "
            f"needs_reset={self.needs_reset})"
        )
