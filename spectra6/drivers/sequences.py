"""
7IN3E Init Sequence & Configuration Constants
=============================================
Register payloads written during initialize(), and the timing limits
used for every busy wait.

The init table is written in order. Values come from the panel
vendor's reference sequence for the 800x480 Spectra 6 glass.
"""
from . import commands as CMD

# =============================================================================
# Register Initialization (command, data) - written in order
# =============================================================================

INIT_SEQUENCE = (
    (CMD.CMD_CMDH, (0x49, 0x55, 0x20, 0x08, 0x09, 0x18)),
    (CMD.CMD_POWER_SETTING, (0x3F,)),
    (CMD.CMD_PANEL_SETTING, (0x5F, 0x69)),
    (CMD.CMD_POWER_OFF_SEQ, (0x00, 0x54, 0x00, 0x44)),
    (CMD.CMD_BOOSTER_1, (0x40, 0x1F, 0x1F, 0x2C)),
    (CMD.CMD_BOOSTER_2, (0x6F, 0x1F, 0x17, 0x49)),
    (CMD.CMD_BOOSTER_3, (0x6F, 0x1F, 0x1F, 0x22)),
    (CMD.CMD_PLL, (0x03,)),
    (CMD.CMD_CDI, (0x3F,)),
    (CMD.CMD_TCON, (0x02, 0x00)),
    (CMD.CMD_RESOLUTION, None),  # filled from the handle's resolution
    (CMD.CMD_T_VDCS, (0x01,)),
    (CMD.CMD_PWS, (0x2F,)),
)

# =============================================================================
# Command Payloads
# =============================================================================

REFRESH_DATA = 0x00           # DRF parameter: normal refresh
POWER_OFF_DATA = 0x00         # POF parameter
DEEP_SLEEP_CHECK = 0xA5       # DSLP check code


def resolution_data(width: int, height: int) -> tuple:
    """TRES payload: source (width) and gate (height), big-endian."""
    return (width >> 8, width & 0xFF, height >> 8, height & 0xFF)


# =============================================================================
# Reset Pulse (milliseconds)
# =============================================================================

RESET_HIGH_MS = 20.0          # RST released before pulse
RESET_LOW_MS = 2.0            # RST pulse
RESET_RECOVERY_MS = 20.0      # RST released after pulse

POST_RESET_DELAY = 0.03       # Settle before first command (seconds)

# =============================================================================
# Operation Timeouts (seconds)
# =============================================================================

TIMEOUT_INIT = 5.0            # Controller ready after reset
TIMEOUT_POWER = 5.0           # Power on/off sequences
TIMEOUT_REFRESH = 60.0        # Full colour refresh: ~20s typical

# =============================================================================
# Busy Polling
# =============================================================================

POLL_INTERVAL_MS = 5
