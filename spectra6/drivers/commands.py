"""
7IN3E Command Constants
=======================
Register addresses and command bytes for the Spectra 6 7.3" controller.

Organized by functional category for easier navigation.
"""

# =============================================================================
# Panel Configuration
# =============================================================================

CMD_PANEL_SETTING = 0x00      # PSR - resolution select, scan direction
CMD_CMDH = 0xAA               # Command header unlock (vendor sequence)
CMD_TCON = 0x60               # TCON - gate/source non-overlap period
CMD_RESOLUTION = 0x61         # TRES - source and gate resolution
CMD_PLL = 0x30                # PLL - frame rate
CMD_CDI = 0x50                # VCOM and data interval setting
CMD_T_VDCS = 0x84             # VCOM DC setting timing
CMD_PWS = 0xE3                # Power saving

# =============================================================================
# Power Control
# =============================================================================

CMD_POWER_SETTING = 0x01      # PWR - internal supply levels
CMD_POWER_OFF = 0x02          # POF - turn off charge pumps
CMD_POWER_OFF_SEQ = 0x03      # PFS - power off sequence timing
CMD_POWER_ON = 0x04           # PON - turn on charge pumps, BUSY until done
CMD_DEEP_SLEEP = 0x07         # DSLP - requires check code 0xA5

# =============================================================================
# Booster Soft Start
# =============================================================================

CMD_BOOSTER_1 = 0x05          # BTST1
CMD_BOOSTER_2 = 0x06          # BTST2
CMD_BOOSTER_3 = 0x08          # BTST3

# =============================================================================
# Display Update Sequence
# =============================================================================

CMD_DATA_START = 0x10         # DTM - start of 4-bit frame data
CMD_DISPLAY_REFRESH = 0x12    # DRF - drive the frame, BUSY until done
