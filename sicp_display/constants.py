# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by sicp_display"""

DEFAULT_PORT = 5000
"""The listen port number used by the display for SICP over TCP/IP."""

DEFAULT_TIMEOUT = 1.2
"""The default timeout for connecting to the display and for waiting on reply
   bytes, in seconds."""

HALF_CLOSE_DELAY = 0.2
"""Seconds after the command is written before the write side of the connection is
   shut down. Some firmwares keep the socket open forever otherwise."""

POWER_SETTLE_DELAY = 0.3
"""Seconds to wait after powering the display on before sending input, volume or
   brightness commands."""

DEFAULT_STEP_DELAY = 0.12
"""Default seconds between single-step commands when an axis is driven in relative mode."""

DEFAULT_POLL_INTERVAL = 10.0
"""Default seconds between background power queries. 0 disables polling."""

DEFAULT_VOLUME = 15
"""Assumed volume at startup, before anything has been set."""

DEFAULT_BRIGHTNESS = 50
"""Assumed brightness at startup, before anything has been set."""

BACKLIGHT_ON_MIN_BRIGHTNESS = 10
"""Brightness applied when the backlight is switched on from minimum brightness."""
