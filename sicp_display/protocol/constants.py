# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP protocol constants.

A SICP packet has the form:

    <size> <target_id> [<group_id>] <payload...> <checksum>

where size counts every byte of the packet including itself and the checksum,
and checksum is the XOR of every preceding byte.
"""

from __future__ import annotations

from enum import Enum

from ..internal_types import *

MIN_PACKET_LENGTH = 3
"""size + target_id + checksum, with no group id and an empty payload."""

MAX_PACKET_LENGTH = 0xFF
"""The size field is a single byte."""

BROADCAST_TARGET_ID = 0x00
"""Target id addressing every display on the segment. Displays typically do not reply."""

# Reply sentinels
ACK = 0x06
"""Command received and accepted."""

NACK = 0x15
"""Command received but rejected (e.g., bad checksum or bad parameters)."""

NAV = 0x18
"""Command not available in the display's current state or on this model."""

FILLER = 0xFF
"""'No change' value for sibling parameters packed into the same command."""


class Opcode(int, Enum):
    """Payload opcodes consumed by this package."""
    POWER_GET = 0x19
    POWER_SET = 0x18
    INPUT_SET = 0xAC
    VIDEO_PARAMETERS_SET = 0x32
    VOLUME_SET = 0x44


class PowerStatus(int, Enum):
    """Power status byte, as carried by power-set and power-get replies."""
    OFF = 0x01
    ON = 0x02


DEFAULT_FILL_COUNTS: Dict[int, int] = {
    Opcode.VOLUME_SET.value: 1,             # [0x44, speaker_volume, audio_out_volume]
    Opcode.VIDEO_PARAMETERS_SET.value: 6,   # [0x32, brightness, color, contrast, sharpness, tint, black_level, gamma]
  }
"""Number of trailing FILLER bytes appended after the value byte for absolute set commands,
   by command code. Codes not in this table take no filler."""

DEFAULT_BRIGHTNESS_CODE = Opcode.VIDEO_PARAMETERS_SET.value
"""Absolute command used for brightness when no brightness codes are configured."""
